"""Command surface behind the MCP tools.

Each operation takes the plain strings an agent sends, validates them,
drives the chain/swap/HTTP collaborators and renders a text reply. Every
failure is raised as a ChainAgentError subclass.
"""

import logging
from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional

from web3 import Web3

from chainagent.chain.base import ChainClient
from chainagent.chain.erc20 import erc20_balance, erc20_decimals
from chainagent.config import Settings
from chainagent.errors import ParseError
from chainagent.hdwallet.keyring import Keyring
from chainagent.routing.base import QuoteProvider
from chainagent.routing.zero_x import NATIVE_TOKEN_ADDRESS, ZeroXQuoteClient
from chainagent.search.brave import BraveSearchClient
from chainagent.swap.executor import SwapExecutor
from chainagent.swap.guard import BalanceGuard
from chainagent.swap.planner import SwapDirection, SwapPlan, SwapPlanner, SwapRequest
from chainagent.swap.signer import TransactionSigner
from chainagent.swap.transfer import TransferExecutor

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1

UNPROTECTED_WARNING = (
    "Warning: no expected output was available, the swap was sent without "
    "slippage protection (minimum output 0)."
)


# ============================================================
# Input parsing
# ============================================================


def parse_address(field: str, value: Optional[str]) -> str:
    """Validate a hex address and return its checksum form."""
    text = (value or "").strip()
    if not Web3.is_address(text):
        raise ParseError(field, text, "expected a 20-byte hex address")
    return Web3.to_checksum_address(text)


def parse_optional_address(field: str, value: Optional[str]) -> Optional[str]:
    """Like parse_address, but blank means 'not given'."""
    if value is None or not value.strip():
        return None
    return parse_address(field, value)


def parse_ether(field: str, value: Optional[str]) -> int:
    """Parse a decimal ETH amount ('0.5') into wei."""
    text = (value or "").strip()
    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ParseError(field, text, "expected a decimal ETH amount") from e

    if not amount.is_finite() or amount < 0:
        raise ParseError(field, text, "amount must be a non-negative number")

    # Enough precision to scale every input digit without rounding
    with localcontext() as ctx:
        ctx.prec = len(amount.as_tuple().digits) + 18
        wei = amount.scaleb(18)
        if wei != wei.to_integral_value():
            raise ParseError(field, text, "more than 18 decimal places")
        if wei > MAX_UINT256:
            raise ParseError(field, text, "amount exceeds the uint256 range")
        return int(wei)


def parse_base_units(field: str, value: Optional[str]) -> int:
    """Parse a non-negative integer amount in token base units."""
    text = (value or "").strip()
    if not (text.isascii() and text.isdigit()):
        raise ParseError(field, text, "expected a non-negative integer in base units")
    amount = int(text)
    if amount > MAX_UINT256:
        raise ParseError(field, text, "amount exceeds the uint256 range")
    return amount


def parse_optional_base_units(field: str, value: Optional[str]) -> int:
    """Blank or missing parses as 0."""
    if value is None or not value.strip():
        return 0
    return parse_base_units(field, value)


def parse_optional_ether(field: str, value: Optional[str]) -> int:
    if value is None or not value.strip():
        return 0
    return parse_ether(field, value)


def parse_quote_token(field: str, value: Optional[str]) -> str:
    """A token address, or the 'eth' symbol for native currency."""
    text = (value or "").strip()
    if text.lower() == "eth":
        return text
    return parse_address(field, text)


def format_units(amount: int, decimals: int) -> str:
    """Render base units as a decimal string with `decimals` places."""
    if decimals <= 0:
        return str(amount)
    value = Decimal(amount).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# ============================================================
# Toolkit
# ============================================================


class Toolkit:
    """Blockchain, quote and search operations exposed as tools."""

    def __init__(
        self,
        chain: ChainClient,
        keyring: Keyring,
        quotes: QuoteProvider,
        search: BraveSearchClient,
        settings: Settings,
    ):
        self.chain = chain
        self.keyring = keyring
        self.quotes = quotes
        self.search = search
        self.settings = settings

        self.guard = BalanceGuard(chain, gas_estimate=settings.swap_gas_estimate)
        self.signer = TransactionSigner(chain)
        self.planner = SwapPlanner(
            slippage_percent=settings.slippage_percent,
            window_seconds=settings.deadline_seconds,
        )
        self.transfers = TransferExecutor(chain, keyring, guard=self.guard, signer=self.signer)
        self.swaps = SwapExecutor(chain, keyring, guard=self.guard, signer=self.signer)
        self.wrapped_native = Web3.to_checksum_address(settings.weth_address)

    @classmethod
    def from_settings(cls, settings: Settings, chain: ChainClient) -> "Toolkit":
        """Build the keyring and HTTP clients from configuration."""
        keyring = Keyring.derive(settings.wallet_seed_phrase, settings.account_count)
        quotes = ZeroXQuoteClient(settings.zero_x_api_key, chain_id=settings.quote_chain_id)
        search = BraveSearchClient(settings.brave_api_key)
        return cls(chain, keyring, quotes, search, settings)

    async def close(self) -> None:
        await self.quotes.close()
        await self.search.close()

    # ------------------------------------------------------------
    # Accounts and contracts
    # ------------------------------------------------------------

    async def get_balance(self, address: str) -> str:
        """Native balance of `address` in wei, as a decimal string."""
        checksum = parse_address("address", address)
        balance = await self.chain.get_balance(checksum)
        return str(balance)

    async def transfer(self, sender: Optional[str], receiver: str, amount: str) -> str:
        """Send `amount` ETH from `sender` (or the default account) to `receiver`."""
        sender_address = parse_optional_address("sender", sender)
        receiver_address = parse_address("receiver", receiver)
        amount_wei = parse_ether("amount", amount)

        outcome = await self.transfers.transfer(sender_address, receiver_address, amount_wei)
        return outcome.summary()

    async def get_contract(self, address: str) -> str:
        """Report whether bytecode is deployed at `address`."""
        checksum = parse_address("address", address)
        code = await self.chain.get_code(checksum)
        if not code:
            return f"No contract deployed at {checksum}"
        return f"Contract deployed at {checksum} ({len(code)} bytes of bytecode)"

    async def get_erc20_balance(self, token: str, account: str) -> str:
        """ERC20 balance of `account`, scaled by the token's decimals."""
        token_address = parse_address("token", token)
        account_address = parse_address("account", account)

        balance = await erc20_balance(self.chain, token_address, account_address)
        decimals = await erc20_decimals(self.chain, token_address)

        return (
            f"{format_units(balance, decimals)} "
            f"({balance} base units, {decimals} decimals) held by {account_address}"
        )

    # ------------------------------------------------------------
    # External services
    # ------------------------------------------------------------

    async def get_quote(self, sell_token: str, buy_token: str, amount: str) -> str:
        """Raw 0x price response for selling `amount` base units of `sell_token`."""
        sell = parse_quote_token("sell_token", sell_token)
        buy = parse_quote_token("buy_token", buy_token)
        sell_amount = parse_base_units("amount", amount)

        return await self.quotes.get_price_text(sell, buy, sell_amount)

    async def web_search(self, query: str) -> str:
        """Raw Brave search response for `query`."""
        query = (query or "").strip()
        if not query:
            raise ParseError("query", query, "search query must not be empty")
        return await self.search.search(query)

    # ------------------------------------------------------------
    # Swaps
    # ------------------------------------------------------------

    async def _plan(self, request: SwapRequest) -> SwapPlan:
        if request.expected_output == 0:
            # Ask the aggregator with the native placeholder for currency
            token = request.token_address
            sell, buy = (
                (NATIVE_TOKEN_ADDRESS, token)
                if request.direction == SwapDirection.CURRENCY_TO_TOKEN
                else (token, NATIVE_TOKEN_ADDRESS)
            )
            request.expected_output = await self.quotes.expected_output(
                sell, buy, request.input_amount
            )

        return self.planner.plan_request(request, self.wrapped_native)

    async def _swap(self, request: SwapRequest) -> str:
        plan = await self._plan(request)

        # The named account always receives the output, even when it cannot sign
        if request.direction == SwapDirection.CURRENCY_TO_TOKEN:
            execute = self.swaps.swap_currency_for_token
        else:
            execute = self.swaps.swap_token_for_currency
        outcome = await execute(
            plan,
            request.router_address,
            request.account_address,
            request.input_amount,
            recipient=request.account_address,
        )

        summary = outcome.summary()
        if not plan.is_protected:
            summary = f"{summary}\n{UNPROTECTED_WARNING}"
        return summary

    async def swap_currency_for_token(
        self,
        router: str,
        amount_in: str,
        min_out: Optional[str],
        token_out: str,
        account: Optional[str],
    ) -> str:
        """Swap ETH for `token_out` through a Uniswap V2 router.

        Args:
            router: Router contract address
            amount_in: ETH to spend (decimal, not wei)
            min_out: Expected token output in base units; blank to ask for a quote
            token_out: Token to buy
            account: Receiving account; it also signs when held by the keyring,
                otherwise the default account signs
        """
        request = SwapRequest(
            router_address=parse_address("router", router),
            input_amount=parse_ether("amount_in", amount_in),
            expected_output=parse_optional_base_units("min_out", min_out),
            token_address=parse_address("token_out", token_out),
            account_address=parse_optional_address("account", account),
            direction=SwapDirection.CURRENCY_TO_TOKEN,
        )
        return await self._swap(request)

    async def swap_token_for_currency(
        self,
        router: str,
        amount_in: str,
        min_out: Optional[str],
        token_in: str,
        account: Optional[str],
    ) -> str:
        """Swap `token_in` for ETH through a Uniswap V2 router.

        The router must already be approved to spend `amount_in` of the token.

        Args:
            router: Router contract address
            amount_in: Tokens to sell, in base units
            min_out: Expected ETH output (decimal, not wei); blank to ask for a quote
            token_in: Token to sell
            account: Receiving account; it also signs when held by the keyring,
                otherwise the default account signs
        """
        request = SwapRequest(
            router_address=parse_address("router", router),
            input_amount=parse_base_units("amount_in", amount_in),
            expected_output=parse_optional_ether("min_out", min_out),
            token_address=parse_address("token_in", token_in),
            account_address=parse_optional_address("account", account),
            direction=SwapDirection.TOKEN_TO_CURRENCY,
        )
        return await self._swap(request)
