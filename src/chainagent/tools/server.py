"""MCP tool server.

Tools are declared in the TOOLS table below and registered on a FastMCP
instance. The Toolkit is built once at startup, so a bad mnemonic fails
fast, and is handed to every session through the lifespan context.
Operation failures reach the agent as MCP tool errors prefixed with the
failing operation.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from chainagent.chain.web3_client import Web3ChainClient
from chainagent.config import Settings, get_settings
from chainagent.errors import ChainAgentError
from chainagent.tools.toolkit import Toolkit

logger = logging.getLogger(__name__)

SERVER_NAME = "chainagent"

SERVER_INSTRUCTIONS = (
    "Ethereum tools: query balances, send ETH, inspect contracts and ERC20 "
    "balances, fetch 0x price quotes, swap through Uniswap V2 routers and "
    "search the web for contract addresses. ETH amounts are decimal ETH "
    "unless a parameter says base units."
)


@dataclass
class ServerContext:
    """Lifespan state shared by every tool call."""
    toolkit: Toolkit


def _toolkit(ctx: Context) -> Toolkit:
    return ctx.request_context.lifespan_context.toolkit


async def _invoke(failure: str, call: Awaitable[str]) -> str:
    """Await a toolkit call, mapping its failures to a ToolError."""
    try:
        return await call
    except ChainAgentError as e:
        logger.error(f"{failure}: {e}")
        raise ToolError(f"{failure}: {e}") from e


# ============================================================
# Tool handlers
# ============================================================


async def balance(ctx: Context, addr: str) -> str:
    """Get the balance of an account in wei.

    Args:
        addr: The address to check the balance for
    """
    return await _invoke("server failed to get balance", _toolkit(ctx).get_balance(addr))


async def send(ctx: Context, receiver: str, amount: str, sender: str = "") -> str:
    """Send an amount in ETH from one address to another.

    Args:
        receiver: Address receiving the funds
        amount: Amount in ETH, not wei (e.g. "0.5")
        sender: Sending account; the default account signs if blank or unknown
    """
    return await _invoke(
        "server failed to send", _toolkit(ctx).transfer(sender, receiver, amount)
    )


async def get_contract(ctx: Context, addr: str) -> str:
    """Check whether a contract is deployed at the given address.

    Args:
        addr: Contract address
    """
    return await _invoke("server failed to get contract", _toolkit(ctx).get_contract(addr))


async def get_erc20_balance(ctx: Context, erc20_addr: str, account: str) -> str:
    """Get the balance of an address for an ERC20 token using its decimals.

    Args:
        erc20_addr: ERC20 token contract address
        account: Holder address
    """
    return await _invoke(
        "server failed to get erc20 balance",
        _toolkit(ctx).get_erc20_balance(erc20_addr, account),
    )


async def web_search(ctx: Context, query: str) -> str:
    """Search the web, e.g. for contract addresses.

    Args:
        query: Query string to use for web search
    """
    return await _invoke("web search failed", _toolkit(ctx).web_search(query))


async def get_quote(ctx: Context, from_token: str, to_token: str, amount: str) -> str:
    """Get a 0x price quote for a swap from one token to another.

    Args:
        from_token: Token address to sell, or "eth"
        to_token: Token address to buy, or "eth"
        amount: Amount to sell in base units
    """
    return await _invoke(
        "quote request failed", _toolkit(ctx).get_quote(from_token, to_token, amount)
    )


async def swap_eth_for_tokens(
    ctx: Context,
    uniswap_address: str,
    amount_in: str,
    to_token_addr: str,
    min_amount_out: str = "",
    account_addr: str = "",
) -> str:
    """Swap ETH for a token through a Uniswap V2 router.

    Args:
        uniswap_address: Uniswap V2 router contract address
        amount_in: ETH to swap, in ETH not wei
        to_token_addr: Output token contract address
        min_amount_out: Expected token output in base units; blank to use a 0x quote
        account_addr: Account receiving the output; it signs when held, else the default account signs
    """
    return await _invoke(
        "token swap failed",
        _toolkit(ctx).swap_currency_for_token(
            uniswap_address, amount_in, min_amount_out, to_token_addr, account_addr
        ),
    )


async def swap_tokens_for_eth(
    ctx: Context,
    uniswap_address: str,
    amount_in: str,
    from_token_addr: str,
    min_amount_out: str = "",
    account_addr: str = "",
) -> str:
    """Swap a token for ETH through a Uniswap V2 router.

    The router must already be approved to spend the token.

    Args:
        uniswap_address: Uniswap V2 router contract address
        amount_in: Tokens to sell, in base units
        from_token_addr: Token contract address being sold
        min_amount_out: Expected ETH output, in ETH; blank to use a 0x quote
        account_addr: Account receiving the output; it signs when held, else the default account signs
    """
    return await _invoke(
        "token swap failed",
        _toolkit(ctx).swap_token_for_currency(
            uniswap_address, amount_in, min_amount_out, from_token_addr, account_addr
        ),
    )


# name -> (handler, description)
TOOLS: dict[str, tuple[Callable[..., Awaitable[str]], str]] = {
    "balance": (balance, "Get the balance of an account in wei"),
    "send": (send, "Sends an amount in ETH from one address to another"),
    "get_contract": (get_contract, "Checks whether a contract is deployed given the address"),
    "get_erc20_balance": (
        get_erc20_balance,
        "Gets the balance of an address for a specific erc20 token using its defined denominations",
    ),
    "web_search": (web_search, "Searches the web for different types of contract addresses"),
    "get_quote": (get_quote, "Gets a quote for a swap from one token type to another"),
    "swap_eth_for_tokens": (swap_eth_for_tokens, "Swaps ETH for a specified output token"),
    "swap_tokens_for_eth": (swap_tokens_for_eth, "Swaps specific tokens for ETH"),
}


# ============================================================
# Server construction
# ============================================================


def build_toolkit(settings: Settings) -> Toolkit:
    """Default toolkit: web3 node client plus derived keyring."""
    chain = Web3ChainClient(settings.eth_rpc, receipt_timeout=settings.receipt_timeout)
    return Toolkit.from_settings(settings, chain)


def create_server(
    settings: Optional[Settings] = None,
    toolkit: Optional[Toolkit] = None,
) -> FastMCP:
    """Create the MCP server with every tool registered.

    The caller owns the toolkit and closes it after the server stops.
    """
    settings = settings or get_settings()
    toolkit = toolkit or build_toolkit(settings)
    logger.info(f"Toolkit ready: {len(toolkit.keyring)} accounts, RPC {settings.eth_rpc}")

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[ServerContext]:
        yield ServerContext(toolkit=toolkit)

    server = FastMCP(
        SERVER_NAME,
        instructions=SERVER_INSTRUCTIONS,
        lifespan=lifespan,
        host=settings.mcp_server_address,
        port=settings.mcp_server_port,
        debug=settings.debug,
    )

    for name, (handler, description) in TOOLS.items():
        server.add_tool(handler, name=name, description=description)

    logger.debug(f"Registered tools: {', '.join(TOOLS)}")
    return server
