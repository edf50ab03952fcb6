"""0x Swap API price client.

Uses the permit2 price endpoint for indicative prices on a single chain.
API docs: https://0x.org/docs/api#tag/Swap/operation/swap::permit2::getPrice
"""

import logging
from typing import Optional

import httpx

from chainagent.errors import QuoteUnavailableError
from chainagent.routing.base import Quote, QuoteProvider

logger = logging.getLogger(__name__)

ZERO_X_PRICE_URL = "https://api.0x.org/swap/permit2/price"
ZERO_X_API_VERSION = "v2"

# 0x placeholder for the chain's native currency
NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"


def normalize_token(token: str) -> str:
    """Map the 'eth' symbol to the native placeholder; addresses pass through."""
    token = token.strip()
    if token.lower() == "eth":
        return NATIVE_TOKEN_ADDRESS
    return token


class ZeroXQuoteClient(QuoteProvider):
    """Indicative prices from the 0x aggregator."""

    def __init__(
        self,
        api_key: str,
        chain_id: int = 1,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """Initialize 0x client.

        Args:
            api_key: 0x API key
            chain_id: Chain the prices are requested for
            http_client: Shared client (created on first use if omitted)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.chain_id = chain_id
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def name(self) -> str:
        return "0x"

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _get_headers(self) -> dict:
        return {
            "0x-api-key": self.api_key,
            "0x-version": ZERO_X_API_VERSION,
        }

    async def fetch_price(self, sell_token: str, buy_token: str, sell_amount: int) -> httpx.Response:
        """Request a price; returns the successful response.

        Raises:
            QuoteUnavailableError: On transport failure or non-2xx status
        """
        params = {
            "sellToken": normalize_token(sell_token),
            "buyToken": normalize_token(buy_token),
            "sellAmount": str(sell_amount),
            "chainId": str(self.chain_id),
        }

        try:
            response = await self.client.get(
                ZERO_X_PRICE_URL,
                headers=self._get_headers(),
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(f"0x request failed: {e}")
            raise QuoteUnavailableError(f"0x request failed: {e}") from e

        if not response.is_success:
            logger.warning(f"0x API error: {response.status_code} - {response.text}")
            raise QuoteUnavailableError(f"0x API error: {response.text}")

        return response

    async def get_price_text(self, sell_token: str, buy_token: str, sell_amount: int) -> str:
        """Raw price response body, as the API returned it."""
        response = await self.fetch_price(sell_token, buy_token, sell_amount)
        return response.text

    async def get_price(self, sell_token: str, buy_token: str, sell_amount: int) -> Quote:
        response = await self.fetch_price(sell_token, buy_token, sell_amount)

        try:
            data = response.json()
        except ValueError as e:
            raise QuoteUnavailableError(f"0x returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise QuoteUnavailableError(f"0x returned an unexpected body: {response.text[:200]}")

        # liquidityAvailable=false responses carry no buyAmount
        buy_amount = data.get("buyAmount")
        if buy_amount is None:
            raise QuoteUnavailableError(
                f"0x has no liquidity for {sell_token} -> {buy_token}"
            )

        try:
            buy_amount = int(buy_amount)
        except (TypeError, ValueError) as e:
            raise QuoteUnavailableError(f"0x returned invalid buyAmount: {buy_amount!r}") from e

        logger.debug(f"0x price: {sell_amount} {sell_token} -> {buy_amount} {buy_token}")

        return Quote(
            provider=self.name,
            sell_token=normalize_token(sell_token),
            buy_token=normalize_token(buy_token),
            sell_amount=sell_amount,
            buy_amount=buy_amount,
            raw=response.text,
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
