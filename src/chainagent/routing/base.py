"""Abstract interface for price quote providers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from chainagent.errors import QuoteUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class Quote:
    """An indicative price from a quote provider (amounts in base units)."""

    provider: str
    sell_token: str
    buy_token: str
    sell_amount: int
    buy_amount: int
    raw: str = ""  # Response body as returned by the provider


class QuoteProvider(ABC):
    """Abstract base class for quote providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    async def get_price(self, sell_token: str, buy_token: str, sell_amount: int) -> Quote:
        """Get an indicative price for selling `sell_amount` of `sell_token`.

        Raises:
            QuoteUnavailableError: If no price can be obtained
        """
        pass

    async def get_price_text(self, sell_token: str, buy_token: str, sell_amount: int) -> str:
        """Price response as text."""
        quote = await self.get_price(sell_token, buy_token, sell_amount)
        return quote.raw

    async def expected_output(self, sell_token: str, buy_token: str, sell_amount: int) -> int:
        """Expected buy amount, or 0 when no price is available.

        Swaps fall back to this value, so a failed quote degrades to an
        unprotected swap instead of aborting it.
        """
        try:
            quote = await self.get_price(sell_token, buy_token, sell_amount)
        except QuoteUnavailableError as e:
            logger.warning(f"{self.name} quote unavailable, using zero expected output: {e}")
            return 0
        return quote.buy_amount

    async def close(self) -> None:
        """Release network resources."""
        pass
