"""Price quotes from swap aggregators."""

from chainagent.routing.base import Quote, QuoteProvider
from chainagent.routing.zero_x import NATIVE_TOKEN_ADDRESS, ZeroXQuoteClient

__all__ = [
    "Quote",
    "QuoteProvider",
    "ZeroXQuoteClient",
    "NATIVE_TOKEN_ADDRESS",
]
