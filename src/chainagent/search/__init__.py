"""Web search clients."""

from chainagent.search.brave import BraveSearchClient

__all__ = ["BraveSearchClient"]
