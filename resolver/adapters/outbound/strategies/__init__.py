from .base import HttpStrategy
from .direct_fetch import DirectFetchStrategy
from .relay import RelayStrategy
from .scrape import ScrapeStrategy
from .structured_query import StructuredQueryStrategy

__all__ = [
    "HttpStrategy",
    "ScrapeStrategy",
    "StructuredQueryStrategy",
    "DirectFetchStrategy",
    "RelayStrategy",
]
