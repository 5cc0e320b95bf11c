"""Feed 抓取与校验模块."""

from feeddigest.fetcher.fetcher import FeedFetcher, FetchResult
from feeddigest.fetcher.validator import FeedValidator

__all__ = [
    "FeedFetcher",
    "FeedValidator",
    "FetchResult",
]
