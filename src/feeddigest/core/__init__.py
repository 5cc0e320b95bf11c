"""核心业务逻辑."""

from feeddigest.core.pipeline import DigestPipeline, TickReport
from feeddigest.core.store import ArticleStore, SaveResult

__all__ = [
    "ArticleStore",
    "DigestPipeline",
    "SaveResult",
    "TickReport",
]
