"""数据模型."""

from feeddigest.models.article import Article, CandidateArticle
from feeddigest.models.database import Database, init_db
from feeddigest.models.feed import Feed

__all__ = [
    "Article",
    "CandidateArticle",
    "Database",
    "Feed",
    "init_db",
]
