"""API 依赖注入."""

from fastapi import Request

from feeddigest.core.pipeline import DigestPipeline
from feeddigest.core.store import ArticleStore
from feeddigest.fetcher.validator import FeedValidator


def get_store(request: Request) -> ArticleStore:
    """获取文章存储."""
    return request.app.state.store


def get_validator(request: Request) -> FeedValidator:
    """获取 Feed 校验器."""
    return request.app.state.validator


def get_pipeline(request: Request) -> DigestPipeline:
    """获取摘要流水线."""
    return request.app.state.pipeline
