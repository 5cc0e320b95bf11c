"""RSS/Atom Feed 抓取器."""

import logging
import time
from datetime import datetime
from typing import Any

import feedparser
import httpx
from pydantic import BaseModel, Field

from feeddigest.errors import FetchError
from feeddigest.models.article import CandidateArticle
from feeddigest.utils.clock import utcnow

logger = logging.getLogger(__name__)


class FetchResult(BaseModel):
    """单个 Feed 抓取结果."""

    feed_id: int
    url: str
    success: bool
    articles: list[CandidateArticle] = Field(default_factory=list)
    error: str | None = None


class FeedFetcher:
    """下载并解析 Feed，转换为待入库文章."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def fetch(self, feed_url: str, feed_id: int) -> FetchResult:
        """
        抓取单个 Feed.

        任何下载或解析错误都不会抛出，而是返回 success=False 的结果，
        由调用方决定是否继续处理其他 Feed。
        """
        try:
            document = await self._download(feed_url)
            articles = self._parse(document, feed_id)
        except FetchError as e:
            logger.warning(f"抓取 Feed 失败: {feed_url}, error={e}")
            return FetchResult(feed_id=feed_id, url=feed_url, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"抓取 Feed 出现意外错误: {feed_url}")
            return FetchResult(
                feed_id=feed_id,
                url=feed_url,
                success=False,
                error=f"{type(e).__name__}: {e}",
            )

        logger.info(f"抓取 Feed 完成: {feed_url}, 文章数={len(articles)}")
        return FetchResult(
            feed_id=feed_id, url=feed_url, success=True, articles=articles
        )

    async def _download(self, url: str) -> bytes:
        """下载 Feed 原始内容."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {e.response.status_code}"
            raise FetchError(msg) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"{type(e).__name__}: {e}"
            raise FetchError(msg) from e
        return response.content

    def _parse(self, document: bytes, feed_id: int) -> list[CandidateArticle]:
        """解析 Feed 文档."""
        parsed = feedparser.parse(document)

        # bozo 但仍有条目时按宽松模式继续（常见于编码声明不一致的 Feed）
        if parsed.bozo and not parsed.entries:
            msg = f"无法解析 Feed: {parsed.get('bozo_exception')}"
            raise FetchError(msg)

        return [self._to_candidate(entry, feed_id) for entry in parsed.entries]

    def _to_candidate(self, entry: Any, feed_id: int) -> CandidateArticle:
        """将 Feed 条目转换为待入库文章."""
        return CandidateArticle(
            title=entry.get("title") or "",
            link=entry.get("link") or "",
            content=_entry_content(entry),
            published_at=_entry_published(entry),
            feed_id=feed_id,
            sent=False,
        )


def _entry_content(entry: Any) -> str:
    """正文优先，其次摘要."""
    for block in entry.get("content") or []:
        value = block.get("value")
        if value:
            return value
    return entry.get("summary") or ""


def _entry_published(entry: Any) -> datetime:
    """发布时间，缺失时使用当前时间."""
    parsed: time.struct_time | None = entry.get("published_parsed") or entry.get(
        "updated_parsed"
    )
    if parsed:
        # feedparser 已统一转换为 UTC
        return datetime(*parsed[:6])
    return utcnow()
