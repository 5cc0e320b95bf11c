"""Feed 地址校验."""

import logging
from typing import ClassVar

import httpx
from lxml import etree

from feeddigest.errors import FeedValidationError

logger = logging.getLogger(__name__)


class FeedValidator:
    """注册前校验 URL 是否指向合法的 RSS/Atom 文档."""

    # rss: RSS 0.9x/2.0, feed: Atom, RDF: RSS 1.0
    FEED_ROOTS: ClassVar[set[str]] = {"rss", "feed", "RDF"}

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
        self._parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            recover=False,
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def validate(self, url: str) -> None:
        """
        校验 Feed 地址.

        Raises:
            FeedValidationError: 无法下载、不是合法 XML，或根节点不是 RSS/Atom
        """
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"无法获取 Feed: {e}"
            raise FeedValidationError(msg) from e

        root_name = self._root_name(response.content)
        if root_name not in self.FEED_ROOTS:
            msg = f"不是有效的 RSS/Atom Feed（根节点: {root_name}）"
            raise FeedValidationError(msg)

        logger.info(f"Feed 校验通过: {url} ({root_name})")

    def _root_name(self, document: bytes) -> str:
        """解析 XML 并返回根节点的本地名称."""
        try:
            root = etree.fromstring(document, parser=self._parser)
        except etree.XMLSyntaxError as e:
            msg = f"Feed 不是合法的 XML: {e}"
            raise FeedValidationError(msg) from e

        if root is None:
            msg = "Feed 文档为空"
            raise FeedValidationError(msg)

        return etree.QName(root).localname
