"""摘要流水线 - 抓取、入库、发送、标记."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from feeddigest.core.store import ArticleStore
from feeddigest.errors import DeliveryError, StorageError
from feeddigest.fetcher.fetcher import FeedFetcher
from feeddigest.notifier.digest import DigestNotifier
from feeddigest.utils.clock import utcnow

logger = logging.getLogger(__name__)


class PipelineState:
    """流水线状态."""

    IDLE = "idle"
    LISTING_FEEDS = "listing_feeds"
    FETCHING_FEED = "fetching_feed"
    PERSISTING = "persisting"
    SELECTING_UNSENT = "selecting_unsent"
    NOTIFYING = "notifying"
    MARKING_SENT = "marking_sent"


class TickStatus:
    """单次执行结果状态."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class FeedOutcome:
    """单个 Feed 的处理结果."""

    feed_id: int
    url: str
    success: bool
    fetched: int = 0
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    error: str | None = None


@dataclass
class TickReport:
    """单次执行报告."""

    status: str = TickStatus.RUNNING
    started_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    feeds: list[FeedOutcome] = field(default_factory=list)
    unsent: int = 0
    delivered: bool = False
    marked_sent: int = 0
    delivery_error: str | None = None
    error: str | None = None

    @property
    def failed_feeds(self) -> list[FeedOutcome]:
        return [f for f in self.feeds if not f.success]

    def to_dict(self) -> dict[str, Any]:
        """转换为 JSON 友好的字典."""
        return {
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat()
            if self.completed_at
            else None,
            "feeds": [
                {
                    "feed_id": f.feed_id,
                    "url": f.url,
                    "success": f.success,
                    "fetched": f.fetched,
                    "inserted": f.inserted,
                    "skipped": f.skipped,
                    "failed": f.failed,
                    "error": f.error,
                }
                for f in self.feeds
            ],
            "unsent": self.unsent,
            "delivered": self.delivered,
            "marked_sent": self.marked_sent,
            "delivery_error": self.delivery_error,
            "error": self.error,
        }


class DigestPipeline:
    """
    摘要流水线.

    一次 tick：列出 Feed → 逐个抓取并入库 → 读取未发送文章 → 发送摘要
    → 确认送达后标记已发送。调度器和 HTTP 接口都通过 run_tick() 触发。
    """

    def __init__(
        self,
        store: ArticleStore,
        fetcher: FeedFetcher,
        notifier: DigestNotifier,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.notifier = notifier
        self.state = PipelineState.IDLE
        self.last_report: TickReport | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """是否正在执行."""
        return self._running

    async def run_tick(self) -> TickReport:
        """执行一次完整流程，已有 tick 运行时直接跳过."""
        if self._running:
            logger.info("已有 tick 在运行，跳过本次触发")
            return TickReport(status=TickStatus.SKIPPED, completed_at=utcnow())

        self._running = True
        report = TickReport()
        logger.info("开始执行摘要流程...")

        try:
            await self._run(report)
            report.status = TickStatus.COMPLETED
        except StorageError as e:
            report.status = TickStatus.FAILED
            report.error = str(e)
            logger.exception(f"摘要流程中止（state={self.state}）: {e}")
        except Exception as e:
            report.status = TickStatus.FAILED
            report.error = f"{type(e).__name__}: {e}"
            logger.exception(f"摘要流程出现意外错误（state={self.state}）: {e}")
        finally:
            report.completed_at = utcnow()
            self.state = PipelineState.IDLE
            self.last_report = report
            self._running = False

        logger.info(
            f"摘要流程结束: 状态={report.status}, Feed 数={len(report.feeds)}, "
            f"失败 Feed={len(report.failed_feeds)}, 未发送={report.unsent}, "
            f"已标记={report.marked_sent}"
        )
        return report

    async def _run(self, report: TickReport) -> None:
        self.state = PipelineState.LISTING_FEEDS
        feeds = await self.store.list_feeds()

        for feed in feeds:
            if feed.id is None:
                logger.warning(f"跳过没有 ID 的 Feed: {feed.url}")
                continue
            report.feeds.append(await self._process_feed(feed.id, feed.url))

        self.state = PipelineState.SELECTING_UNSENT
        unsent = await self.store.get_unsent_articles()
        report.unsent = len(unsent)
        if not unsent:
            logger.info("没有未发送的文章")
            return

        self.state = PipelineState.NOTIFYING
        try:
            report.delivered = await self.notifier.deliver(unsent)
        except DeliveryError as e:
            # 文章保持未发送状态，下一次 tick 重试
            report.delivery_error = str(e)
            logger.error(f"摘要发送失败，{len(unsent)} 篇文章留待下次发送: {e}")
            return

        if not report.delivered:
            return

        self.state = PipelineState.MARKING_SENT
        ids = [article.id for article in unsent if article.id is not None]
        report.marked_sent = await self.store.mark_sent(ids)

    async def _process_feed(self, feed_id: int, url: str) -> FeedOutcome:
        """抓取并入库单个 Feed."""
        self.state = PipelineState.FETCHING_FEED
        result = await self.fetcher.fetch(url, feed_id)
        if not result.success:
            return FeedOutcome(
                feed_id=feed_id, url=url, success=False, error=result.error
            )

        self.state = PipelineState.PERSISTING
        saved = await self.store.save_new_articles(result.articles)
        await self.store.mark_checked(feed_id)

        logger.info(
            f"Feed 入库完成: {url}, 新增={saved.inserted}, "
            f"重复={saved.skipped}, 失败={saved.failed}"
        )
        return FeedOutcome(
            feed_id=feed_id,
            url=url,
            success=True,
            fetched=len(result.articles),
            inserted=saved.inserted,
            skipped=saved.skipped,
            failed=saved.failed,
        )
