"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from feeddigest.config import Settings
from feeddigest.core.pipeline import DigestPipeline
from feeddigest.utils.clock import utcnow

logger = logging.getLogger(__name__)

DIGEST_JOB_ID = "digest_tick"

_scheduler: AsyncIOScheduler | None = None


async def digest_task(pipeline: DigestPipeline) -> None:
    """摘要任务：抓取所有 Feed 并发送未发送文章."""
    try:
        await pipeline.run_tick()
    except Exception as e:
        logger.exception(f"摘要任务失败: {e}")


def build_scheduler(pipeline: DigestPipeline, settings: Settings) -> AsyncIOScheduler:
    """
    创建调度器（不启动）.

    只有一个 interval 任务，首次执行时间为当前时间：启动后立即执行一次，
    之后按固定间隔执行。max_instances=1 保证上一次未结束时跳过本次触发。
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        digest_task,
        "interval",
        minutes=settings.poll_interval_minutes,
        args=[pipeline],
        id=DIGEST_JOB_ID,
        name="Feed 抓取 + 摘要发送",
        next_run_time=utcnow(),
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


def create_scheduler(pipeline: DigestPipeline, settings: Settings) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = build_scheduler(pipeline, settings)
    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，抓取间隔: {settings.poll_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
