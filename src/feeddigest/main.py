"""FeedDigest 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from feeddigest.api import articles, digest, feeds
from feeddigest.config import get_settings
from feeddigest.core.pipeline import DigestPipeline
from feeddigest.core.store import ArticleStore
from feeddigest.errors import StorageError
from feeddigest.fetcher.fetcher import FeedFetcher
from feeddigest.fetcher.validator import FeedValidator
from feeddigest.models.database import init_db
from feeddigest.notifier.factory import create_notifier
from feeddigest.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    # 启动时初始化
    logger.info("正在初始化数据库...")
    database = await init_db(app_settings.database_url)

    store = ArticleStore(database, app_settings.article_fingerprint_scope)
    fetcher = FeedFetcher(
        timeout=app_settings.fetch_timeout_seconds,
        user_agent=app_settings.user_agent,
    )
    validator = FeedValidator(
        timeout=app_settings.fetch_timeout_seconds,
        user_agent=app_settings.user_agent,
    )
    notifier = create_notifier(app_settings)
    pipeline = DigestPipeline(store, fetcher, notifier)

    app.state.store = store
    app.state.validator = validator
    app.state.pipeline = pipeline

    if app_settings.scheduler_enabled:
        logger.info("正在启动定时任务...")
        create_scheduler(pipeline, app_settings)

    logger.info("FeedDigest 启动完成！")
    yield

    # 关闭时清理
    logger.info("正在关闭...")
    await shutdown_scheduler()
    await fetcher.close()
    await validator.close()
    await notifier.close()
    await database.dispose()
    logger.info("FeedDigest 已关闭")


app = FastAPI(
    title="FeedDigest",
    description="RSS 订阅抓取与邮件摘要服务",
    version="0.1.0",
    lifespan=lifespan,
)

# 注册路由
app.include_router(feeds.router)
app.include_router(articles.router)
app.include_router(digest.router)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """数据库不可用时返回 503."""
    logger.error(f"存储错误: {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "FeedDigest",
        "version": "0.1.0",
        "description": "RSS 订阅抓取与邮件摘要服务",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feeddigest.main:app",
        host="0.0.0.0",
        port=8000,
    )
