"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio

from feeddigest.core.store import ArticleStore
from feeddigest.models.article import CandidateArticle
from feeddigest.models.database import Database

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """创建测试用的 SQLite 数据库（临时文件）."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def store(database: Database) -> ArticleStore:
    """创建测试用的文章存储."""
    return ArticleStore(database)


@pytest_asyncio.fixture
async def feed_id(store: ArticleStore) -> int:
    """注册一个测试 Feed."""
    return await store.register_feed("http://a.test/feed.xml")


@pytest.fixture
def make_candidate() -> Callable[..., CandidateArticle]:
    """构造待入库文章."""

    def _make(
        feed_id: int,
        title: str,
        link: str | None = None,
        minutes: int = 0,
        content: str = "",
    ) -> CandidateArticle:
        return CandidateArticle(
            title=title,
            link=link if link is not None else f"http://a.test/{title}",
            content=content,
            published_at=BASE_TIME + timedelta(minutes=minutes),
            feed_id=feed_id,
        )

    return _make
