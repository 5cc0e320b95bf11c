"""数据库引擎和会话管理."""

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    """SQLite 默认不启用外键约束，级联删除依赖它."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """数据库访问对象：持有引擎和会话工厂."""

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self.url = database_url
        self.engine = create_async_engine(database_url, echo=echo)

        if self.engine.dialect.name == "sqlite":
            event.listen(
                self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys
            )

        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def dialect(self) -> str:
        """数据库方言名称（sqlite / postgresql / mysql）."""
        return self.engine.dialect.name

    async def create_all(self) -> None:
        """创建所有表（已存在则跳过）."""
        # 确保模型已注册到 metadata
        from feeddigest.models.article import Article  # noqa: F401
        from feeddigest.models.feed import Feed  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info(f"数据库表已就绪: {self.engine.url.render_as_string()}")

    def session(self) -> AsyncSession:
        """创建新的会话."""
        return self._session_factory()

    async def dispose(self) -> None:
        """关闭连接池."""
        await self.engine.dispose()


async def init_db(database_url: str) -> Database:
    """初始化数据库，创建所有表."""
    database = Database(database_url)
    await database.create_all()
    return database
