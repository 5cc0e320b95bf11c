"""文章存储 - Feed 与文章的持久化、去重和发送状态."""

import hashlib
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from sqlalchemy import delete, insert, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from feeddigest.errors import DuplicateFeedError, StorageError
from feeddigest.models.article import Article, CandidateArticle
from feeddigest.models.database import Database
from feeddigest.models.feed import Feed
from feeddigest.utils.clock import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

FingerprintScope = Literal["title", "feed_title"]


def fingerprint(value: str) -> str:
    """计算 SHA-256 指纹（64 位十六进制）."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def article_fingerprint(
    candidate: CandidateArticle, scope: FingerprintScope = "title"
) -> str:
    """
    计算文章去重指纹.

    scope 为 title 时只按标题计算，不同 Feed 的同名文章会被视为重复；
    scope 为 feed_title 时把 feed_id 一并纳入。
    """
    if scope == "feed_title":
        return fingerprint(f"{candidate.feed_id}:{candidate.title}")
    return fingerprint(candidate.title)


class InsertOutcome(str, Enum):
    """单条文章写入结果."""

    INSERTED = "inserted"
    SKIPPED = "skipped"  # 指纹或链接已存在
    FAILED = "failed"


@dataclass
class SaveResult:
    """批量写入结果."""

    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.inserted + self.skipped + self.failed

    def record(self, outcome: InsertOutcome, error: str | None = None) -> None:
        """累计一条写入结果."""
        if outcome is InsertOutcome.INSERTED:
            self.inserted += 1
        elif outcome is InsertOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            if error:
                self.errors.append(error)


class ArticleStore:
    """Feed 与文章存储."""

    def __init__(
        self,
        database: Database,
        fingerprint_scope: FingerprintScope = "title",
    ) -> None:
        self.db = database
        self.fingerprint_scope = fingerprint_scope

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        """把 SQLAlchemy 异常转换为 StorageError."""
        try:
            yield
        except SQLAlchemyError as e:
            msg = f"{operation} 失败: {e}"
            raise StorageError(msg) from e

    def _insert_ignore(self, values: dict[str, Any]) -> Any:
        """构造忽略唯一约束冲突的 INSERT 语句."""
        dialect = self.db.dialect
        if dialect == "sqlite":
            return sqlite.insert(Article).values(**values).on_conflict_do_nothing()
        if dialect == "postgresql":
            return (
                postgresql.insert(Article).values(**values).on_conflict_do_nothing()
            )
        if dialect in ("mysql", "mariadb"):
            return insert(Article).values(**values).prefix_with("IGNORE")

        msg = f"不支持的数据库方言: {dialect}"
        raise StorageError(msg)

    # ---- Feed ----

    async def register_feed(self, url: str) -> int:
        """
        注册新的 Feed.

        Args:
            url: Feed 地址

        Returns:
            新 Feed 的 ID

        Raises:
            DuplicateFeedError: 相同 URL 已注册
        """
        feed = Feed(url=url, fingerprint=fingerprint(url))

        async with self.db.session() as session:
            session.add(feed)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateFeedError(url) from e
            except SQLAlchemyError as e:
                await session.rollback()
                msg = f"注册 Feed 失败: {e}"
                raise StorageError(msg) from e

        logger.info(f"已注册 Feed: id={feed.id}, url={url}")
        return feed.id  # type: ignore[return-value]

    async def remove_feed(self, url: str) -> bool:
        """删除 Feed 及其所有文章，返回是否删除了记录."""
        stmt = delete(Feed).where(Feed.fingerprint == fingerprint(url))

        with self._storage_errors("删除 Feed"):
            async with self.db.session() as session:
                result = await session.execute(stmt)
                await session.commit()

        removed = result.rowcount > 0
        if removed:
            logger.info(f"已删除 Feed: {url}")
        return removed

    async def list_feeds(self) -> list[Feed]:
        """获取全部 Feed."""
        stmt = select(Feed).order_by(Feed.id)

        with self._storage_errors("获取 Feed 列表"):
            async with self.db.session() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

    async def get_feed_by_url(self, url: str) -> Feed | None:
        """按 URL 查找 Feed."""
        stmt = select(Feed).where(Feed.fingerprint == fingerprint(url))

        with self._storage_errors("查找 Feed"):
            async with self.db.session() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

    async def mark_checked(self, feed_id: int) -> None:
        """更新 Feed 最近一次成功抓取时间."""
        stmt = update(Feed).where(Feed.id == feed_id).values(last_checked=utcnow())

        with self._storage_errors("更新 Feed 抓取时间"):
            async with self.db.session() as session:
                await session.execute(stmt)
                await session.commit()

    # ---- Article ----

    async def save_new_articles(
        self, candidates: Sequence[CandidateArticle]
    ) -> SaveResult:
        """
        批量写入新文章.

        每条文章单独写入、单独提交：指纹或链接已存在的记录被静默跳过，
        单条写入失败只记录日志，不影响其余文章。
        """
        save_result = SaveResult()
        if not candidates:
            return save_result

        async with self.db.session() as session:
            for candidate in candidates:
                stmt = self._insert_ignore(
                    {
                        "title": candidate.title,
                        "link": candidate.link,
                        "fingerprint": article_fingerprint(
                            candidate, self.fingerprint_scope
                        ),
                        "content": candidate.content,
                        "published_at": to_naive_utc(candidate.published_at),
                        "feed_id": candidate.feed_id,
                        "sent": False,
                    }
                )
                try:
                    result = await session.execute(stmt)
                    await session.commit()
                except SQLAlchemyError as e:
                    await session.rollback()
                    logger.error(f"保存文章失败: title={candidate.title!r}, error={e}")
                    save_result.record(InsertOutcome.FAILED, str(e))
                    continue

                if result.rowcount > 0:
                    save_result.record(InsertOutcome.INSERTED)
                else:
                    save_result.record(InsertOutcome.SKIPPED)

        return save_result

    async def get_unsent_articles(self) -> list[Article]:
        """获取所有未发送文章，按发布时间倒序."""
        stmt = (
            select(Article)
            .where(Article.sent == False)  # noqa: E712
            .order_by(Article.published_at.desc(), Article.id.desc())  # type: ignore[union-attr]
        )

        with self._storage_errors("获取未发送文章"):
            async with self.db.session() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

    async def mark_sent(self, article_ids: Sequence[int]) -> int:
        """
        将指定文章标记为已发送.

        空列表直接返回；不存在的 ID 会被忽略。

        Returns:
            实际更新的行数
        """
        if not article_ids:
            return 0

        stmt = (
            update(Article)
            .where(Article.id.in_(list(article_ids)))  # type: ignore[union-attr]
            .where(Article.sent == False)  # noqa: E712
            .values(sent=True)
        )

        with self._storage_errors("标记已发送"):
            async with self.db.session() as session:
                result = await session.execute(stmt)
                await session.commit()

        logger.info(f"已标记 {result.rowcount} 篇文章为已发送")
        return result.rowcount
