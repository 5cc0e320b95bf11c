"""测试 ArticleStore."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from feeddigest.core.store import ArticleStore, article_fingerprint, fingerprint
from feeddigest.errors import DuplicateFeedError, StorageError
from feeddigest.models.article import Article, CandidateArticle
from feeddigest.models.database import Database
from feeddigest.utils.clock import utcnow


async def _all_articles(database: Database) -> list[Article]:
    async with database.session() as session:
        result = await session.execute(select(Article))
        return list(result.scalars().all())


class TestFingerprint:
    """测试指纹计算."""

    def test_sha256_hex(self) -> None:
        """指纹为 64 位十六进制 SHA-256."""
        value = fingerprint("http://a.test/feed.xml")
        assert len(value) == 64
        assert value == fingerprint("http://a.test/feed.xml")
        assert value != fingerprint("http://b.test/feed.xml")

    def test_article_scope(
        self, make_candidate: Callable[..., CandidateArticle]
    ) -> None:
        """title 范围忽略 feed_id，feed_title 范围区分 feed_id."""
        a = make_candidate(1, "Same")
        b = make_candidate(2, "Same")
        assert article_fingerprint(a) == article_fingerprint(b)
        assert article_fingerprint(a, "feed_title") != article_fingerprint(
            b, "feed_title"
        )


class TestFeeds:
    """测试 Feed 注册与删除."""

    async def test_register_returns_id(self, store: ArticleStore) -> None:
        """注册成功返回新 ID."""
        feed_id = await store.register_feed("http://a.test/feed.xml")
        assert isinstance(feed_id, int)

        feeds = await store.list_feeds()
        assert [f.url for f in feeds] == ["http://a.test/feed.xml"]
        assert feeds[0].fingerprint == fingerprint("http://a.test/feed.xml")
        assert feeds[0].last_checked is None

    async def test_register_duplicate_rejected(self, store: ArticleStore) -> None:
        """重复注册同一 URL 抛出 DuplicateFeedError 且不新增记录."""
        await store.register_feed("http://a.test/feed.xml")

        with pytest.raises(DuplicateFeedError):
            await store.register_feed("http://a.test/feed.xml")

        assert len(await store.list_feeds()) == 1

    async def test_get_feed_by_url(self, store: ArticleStore, feed_id: int) -> None:
        """按 URL 查找 Feed."""
        feed = await store.get_feed_by_url("http://a.test/feed.xml")
        assert feed is not None
        assert feed.id == feed_id
        assert await store.get_feed_by_url("http://missing.test/") is None

    async def test_remove_missing_returns_false(self, store: ArticleStore) -> None:
        """删除不存在的 Feed 返回 False."""
        assert await store.remove_feed("http://missing.test/feed.xml") is False

    async def test_remove_cascades_only_own_articles(
        self,
        store: ArticleStore,
        database: Database,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """删除 Feed 会删除其全部文章，不影响其他 Feed."""
        feed_a = await store.register_feed("http://a.test/feed.xml")
        feed_b = await store.register_feed("http://b.test/feed.xml")
        await store.save_new_articles(
            [
                make_candidate(feed_a, "A1"),
                make_candidate(feed_a, "A2"),
                make_candidate(feed_b, "B1"),
            ]
        )

        assert await store.remove_feed("http://a.test/feed.xml") is True

        remaining = await _all_articles(database)
        assert [a.title for a in remaining] == ["B1"]
        assert [f.id for f in await store.list_feeds()] == [feed_b]

    async def test_mark_checked(self, store: ArticleStore, feed_id: int) -> None:
        """mark_checked 更新 last_checked."""
        before = utcnow()
        await store.mark_checked(feed_id)
        feeds = await store.list_feeds()

        last_checked = feeds[0].last_checked
        assert last_checked is not None
        assert last_checked.tzinfo is None
        assert before <= last_checked <= utcnow()


class TestSaveNewArticles:
    """测试文章去重写入."""

    async def test_empty_batch(self, store: ArticleStore) -> None:
        """空列表不做任何事."""
        result = await store.save_new_articles([])
        assert result.total == 0

    async def test_same_title_twice_stores_one(
        self,
        store: ArticleStore,
        database: Database,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """同一标题写入两次只保留一条."""
        first = await store.save_new_articles([make_candidate(feed_id, "X")])
        second = await store.save_new_articles([make_candidate(feed_id, "X")])

        assert first.inserted == 1
        assert second.inserted == 0
        assert second.skipped == 1
        assert second.failed == 0

        articles = await _all_articles(database)
        assert len(articles) == 1
        assert articles[0].title == "X"
        assert articles[0].sent is False

    async def test_duplicate_within_batch(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """同一批次内的重复条目被跳过."""
        result = await store.save_new_articles(
            [
                make_candidate(feed_id, "X", link="http://a.test/x1"),
                make_candidate(feed_id, "X", link="http://a.test/x2"),
                make_candidate(feed_id, "Y"),
            ]
        )
        assert result.inserted == 2
        assert result.skipped == 1

    async def test_duplicate_link_skipped(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """链接重复（标题不同）同样被跳过."""
        result = await store.save_new_articles(
            [
                make_candidate(feed_id, "Old title", link="http://a.test/post"),
                make_candidate(feed_id, "New title", link="http://a.test/post"),
            ]
        )
        assert result.inserted == 1
        assert result.skipped == 1

    async def test_unknown_feed_fails_row_without_aborting(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """单条写入失败不影响其余文章."""
        result = await store.save_new_articles(
            [
                make_candidate(9999, "Orphan"),
                make_candidate(feed_id, "Valid"),
            ]
        )
        assert result.failed == 1
        assert result.inserted == 1
        assert len(result.errors) == 1

    async def test_feed_title_scope_allows_same_title_across_feeds(
        self,
        database: Database,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """feed_title 范围下不同 Feed 的同名文章都会保存."""
        store = ArticleStore(database, fingerprint_scope="feed_title")
        feed_a = await store.register_feed("http://a.test/feed.xml")
        feed_b = await store.register_feed("http://b.test/feed.xml")

        result = await store.save_new_articles(
            [
                make_candidate(feed_a, "Same", link="http://a.test/same"),
                make_candidate(feed_b, "Same", link="http://b.test/same"),
            ]
        )
        assert result.inserted == 2

    async def test_published_at_round_trip(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """发布时间写入后原样读回（naive UTC）."""
        result = await store.save_new_articles([make_candidate(feed_id, "X", minutes=5)])
        assert result.inserted == 1
        assert result.failed == 0

        unsent = await store.get_unsent_articles()
        assert unsent[0].published_at == datetime(2025, 1, 1, 12, 5)
        assert unsent[0].published_at.tzinfo is None

    async def test_aware_published_at_stored_as_utc(
        self,
        store: ArticleStore,
        feed_id: int,
    ) -> None:
        """带时区的发布时间转换为 UTC 后保存."""
        candidate = CandidateArticle(
            title="Z",
            link="http://a.test/z",
            published_at=datetime(
                2025, 1, 1, 20, 0, tzinfo=timezone(timedelta(hours=8))
            ),
            feed_id=feed_id,
        )
        await store.save_new_articles([candidate])

        unsent = await store.get_unsent_articles()
        assert unsent[0].published_at == datetime(2025, 1, 1, 12, 0)


class TestUnsentLifecycle:
    """测试未发送文章与标记."""

    async def test_unsent_ordered_newest_first(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """未发送文章按发布时间倒序."""
        await store.save_new_articles(
            [
                make_candidate(feed_id, "X", minutes=0),
                make_candidate(feed_id, "Y", minutes=30),
            ]
        )

        unsent = await store.get_unsent_articles()
        assert [a.title for a in unsent] == ["Y", "X"]

    async def test_mark_sent_empty_is_noop(self, store: ArticleStore) -> None:
        """空列表不更新任何记录."""
        assert await store.mark_sent([]) == 0

    async def test_mark_sent_ignores_missing_ids(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """有效与已删除 ID 混合时只更新有效的."""
        await store.save_new_articles(
            [make_candidate(feed_id, "X"), make_candidate(feed_id, "Y", minutes=1)]
        )
        unsent = await store.get_unsent_articles()
        ids = [a.id for a in unsent]

        updated = await store.mark_sent([*ids, 12345, 67890])

        assert updated == 2
        assert await store.get_unsent_articles() == []

    async def test_mark_sent_is_monotonic(
        self,
        store: ArticleStore,
        feed_id: int,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """已发送文章再次标记不计数，也不会重新出现在未发送列表."""
        await store.save_new_articles([make_candidate(feed_id, "X")])
        ids = [a.id for a in await store.get_unsent_articles()]

        assert await store.mark_sent(ids) == 1
        assert await store.mark_sent(ids) == 0

        # 重新抓取同一文章不会重置 sent
        await store.save_new_articles([make_candidate(feed_id, "X")])
        assert await store.get_unsent_articles() == []

    async def test_register_ingest_deliver_scenario(
        self,
        store: ArticleStore,
        make_candidate: Callable[..., CandidateArticle],
    ) -> None:
        """注册 → 入库 X/Y → 读取 2 篇 → 标记 → 未发送为 0."""
        feed_id = await store.register_feed("http://a.test/feed.xml")
        await store.save_new_articles(
            [
                make_candidate(feed_id, "X", minutes=10),
                make_candidate(feed_id, "Y", minutes=20),
            ]
        )

        unsent = await store.get_unsent_articles()
        assert [a.title for a in unsent] == ["Y", "X"]
        assert all(a.sent is False for a in unsent)

        await store.mark_sent([a.id for a in unsent])
        assert await store.get_unsent_articles() == []


class TestStorageErrors:
    """测试存储错误转换."""

    async def test_missing_tables_raise_storage_error(self, tmp_path) -> None:
        """表不存在时抛出 StorageError."""
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        store = ArticleStore(db)
        try:
            with pytest.raises(StorageError):
                await store.list_feeds()
            with pytest.raises(StorageError):
                await store.get_unsent_articles()
        finally:
            await db.dispose()
