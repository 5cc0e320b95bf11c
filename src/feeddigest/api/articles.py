"""文章 API."""

from fastapi import APIRouter, Depends

from feeddigest.api.deps import get_store
from feeddigest.core.store import ArticleStore

router = APIRouter(prefix="/api/articles", tags=["articles"])


@router.get("/unsent")
async def list_unsent_articles(
    store: ArticleStore = Depends(get_store),
) -> dict:
    """获取未发送文章（按发布时间倒序）."""
    articles = await store.get_unsent_articles()

    return {
        "total": len(articles),
        "items": [
            {
                "id": article.id,
                "feed_id": article.feed_id,
                "title": article.title,
                "link": article.link,
                "published_at": article.published_at.isoformat(),
            }
            for article in articles
        ],
    }
