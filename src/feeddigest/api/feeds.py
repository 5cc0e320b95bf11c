"""Feed 订阅源 API."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from feeddigest.api.deps import get_store, get_validator
from feeddigest.core.store import ArticleStore
from feeddigest.errors import DuplicateFeedError, FeedValidationError
from feeddigest.fetcher.validator import FeedValidator

router = APIRouter(prefix="/api/feeds", tags=["feeds"])


class FeedCreate(BaseModel):
    """新增 Feed 请求."""

    url: str


@router.get("")
async def list_feeds(
    store: ArticleStore = Depends(get_store),
) -> dict:
    """获取订阅列表."""
    feeds = await store.list_feeds()

    return {
        "total": len(feeds),
        "feeds": [
            {
                "id": feed.id,
                "url": feed.url,
                "last_checked": feed.last_checked.isoformat()
                if feed.last_checked
                else None,
            }
            for feed in feeds
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_feed(
    payload: FeedCreate,
    store: ArticleStore = Depends(get_store),
    validator: FeedValidator = Depends(get_validator),
) -> dict:
    """校验并注册 Feed."""
    try:
        await validator.validate(payload.url)
        feed_id = await store.register_feed(payload.url)
    except FeedValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except DuplicateFeedError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return {"id": feed_id, "url": payload.url}


@router.delete("")
async def remove_feed(
    url: str = Query(..., description="Feed URL"),
    store: ArticleStore = Depends(get_store),
) -> dict:
    """删除 Feed 及其文章."""
    removed = await store.remove_feed(url)
    if not removed:
        raise HTTPException(status_code=404, detail="Feed 不存在")

    return {"url": url, "removed": True}
