"""Article 文章模型."""

from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlmodel import Field, SQLModel

from feeddigest.utils.clock import utcnow


class Article(SQLModel, table=True):
    """RSS 文章."""

    __tablename__ = "articles"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(max_length=1024, index=True, description="标题")
    link: str = Field(sa_column=Column(Text, nullable=False, unique=True))
    fingerprint: str = Field(
        max_length=64,
        unique=True,
        description="标题的 SHA-256 指纹（去重键）",
    )
    content: str | None = Field(default=None, sa_column=Column(Text))
    # 显式声明 DateTime 列：统一存储 naive UTC
    published_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, index=True),
        description="发布时间",
    )
    feed_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("feeds.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    sent: bool = Field(default=False, index=True, description="是否已发送")


class CandidateArticle(BaseModel):
    """从 Feed 解析出的待入库文章."""

    title: str = ""
    link: str = ""
    content: str = ""
    published_at: datetime
    feed_id: int
    sent: bool = False
