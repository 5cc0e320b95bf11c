"""Feed 订阅源模型."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class Feed(SQLModel, table=True):
    """RSS 订阅源."""

    __tablename__ = "feeds"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    url: str = Field(sa_column=Column(Text, nullable=False), description="Feed URL")
    fingerprint: str = Field(
        max_length=64,
        unique=True,
        description="URL 的 SHA-256 指纹（唯一键）",
    )
    last_checked: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True, index=True),
        description="最近一次成功抓取时间（naive UTC）",
    )
