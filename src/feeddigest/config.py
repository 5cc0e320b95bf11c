"""应用配置管理."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 数据库配置
    database_url: str = "sqlite+aiosqlite:///./feeddigest.db"

    # 调度配置
    scheduler_enabled: bool = True
    poll_interval_minutes: int = 60

    # Feed 抓取配置
    fetch_timeout_seconds: int = 30
    user_agent: str = "FeedDigest/0.1 (+https://github.com/feeddigest)"

    # 去重配置：title 为全局按标题去重，feed_title 为按 Feed 内标题去重
    article_fingerprint_scope: Literal["title", "feed_title"] = "title"

    # 通知配置
    notifier_transport: Literal["ses", "log"] = "ses"
    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    email_sender: str = ""
    email_recipient: str = ""
    email_subject: str = "New RSS Posts Update"


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
