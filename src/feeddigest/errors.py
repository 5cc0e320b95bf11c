"""错误类型."""


class FeedDigestError(Exception):
    """FeedDigest 错误基类."""


class DuplicateFeedError(FeedDigestError):
    """Feed 已存在（URL 指纹重复）."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Feed 已存在: {url}")


class FeedValidationError(FeedDigestError):
    """Feed 地址不可访问或不是合法的 RSS/Atom 文档."""


class FetchError(FeedDigestError):
    """单个 Feed 抓取或解析失败."""


class DeliveryError(FeedDigestError):
    """摘要邮件发送失败."""


class StorageError(FeedDigestError):
    """数据库连接或完整性错误（去重冲突除外）."""
