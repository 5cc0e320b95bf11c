"""FeedDigest - RSS 订阅抓取与邮件摘要服务."""

__version__ = "0.1.0"
