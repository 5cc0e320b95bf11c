"""通知组件工厂."""

from feeddigest.config import Settings
from feeddigest.notifier.base import DeliveryTransport
from feeddigest.notifier.console import LogTransport
from feeddigest.notifier.digest import DigestNotifier
from feeddigest.notifier.ses import SESTransport


def create_transport(settings: Settings) -> DeliveryTransport:
    """根据配置创建发送通道."""
    if settings.notifier_transport == "log":
        return LogTransport()

    # 默认使用 SES
    return SESTransport(
        region=settings.aws_region,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )


def create_notifier(settings: Settings) -> DigestNotifier:
    """根据配置创建摘要通知器."""
    return DigestNotifier(
        transport=create_transport(settings),
        sender=settings.email_sender,
        recipient=settings.email_recipient,
        subject=settings.email_subject,
    )
