"""摘要通知模块."""

from feeddigest.notifier.base import DeliveryTransport, DigestMessage
from feeddigest.notifier.console import LogTransport
from feeddigest.notifier.digest import DigestNotifier
from feeddigest.notifier.factory import create_notifier, create_transport
from feeddigest.notifier.ses import SESTransport

__all__ = [
    "DeliveryTransport",
    "DigestMessage",
    "DigestNotifier",
    "LogTransport",
    "SESTransport",
    "create_notifier",
    "create_transport",
]
