"""通知发送抽象基类."""

from abc import ABC, abstractmethod

from pydantic import BaseModel


class DigestMessage(BaseModel):
    """待发送的摘要邮件."""

    sender: str
    recipient: str
    subject: str
    html_body: str
    text_body: str
    article_count: int = 0


class DeliveryTransport(ABC):
    """发送通道抽象基类."""

    @abstractmethod
    async def send(self, message: DigestMessage) -> bool:
        """发送消息，仅在确认送达时返回 True."""
        ...

    async def close(self) -> None:  # noqa: B027
        """释放资源."""
