"""日志发送通道（开发调试用）."""

import logging

from feeddigest.notifier.base import DeliveryTransport, DigestMessage

logger = logging.getLogger(__name__)


class LogTransport(DeliveryTransport):
    """只把摘要写入日志，不真正发送."""

    async def send(self, message: DigestMessage) -> bool:
        """记录消息并视为送达."""
        logger.info(
            f"[dev] 摘要邮件: to={message.recipient}, subject={message.subject}, "
            f"文章数={message.article_count}\n{message.text_body}"
        )
        return True
