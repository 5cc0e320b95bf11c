"""Amazon SES 发送通道."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from feeddigest.errors import DeliveryError
from feeddigest.notifier.base import DeliveryTransport, DigestMessage

logger = logging.getLogger(__name__)


class SESTransport(DeliveryTransport):
    """
    通过 Amazon SES 发送邮件.

    boto3 是同步库，这里用线程池包装成异步。
    """

    def __init__(
        self,
        region: str = "us-east-1",
        access_key_id: str = "",
        secret_access_key: str = "",
        client: Any = None,
    ) -> None:
        if client is None:
            # 未配置密钥时交给 boto3 默认凭证链
            credentials: dict[str, str] = {}
            if access_key_id and secret_access_key:
                credentials = {
                    "aws_access_key_id": access_key_id,
                    "aws_secret_access_key": secret_access_key,
                }
            client = boto3.client("ses", region_name=region, **credentials)
        self._client = client
        self._executor = ThreadPoolExecutor(max_workers=1)

    async def send(self, message: DigestMessage) -> bool:
        """发送邮件，HTTP 200 视为送达."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._send_sync, message)

    def _send_sync(self, message: DigestMessage) -> bool:
        """同步发送."""
        try:
            response = self._client.send_email(
                Source=message.sender,
                Destination={"ToAddresses": [message.recipient]},
                Message={
                    "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": message.html_body, "Charset": "UTF-8"},
                        "Text": {"Data": message.text_body, "Charset": "UTF-8"},
                    },
                },
            )
        except (BotoCoreError, ClientError) as e:
            msg = f"SES 发送失败: {e}"
            raise DeliveryError(msg) from e

        status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        logger.info(f"SES 响应: status={status}, message_id={response.get('MessageId')}")
        return status == 200

    async def close(self) -> None:
        """关闭线程池."""
        self._executor.shutdown(wait=False)
