"""摘要邮件渲染与发送."""

import logging
from collections.abc import Sequence
from html import escape

from feeddigest.errors import DeliveryError
from feeddigest.models.article import Article
from feeddigest.notifier.base import DeliveryTransport, DigestMessage
from feeddigest.utils.html_parser import make_excerpt

logger = logging.getLogger(__name__)


def render_html(articles: Sequence[Article]) -> str:
    """渲染 HTML 正文."""
    items = []
    for article in articles:
        title = escape(article.title or article.link or "(untitled)")
        link = escape(article.link, quote=True)
        published = article.published_at.strftime("%Y-%m-%d %H:%M UTC")
        excerpt = escape(make_excerpt(article.content or ""))
        items.append(
            "<li>"
            f'<a href="{link}"><strong>{title}</strong></a>'
            f"<br><small>{published}</small>"
            + (f"<p>{excerpt}</p>" if excerpt else "")
            + "</li>"
        )

    return (
        "<html><body>"
        f"<h2>{len(articles)} new posts</h2>"
        f"<ul>{''.join(items)}</ul>"
        "</body></html>"
    )


def render_text(articles: Sequence[Article]) -> str:
    """渲染纯文本正文."""
    lines = [f"{len(articles)} new posts", ""]
    for article in articles:
        lines.append(f"- {article.title or article.link or '(untitled)'}")
        if article.link:
            lines.append(f"  {article.link}")
        lines.append(f"  {article.published_at.strftime('%Y-%m-%d %H:%M UTC')}")
    return "\n".join(lines)


class DigestNotifier:
    """把未发送文章渲染为摘要邮件并发送给固定收件人."""

    def __init__(
        self,
        transport: DeliveryTransport,
        sender: str,
        recipient: str,
        subject: str = "New RSS Posts Update",
    ) -> None:
        self.transport = transport
        self.sender = sender
        self.recipient = recipient
        self.subject = subject

    def render(self, articles: Sequence[Article]) -> DigestMessage:
        """渲染摘要邮件."""
        html_body = render_html(articles)
        return DigestMessage(
            sender=self.sender,
            recipient=self.recipient,
            subject=self.subject,
            html_body=html_body,
            text_body=render_text(articles),
            article_count=len(articles),
        )

    async def deliver(self, articles: Sequence[Article]) -> bool:
        """
        发送摘要.

        Args:
            articles: 待发送文章

        Returns:
            空列表返回 False；确认送达返回 True

        Raises:
            DeliveryError: 发送失败或未确认送达
        """
        if not articles:
            return False

        message = self.render(articles)
        try:
            confirmed = await self.transport.send(message)
        except DeliveryError:
            raise
        except Exception as e:
            msg = f"发送摘要失败: {e}"
            raise DeliveryError(msg) from e

        if not confirmed:
            msg = "发送通道未确认送达"
            raise DeliveryError(msg)

        logger.info(f"摘要已发送: to={self.recipient}, 文章数={len(articles)}")
        return True

    async def close(self) -> None:
        """关闭发送通道."""
        await self.transport.close()
