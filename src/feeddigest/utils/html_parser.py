"""HTML 解析工具."""

import re

from bs4 import BeautifulSoup


def html_to_text(html: str) -> str:
    """
    将 HTML 转换为纯文本.

    Args:
        html: HTML 内容

    Returns:
        提取的纯文本内容
    """
    if not html:
        return ""

    # 使用 BeautifulSoup 解析
    soup = BeautifulSoup(html, "lxml")

    # 移除 script 和 style 标签
    for element in soup(["script", "style"]):
        element.decompose()

    # 获取文本
    text = soup.get_text(separator="\n")

    # 清理多余空白
    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if line:
            lines.append(line)

    text = "\n".join(lines)

    # 合并连续空行
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text.strip()


def make_excerpt(html: str, max_length: int = 300) -> str:
    """
    生成摘要片段.

    先转换为纯文本并压缩空白，超出长度时在词边界截断并追加省略号。
    """
    text = " ".join(html_to_text(html).split())
    if len(text) <= max_length:
        return text

    cut = text[:max_length].rsplit(" ", 1)[0] or text[:max_length]
    return f"{cut}…"
