"""HTML helpers for catalog descriptions."""

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def strip_html(html) -> str:
    """Convert an HTML fragment to plain text with collapsed whitespace.

    Args:
        html: HTML string (None is treated as empty)

    Returns:
        Visible text of the fragment
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()
