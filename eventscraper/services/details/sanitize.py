from __future__ import annotations

import re

MAX_SCRAPED_BODY = 50_000

_BLOCK_TAGS_RE = [
    re.compile(rf"<{tag}[^>]*>.*?</{tag}>", re.IGNORECASE | re.DOTALL)
    for tag in ("script", "style", "iframe", "noscript")
]
_INLINE_HANDLER_RE = re.compile(r"""\s+on\w+=("[^"]*"|'[^']*')""", re.IGNORECASE)
_JS_HREF_RE = re.compile(r"""href=("javascript:[^"]*"|'javascript:[^']*')""", re.IGNORECASE)
_GAP_RE = re.compile(r">\s{3,}<")
_SPACE_RE = re.compile(r"\s+")


def sanitize_html(html: str) -> str:
    """Strip executable markup, keep formatting tags."""
    for pattern in _BLOCK_TAGS_RE:
        html = pattern.sub("", html)
    html = _INLINE_HANDLER_RE.sub("", html)
    html = _JS_HREF_RE.sub('href="#"', html)
    html = _GAP_RE.sub("><", html)
    return html.replace("\x00", "").strip()


def clean_text(value: str | None) -> str:
    return _SPACE_RE.sub(" ", (value or "").strip())


def truncate(value: str, limit: int = MAX_SCRAPED_BODY) -> str:
    return value if len(value) <= limit else value[:limit]
