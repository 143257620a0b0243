"""Sanitizers for server-derived text shown to humans.

Model labels and alert messages originate from the language server and
are rendered by collaborators (status bar, tree views, notifications).
"""

from __future__ import annotations

import re

_CONTROL_CHARS_RE = re.compile("[\x00-\x1f\x7f\u200b-\u200f\u2028-\u202f\ufeff]")
_WHITESPACE_RE = re.compile(r"\s+")
_MARKDOWN_SPECIAL_RE = re.compile(r"([*_`\[\]()#!\\|>])")


def escape_markdown(text: str | None) -> str:
    """Backslash-escape markdown control characters in *text*."""
    if not text:
        return ""
    return _MARKDOWN_SPECIAL_RE.sub(r"\\\1", text)


def sanitize_notification_content(text: str | None, max_length: int = 100) -> str:
    """Strip control and zero-width characters, collapse whitespace, truncate.

    ``max_length`` is raised to 4 so at least one character survives
    next to the ellipsis.
    """
    if not text:
        return ""
    limit = max(4, max_length)
    sanitized = _CONTROL_CHARS_RE.sub("", text)
    sanitized = _WHITESPACE_RE.sub(" ", sanitized).strip()
    if len(sanitized) > limit:
        sanitized = sanitized[: limit - 3] + "..."
    return sanitized


def sanitize_label(text: str | None, max_length: int = 64) -> str:
    """Sanitize a model label or designation for compact display."""
    return sanitize_notification_content(text, max_length)
