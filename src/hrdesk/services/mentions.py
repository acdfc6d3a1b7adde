"""Mention extraction for comment text.

Two mechanisms live here and do not depend on each other: the persisted
mention set is recomputed from the final text with an email-shaped token
(``@user@example.com``), while the composer's type-ahead works from the
shorter ``@prefix`` immediately before the cursor.
"""

from __future__ import annotations

import re

MENTION_PATTERN = re.compile(r"@([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
TYPEAHEAD_PATTERN = re.compile(r"@(\w*)$")


def extract_mentions(text: str) -> list[str]:
    """Return the email-shaped mention tokens in ``text``, first occurrence order."""

    return list(dict.fromkeys(match.group(1) for match in MENTION_PATTERN.finditer(text or "")))


def active_mention_prefix(text: str, cursor: int | None = None) -> str | None:
    """Return the ``@prefix`` being typed at ``cursor``, or ``None``.

    An empty string means the user has typed a bare ``@``.
    """

    text = text or ""
    before = text if cursor is None else text[: max(cursor, 0)]
    match = TYPEAHEAD_PATTERN.search(before)
    if match is None:
        return None
    return match.group(1)


__all__ = [
    "MENTION_PATTERN",
    "TYPEAHEAD_PATTERN",
    "active_mention_prefix",
    "extract_mentions",
]
