"""First-keyword classification of SQL statements.

This is a heuristic rather than a parser. Text that starts with a comment, a
``WITH`` clause, or leading whitespace is rejected, as is a keyword glued to a
``;`` or ``(``.
"""

from __future__ import annotations

import re
from enum import Enum


class Category(str, Enum):
    READ = "read"
    WRITE = "write"
    REJECTED = "rejected"


READ_KEYWORDS: frozenset[str] = frozenset({"select"})

WRITE_KEYWORDS: frozenset[str] = frozenset(
    {
        "insert",
        "update",
        "delete",
        "create",
        "drop",
        "alter",
        "truncate",
        "replace",
        "begin",
        "commit",
        "rollback",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")


def leading_keyword(sql_text: str) -> str:
    """Return the lower-cased token before the first whitespace run."""

    return _WHITESPACE_RE.split(sql_text, maxsplit=1)[0].lower()


def classify(sql_text: str) -> Category:
    keyword = leading_keyword(sql_text)
    if keyword in READ_KEYWORDS:
        return Category.READ
    if keyword in WRITE_KEYWORDS:
        return Category.WRITE
    return Category.REJECTED


__all__ = ["Category", "READ_KEYWORDS", "WRITE_KEYWORDS", "classify", "leading_keyword"]
