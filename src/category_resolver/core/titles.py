"""
Article title normalization helpers.

MediaWiki treats underscores and spaces as equivalent, collapses runs of
whitespace and capitalizes the first letter. Target aliases additionally
compare case-insensitively.
"""

from __future__ import annotations

import re
from typing import FrozenSet, Iterable

_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    text = _WHITESPACE.sub(" ", title.replace("_", " ")).strip()
    if not text:
        return text
    return text[0].upper() + text[1:]


def title_key(title: str) -> str:
    """Case-insensitive comparison key."""
    return normalize_title(title).casefold()


class TargetAliases:
    """
    Set of titles that must never be reported as blocked.
    """

    def __init__(self, aliases: Iterable[str]) -> None:
        self._keys: FrozenSet[str] = frozenset(title_key(a) for a in aliases if a.strip())

    def __contains__(self, title: object) -> bool:
        return isinstance(title, str) and title_key(title) in self._keys

    def __len__(self) -> int:
        return len(self._keys)
