"""
Top-Level Categories

The closed set of blockable topics, plus the `UNCLASSIFIED` sentinel that
the pipeline reports when no stage could place a title. Adding a member
requires rebuilding the static class map.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable

from .errors import InvalidRequestError


class Category(str, Enum):
    RELIGION = "Religion"
    HISTORY = "History"
    PEOPLE = "People"
    GEOGRAPHY = "Geography"
    GOVERNMENT = "Government"
    LAW = "Law"
    EDUCATION = "Education"
    SOCIETY = "Society"
    CULTURE = "Culture"
    LANGUAGE = "Language"
    PHILOSOPHY = "Philosophy"
    HUMANITIES = "Humanities"
    UNCLASSIFIED = "Unclassified"


BLOCKABLE_CATEGORIES: FrozenSet[Category] = frozenset(
    c for c in Category if c is not Category.UNCLASSIFIED
)


class UnknownCategoryError(InvalidRequestError):
    """Raised when a category name is not one of the blockable categories."""


def parse_category(name: str) -> Category:
    """
    Parse a blockable category name (exact, case-sensitive value match).

    Raises
    ------
    UnknownCategoryError
        If the name is unknown or is the `Unclassified` sentinel.
    """
    try:
        category = Category(name)
    except ValueError as exc:
        raise UnknownCategoryError(f"Unknown category: {name!r}") from exc

    if category is Category.UNCLASSIFIED:
        raise UnknownCategoryError("'Unclassified' cannot be blocked")

    return category


def parse_categories(names: Iterable[str]) -> FrozenSet[Category]:
    return frozenset(parse_category(name) for name in names)
