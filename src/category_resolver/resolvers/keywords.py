"""
Keyword fallback over free-text topic tags.

Last-resort stage for titles whose entity has no usable class data: neither
the static map nor the subclass walk placed any of its classes. The page's
visible Wikipedia categories are matched by case-insensitive substring
against a curated keyword table. Low precision is accepted here; the goal is
coverage of the long tail.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..core.categories import Category
from ..wiki.api_client import WikiClientError
from .base import ResolutionContext, ResolutionItem, Resolver

logger = logging.getLogger("resolver.keywords")

TagFetcher = Callable[[List[str]], Awaitable[Dict[str, List[str]]]]

# Table order is the tie-break between categories.
CATEGORY_KEYWORDS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.RELIGION, (
        "church", "saint", "bishop", "christian", "orthodox", "catholic",
        "theology", "priest", "muslim", "buddhist", "jewish", "religion",
        "religious", "monastery", "pope", "god", "jesus", "bible",
    )),
    (Category.HISTORY, (
        "empire", "ancient", "war", "century", "dynasty", "medieval",
        "kingdom", "roman", "byzantine", "battle", "civilization",
        "history", "historical",
    )),
    (Category.PEOPLE, (
        "born", "died", "people", "person", "living", "deaths", "births",
        "politician", "writer", "artist", "scientist",
    )),
    (Category.PHILOSOPHY, (
        "philosophy", "philosopher", "epistemology", "metaphysics",
        "ethics", "logic",
    )),
    (Category.CULTURE, (
        "culture", "cultural", "tradition", "customs", "festival",
        "ceremony", "folklore", "mythology",
    )),
    (Category.EDUCATION, (
        "university", "school", "college", "education", "academic",
        "student", "professor", "alumni",
    )),
    (Category.SOCIETY, (
        "society", "social", "community", "organization", "movement", "group",
    )),
    (Category.GEOGRAPHY, (
        "city", "country", "river", "region", "mountain", "island",
        "capital", "province", "ocean", "sea", "lake", "geography",
    )),
    (Category.HUMANITIES, ("humanities", "arts", "literature", "linguistics")),
    (Category.LANGUAGE, (
        "language", "linguistic", "grammar", "vocabulary", "dialect", "writing",
    )),
    (Category.GOVERNMENT, (
        "government", "politics", "political", "ministry", "parliament",
        "congress", "democracy", "election",
    )),
    (Category.LAW, (
        "law", "legal", "court", "judge", "attorney", "legislation",
        "constitution", "crime",
    )),
)


def match_keywords(tags: Iterable[str], allowed: Iterable[Category]) -> Optional[Category]:
    """
    Return the first allowed category (in table order) with a keyword that
    occurs inside any tag.
    """
    allowed = frozenset(allowed)
    lowered = [tag.lower() for tag in tags if tag]
    if not lowered or not allowed:
        return None

    for category, keywords in CATEGORY_KEYWORDS:
        if category not in allowed:
            continue
        if any(keyword in tag for tag in lowered for keyword in keywords):
            return category
    return None


class KeywordResolver(Resolver):
    """Resolver stage matching topic tags against the keyword table."""

    name = "keywords"

    def __init__(self, fetch_tags: TagFetcher) -> None:
        self._fetch_tags = fetch_tags

    async def resolve(
        self,
        items: Sequence[ResolutionItem],
        allowed: FrozenSet[Category],
        context: ResolutionContext,
    ) -> Dict[str, Category]:
        candidates = [i.title for i in items if i.title not in context.has_class_category]
        if not candidates:
            return {}

        try:
            tags = await self._fetch_tags(candidates)
        except WikiClientError as exc:
            logger.warning(
                "Topic tag lookup failed for %d titles, skipping keyword fallback (%s)",
                len(candidates),
                type(exc).__name__,
            )
            return {}

        found: Dict[str, Category] = {}
        for title in candidates:
            category = match_keywords(tags.get(title, []), allowed)
            if category is not None:
                found[title] = category
        return found
