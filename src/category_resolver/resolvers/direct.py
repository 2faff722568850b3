"""
Direct classification against the static class map.

Class ids are checked in the order the entity declares them and the first
one whose category is allowed wins. Declaration order is editor-controlled
and can change over time, so two entities with the same classes in a
different order may classify differently.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence

from ..core.categories import Category
from .base import ResolutionContext, ResolutionItem, Resolver


def classify(
    class_ids: Iterable[str],
    allowed: Iterable[Category],
    class_map: Mapping[str, Category],
) -> Optional[Category]:
    allowed = frozenset(allowed)
    for class_id in class_ids:
        category = class_map.get(class_id)
        if category is not None and category in allowed:
            return category
    return None


class DirectResolver(Resolver):
    """O(1) lookup of each class id in the static class map."""

    name = "direct"

    def __init__(self, class_map: Mapping[str, Category]) -> None:
        self._map = class_map

    async def resolve(
        self,
        items: Sequence[ResolutionItem],
        allowed: FrozenSet[Category],
        context: ResolutionContext,
    ) -> Dict[str, Category]:
        found: Dict[str, Category] = {}
        for item in items:
            if any(c in self._map for c in item.class_ids):
                context.has_class_category.add(item.title)
            category = classify(item.class_ids, allowed, self._map)
            if category is not None:
                found[item.title] = category
        return found
