from typing import Dict, List, Optional, Sequence

import pytest

from category_resolver.classmap.static_map import StaticClassMap
from category_resolver.core.categories import Category


class InMemoryCache:
    """Dict-backed stand-in for CacheStore that records writes."""

    def __init__(self):
        self.classes: Dict[str, List[str]] = {}
        self.categories: Dict[str, Category] = {}
        self.class_writes: List[Dict[str, List[str]]] = []
        self.category_writes: List[Dict[str, Optional[Category]]] = []

    async def get_classes(self, titles: Sequence[str]) -> Dict[str, List[str]]:
        return {t: list(self.classes[t]) for t in titles if t in self.classes}

    async def put_classes(self, entries):
        self.class_writes.append(dict(entries))
        self.classes.update({t: list(c) for t, c in entries.items()})

    async def get_categories(self, titles: Sequence[str]) -> Dict[str, Category]:
        return {t: self.categories[t] for t in titles if t in self.categories}

    async def put_categories(self, entries):
        self.category_writes.append(dict(entries))
        for title, category in entries.items():
            if category is not None and category is not Category.UNCLASSIFIED:
                self.categories[title] = category


@pytest.fixture
def class_map():
    return StaticClassMap({
        "Q5": Category.PEOPLE,
        "Q515": Category.GEOGRAPHY,
        "Q198": Category.HISTORY,
        "Q178561": Category.HISTORY,
        "Q9174": Category.RELIGION,
        "Q16970": Category.RELIGION,
        "Q3918": Category.EDUCATION,
        "Q34770": Category.LANGUAGE,
    })


@pytest.fixture
def memory_cache():
    return InMemoryCache()
