"""
Static Class Map and Builder Tests
"""

import json

import pytest

from category_resolver.classmap.builder import ClassMapBuilder
from category_resolver.classmap.roots import ROOT_CLASSES, RootClass
from category_resolver.classmap.static_map import ClassMapError, StaticClassMap
from category_resolver.core.categories import Category
from category_resolver.wiki.api_client import WikiRequestError


class FakeSparql:
    def __init__(self, closures, failing=()):
        self.closures = closures
        self.failing = set(failing)
        self.queried = []

    async def subclass_closure(self, root, limit=5000):
        self.queried.append(root)
        if root in self.failing:
            raise WikiRequestError("endpoint unavailable")
        return list(self.closures.get(root, []))


# ---------------------------------------------------------------------
# StaticClassMap
# ---------------------------------------------------------------------

def test_from_dict_and_lookup():
    class_map = StaticClassMap.from_dict({"Q5": "People", "Q515": "Geography"})

    assert class_map.lookup("Q5") == Category.PEOPLE
    assert class_map.lookup("Q1") is None
    assert len(class_map) == 2
    assert class_map.category_counts() == {"People": 1, "Geography": 1}


@pytest.mark.parametrize("raw", [["Q5"], {"Q5": "Sports"}, {"Q5": "Unclassified"}])
def test_from_dict_rejects_malformed_artifacts(raw):
    with pytest.raises(ClassMapError):
        StaticClassMap.from_dict(raw)


def test_map_is_read_only(class_map):
    with pytest.raises(TypeError):
        class_map["Q1"] = Category.LAW


def test_save_then_load(tmp_path, class_map):
    path = tmp_path / "nested" / "map.json"

    class_map.save(path)

    assert json.loads(path.read_text(encoding="utf-8"))["Q5"] == "People"
    assert StaticClassMap.load(path) == class_map


def test_bundled_map_covers_every_root_class():
    bundled = StaticClassMap.load()

    for root in ROOT_CLASSES:
        assert bundled.lookup(root.class_id) is not None


# ---------------------------------------------------------------------
# ClassMapBuilder
# ---------------------------------------------------------------------

ROOTS = [
    RootClass("Q16970", Category.RELIGION, "church building"),
    RootClass("Q41176", Category.CULTURE, "building"),
    RootClass("Q515", Category.GEOGRAPHY, "city"),
]


@pytest.mark.asyncio
async def test_first_root_claims_shared_descendants():
    sparql = FakeSparql({
        "Q16970": ["Q16970", "Q2977"],
        "Q41176": ["Q41176", "Q16970", "Q2977", "Q1021645"],
        "Q515": ["Q515", "Q1549591"],
    })
    builder = ClassMapBuilder(sparql, roots=ROOTS, delay=0)

    class_map, stats = await builder.build()

    assert class_map["Q2977"] == Category.RELIGION
    assert class_map["Q1021645"] == Category.CULTURE
    assert class_map["Q1549591"] == Category.GEOGRAPHY
    assert stats.total_classes == 6
    assert stats.by_category == {"Religion": 2, "Culture": 2, "Geography": 2}
    assert sparql.queried == ["Q16970", "Q41176", "Q515"]


@pytest.mark.asyncio
async def test_root_is_mapped_even_if_missing_from_closure():
    sparql = FakeSparql({"Q16970": ["Q2977"]})
    builder = ClassMapBuilder(sparql, roots=ROOTS[:1], delay=0)

    class_map, _ = await builder.build()

    assert class_map["Q16970"] == Category.RELIGION


@pytest.mark.asyncio
async def test_failed_root_is_skipped():
    sparql = FakeSparql({"Q515": ["Q515"]}, failing={"Q16970", "Q41176"})
    builder = ClassMapBuilder(sparql, roots=ROOTS, delay=0)

    class_map, stats = await builder.build()

    assert dict(class_map) == {"Q515": Category.GEOGRAPHY}
    assert stats.failed_roots == ["Q16970", "Q41176"]


@pytest.mark.asyncio
async def test_supplements_fill_gaps_without_overriding():
    sparql = FakeSparql({"Q515": ["Q515"]})
    builder = ClassMapBuilder(sparql, roots=ROOTS[2:], delay=0)

    class_map, stats = await builder.build(
        supplements={"Q515": "History", "Q8434": "Education"}
    )

    assert class_map["Q515"] == Category.GEOGRAPHY
    assert class_map["Q8434"] == Category.EDUCATION
    assert stats.supplemented == 1


@pytest.mark.asyncio
async def test_unknown_supplement_category_is_rejected():
    builder = ClassMapBuilder(FakeSparql({}), roots=[], delay=0)

    with pytest.raises(ValueError):
        await builder.build(supplements={"Q1": "Sports"})
