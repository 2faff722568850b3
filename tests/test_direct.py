import pytest

from category_resolver.core.categories import BLOCKABLE_CATEGORIES, Category
from category_resolver.resolvers.base import ResolutionContext, ResolutionItem
from category_resolver.resolvers.direct import DirectResolver, classify


def test_every_mapped_class_classifies_as_itself(class_map):
    for class_id, category in class_map.items():
        assert classify([class_id], [category], class_map) == category


def test_declared_order_breaks_ties(class_map):
    """Both classes are mapped; the first declared one wins."""
    allowed = BLOCKABLE_CATEGORIES
    assert classify(["Q5", "Q515"], allowed, class_map) == Category.PEOPLE
    assert classify(["Q515", "Q5"], allowed, class_map) == Category.GEOGRAPHY


def test_filter_skips_categories_not_blocked(class_map):
    assert classify(["Q5", "Q515"], [Category.GEOGRAPHY], class_map) == Category.GEOGRAPHY
    assert classify(["Q5"], [Category.HISTORY], class_map) is None


def test_unmapped_and_empty_class_lists(class_map):
    assert classify([], BLOCKABLE_CATEGORIES, class_map) is None
    assert classify(["Q999999"], BLOCKABLE_CATEGORIES, class_map) is None


@pytest.mark.asyncio
async def test_resolver_records_titles_with_mapped_classes(class_map):
    resolver = DirectResolver(class_map)
    context = ResolutionContext()
    items = [
        ResolutionItem("Saint Peter", ["Q5"]),
        ResolutionItem("Paris", ["Q515"]),
        ResolutionItem("Dog", ["Q16521"]),
    ]

    found = await resolver.resolve(items, frozenset({Category.PEOPLE}), context)

    assert found == {"Saint Peter": Category.PEOPLE}
    # Paris has a usable class even though Geography is not blocked
    assert context.has_class_category == {"Saint Peter", "Paris"}
