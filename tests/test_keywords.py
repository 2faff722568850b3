import pytest

from category_resolver.core.categories import BLOCKABLE_CATEGORIES, Category
from category_resolver.resolvers.base import ResolutionContext, ResolutionItem
from category_resolver.resolvers.keywords import KeywordResolver, match_keywords
from category_resolver.wiki.api_client import WikiRequestError


def test_no_geography_keyword_in_sports_tag():
    assert match_keywords(["Olympic champion"], [Category.GEOGRAPHY]) is None


def test_substring_match_is_case_insensitive():
    assert match_keywords(["Rivers of FRANCE"], [Category.GEOGRAPHY]) == Category.GEOGRAPHY
    assert match_keywords(["20th-century philosophers"], [Category.PHILOSOPHY]) == Category.PHILOSOPHY


def test_table_order_decides_between_categories():
    tags = ["Medieval churches in Italy"]
    # Matches both Religion ("church") and History ("medieval"); Religion is listed first
    assert match_keywords(tags, BLOCKABLE_CATEGORIES) == Category.RELIGION
    assert match_keywords(tags, [Category.HISTORY]) == Category.HISTORY


def test_empty_inputs():
    assert match_keywords([], BLOCKABLE_CATEGORIES) is None
    assert match_keywords(["Battles of the Roman Empire"], []) is None


@pytest.mark.asyncio
async def test_resolver_skips_titles_with_usable_classes():
    requested = []

    async def fetch_tags(titles):
        requested.extend(titles)
        return {t: ["Roman emperors"] for t in titles}

    resolver = KeywordResolver(fetch_tags)
    context = ResolutionContext()
    context.has_class_category.add("Classified")

    found = await resolver.resolve(
        [ResolutionItem("Classified", ["QX"]), ResolutionItem("Tagged", [])],
        frozenset({Category.HISTORY}),
        context,
    )

    assert found == {"Tagged": Category.HISTORY}
    assert requested == ["Tagged"]


@pytest.mark.asyncio
async def test_resolver_fails_open_when_tags_unavailable():
    async def fetch_tags(titles):
        raise WikiRequestError("timeout")

    resolver = KeywordResolver(fetch_tags)

    found = await resolver.resolve(
        [ResolutionItem("Anything", [])],
        BLOCKABLE_CATEGORIES,
        ResolutionContext(),
    )

    assert found == {}
