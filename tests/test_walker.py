"""
Subclass-Chain Walker Tests

Uses an in-memory subclass graph in place of Wikidata.
"""

import pytest

from category_resolver.core.categories import BLOCKABLE_CATEGORIES, Category
from category_resolver.resolvers.base import ResolutionContext, ResolutionItem
from category_resolver.resolvers.walker import SubclassChainResolver, SubclassChainWalker
from category_resolver.wiki.api_client import WikiRequestError


class FakeGraph:
    """Records every batch requested from it."""

    def __init__(self, edges):
        self.edges = edges
        self.calls = []

    async def __call__(self, class_ids):
        self.calls.append(list(class_ids))
        return {c: list(self.edges.get(c, [])) for c in class_ids}


class TestWalk:

    @pytest.mark.asyncio
    async def test_two_hop_ancestor_found_at_level_two(self, class_map):
        graph = FakeGraph({"QX": ["QY"], "QY": ["Q198"]})
        walker = SubclassChainWalker(class_map, graph, max_depth=4)
        context = ResolutionContext()

        match = await walker.walk("QX", context)

        assert match.category == Category.HISTORY
        assert match.class_id == "Q198"
        assert match.depth == 2
        assert graph.calls == [["QX"], ["QY"]]

    @pytest.mark.asyncio
    async def test_shallowest_mapped_ancestor_wins(self, class_map):
        """
        Left branch reaches a mapped class at depth 4, right branch at 2.
        """
        graph = FakeGraph({
            "QA": ["QL1", "QR1"],
            "QL1": ["QL2"],
            "QL2": ["QL3"],
            "QL3": ["Q5"],
            "QR1": ["Q198"],
        })
        walker = SubclassChainWalker(class_map, graph, max_depth=6)

        match = await walker.walk("QA", ResolutionContext())

        assert match.category == Category.HISTORY
        assert match.depth == 2

    @pytest.mark.asyncio
    async def test_cyclic_graph_terminates(self, class_map):
        graph = FakeGraph({"QA": ["QB"], "QB": ["QC"], "QC": ["QA", "QB"]})
        walker = SubclassChainWalker(class_map, graph, max_depth=6)

        match = await walker.walk("QA", ResolutionContext())

        assert match is None
        # Each node fetched once; the walk stops when nothing new is found
        assert sum(len(c) for c in graph.calls) == 3

    @pytest.mark.asyncio
    async def test_depth_bound_reports_no_mapping(self, class_map):
        edges = {f"Q{i}0": [f"Q{i + 1}0"] for i in range(1, 10)}
        edges["Q100"] = ["Q5"]
        graph = FakeGraph(edges)
        walker = SubclassChainWalker(class_map, graph, max_depth=3)

        match = await walker.walk("Q10", ResolutionContext())

        assert match is None
        assert len(graph.calls) == 3

    @pytest.mark.asyncio
    async def test_mapped_start_needs_no_fetch(self, class_map):
        graph = FakeGraph({})
        walker = SubclassChainWalker(class_map, graph, max_depth=4)

        match = await walker.walk("Q5", ResolutionContext())

        assert match.category == Category.PEOPLE
        assert match.depth == 0
        assert graph.calls == []

    @pytest.mark.asyncio
    async def test_shared_ancestors_fetched_once_per_request(self, class_map):
        graph = FakeGraph({
            "QA": ["QShared"],
            "QB": ["QShared"],
            "QShared": ["QTop"],
            "QTop": ["Q9174"],
        })
        walker = SubclassChainWalker(class_map, graph, max_depth=5)
        context = ResolutionContext()

        first = await walker.walk("QA", context)
        calls_after_first = sum(len(c) for c in graph.calls)
        second = await walker.walk("QB", context)

        assert first.category == second.category == Category.RELIGION
        # Only QB itself is new on the second walk
        assert sum(len(c) for c in graph.calls) == calls_after_first + 1

    @pytest.mark.asyncio
    async def test_walks_share_one_fetch_per_level(self, class_map):
        graph = FakeGraph({"QA": ["Q5"], "QB": ["QC"], "QC": ["Q515"]})
        walker = SubclassChainWalker(class_map, graph, max_depth=4)

        results = await walker.walk_many(["QA", "QB"], ResolutionContext())

        assert results["QA"].category == Category.PEOPLE
        assert results["QB"].category == Category.GEOGRAPHY
        assert graph.calls == [["QA", "QB"], ["QC"]]

    @pytest.mark.asyncio
    async def test_fetch_failure_degrades_to_no_mapping(self, class_map):
        async def failing(class_ids):
            raise WikiRequestError("unreachable")

        walker = SubclassChainWalker(class_map, failing, max_depth=4)

        assert await walker.walk("QX", ResolutionContext()) is None


class TestSubclassChainResolver:

    @pytest.mark.asyncio
    async def test_only_unmapped_classes_are_walked(self, class_map):
        graph = FakeGraph({"QX": ["QY"], "QY": ["Q198"]})
        walker = SubclassChainWalker(class_map, graph, max_depth=4)
        resolver = SubclassChainResolver(walker, class_map)
        context = ResolutionContext()

        found = await resolver.resolve(
            [ResolutionItem("Some war", ["Q5", "QX"])],
            frozenset({Category.HISTORY}),
            context,
        )

        assert found == {"Some war": Category.HISTORY}
        assert all("Q5" not in call for call in graph.calls)
        assert "Some war" in context.has_class_category

    @pytest.mark.asyncio
    async def test_unblocked_ancestor_marks_title_as_classified(self, class_map):
        graph = FakeGraph({"QX": ["Q515"]})
        walker = SubclassChainWalker(class_map, graph, max_depth=4)
        resolver = SubclassChainResolver(walker, class_map)
        context = ResolutionContext()

        found = await resolver.resolve(
            [ResolutionItem("Village", ["QX"])],
            frozenset({Category.RELIGION}),
            context,
        )

        assert found == {}
        assert context.has_class_category == {"Village"}

    @pytest.mark.asyncio
    async def test_declared_order_across_walked_classes(self, class_map):
        graph = FakeGraph({"QP": ["Q5"], "QG": ["Q515"]})
        walker = SubclassChainWalker(class_map, graph, max_depth=4)
        resolver = SubclassChainResolver(walker, class_map)

        found = await resolver.resolve(
            [ResolutionItem("T", ["QG", "QP"])],
            BLOCKABLE_CATEGORIES,
            ResolutionContext(),
        )

        assert found == {"T": Category.GEOGRAPHY}
