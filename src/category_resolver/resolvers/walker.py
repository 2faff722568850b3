"""
Subclass-Chain Walker

Finds the category of a class id missing from the static class map by
breadth-first search up the subclass-of (P279) relation of the live graph.

Properties
----------
- Shallowest match: levels are scanned in order and the first mapped parent
  seen at a level is returned, so a mapped ancestor at depth 2 always wins
  over one at depth 4.
- Termination: every walk keeps a visited set and stops after `max_depth`
  levels or when a level discovers no new node. The subclass graph may
  contain cycles.
- Batching: walks started together advance level by level in lockstep; the
  unmemoized frontier nodes of all of them are fetched with one batched call
  per level.
- "No mapping" is not a permanent fact and is only memoized for the current
  request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import (
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
)

from ..config import settings
from ..core.categories import Category
from ..wiki.api_client import WikiClientError
from .base import AncestorMatch, ResolutionContext, ResolutionItem, Resolver

logger = logging.getLogger("resolver.walker")

ParentFetcher = Callable[[List[str]], Awaitable[Dict[str, List[str]]]]


@dataclass
class _Walk:
    visited: Set[str]
    frontier: List[str] = field(default_factory=list)


class SubclassChainWalker:
    """
    Bounded BFS from unmapped class ids to their nearest mapped ancestor.
    """

    def __init__(
        self,
        class_map: Mapping[str, Category],
        fetch_parents: ParentFetcher,
        max_depth: Optional[int] = None,
    ) -> None:
        """
        Parameters
        ----------
        class_map : Mapping[str, Category]
            The static class map.

        fetch_parents : ParentFetcher
            Async callable returning `{class_id: [parent ids]}` for a batch
            (normally `WikidataClient.get_subclass_parents`).

        max_depth : Optional[int]
            Maximum number of levels to explore. Defaults to
            settings.walker_max_depth.
        """
        self._map = class_map
        self._fetch_parents = fetch_parents
        self.max_depth = max_depth or settings.walker_max_depth

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def walk(self, class_id: str, context: ResolutionContext) -> Optional[AncestorMatch]:
        results = await self.walk_many([class_id], context)
        return results[class_id]

    async def walk_many(
        self,
        class_ids: Iterable[str],
        context: ResolutionContext,
    ) -> Dict[str, Optional[AncestorMatch]]:
        """
        Walk every class id and return its shallowest mapped ancestor, or
        None when no mapped ancestor lies within `max_depth` levels.

        A class id that is itself mapped returns a depth-0 match.
        """
        results: Dict[str, Optional[AncestorMatch]] = {}
        walks: Dict[str, _Walk] = {}

        for class_id in dict.fromkeys(class_ids):
            if class_id in context.ancestors:
                results[class_id] = context.ancestors[class_id]
                continue
            mapped = self._map.get(class_id)
            if mapped is not None:
                results[class_id] = AncestorMatch(mapped, class_id, 0)
                continue
            walks[class_id] = _Walk(visited={class_id}, frontier=[class_id])

        for depth in range(1, self.max_depth + 1):
            if not walks:
                break

            missing = [
                node
                for node in dict.fromkeys(n for w in walks.values() for n in w.frontier)
                if node not in context.parents
            ]
            if missing:
                await self._load_parents(missing, context)

            logger.debug(
                "Level %d: %d active walks, %d nodes fetched",
                depth,
                len(walks),
                len(missing),
            )

            for start, walk in list(walks.items()):
                match, next_frontier = self._expand(walk, depth, context)
                if match is not None:
                    results[start] = match
                    del walks[start]
                elif not next_frontier:
                    results[start] = None
                    del walks[start]
                else:
                    walk.frontier = next_frontier

        for start in walks:
            results[start] = None

        for start, match in results.items():
            context.ancestors.setdefault(start, match)

        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _expand(
        self,
        walk: _Walk,
        depth: int,
        context: ResolutionContext,
    ) -> tuple[Optional[AncestorMatch], List[str]]:
        next_frontier: List[str] = []
        for node in walk.frontier:
            for parent in context.parents.get(node, []):
                if parent in walk.visited:
                    continue
                walk.visited.add(parent)
                category = self._map.get(parent)
                if category is not None:
                    return AncestorMatch(category, parent, depth), []
                next_frontier.append(parent)
        return None, next_frontier

    async def _load_parents(self, class_ids: List[str], context: ResolutionContext) -> None:
        context.parent_fetches += 1
        try:
            fetched = await self._fetch_parents(class_ids)
        except WikiClientError as exc:
            logger.warning(
                "Parent lookup failed for %d classes, treating as roots (%s)",
                len(class_ids),
                type(exc).__name__,
            )
            fetched = {}

        for class_id in class_ids:
            context.parents[class_id] = list(fetched.get(class_id, []))


class SubclassChainResolver(Resolver):
    """
    Resolver stage classifying titles through their unmapped class ids.
    """

    name = "subclass_chain"

    def __init__(self, walker: SubclassChainWalker, class_map: Mapping[str, Category]) -> None:
        self._walker = walker
        self._map = class_map

    async def resolve(
        self,
        items: Sequence[ResolutionItem],
        allowed: FrozenSet[Category],
        context: ResolutionContext,
    ) -> Dict[str, Category]:
        unmapped = [
            class_id
            for item in items
            for class_id in item.class_ids
            if class_id not in self._map
        ]
        if not unmapped:
            return {}

        matches = await self._walker.walk_many(unmapped, context)

        found: Dict[str, Category] = {}
        for item in items:
            for class_id in item.class_ids:
                match = matches.get(class_id)
                if match is None:
                    continue
                context.has_class_category.add(item.title)
                if match.category in allowed:
                    found[item.title] = match.category
                    break
        return found
