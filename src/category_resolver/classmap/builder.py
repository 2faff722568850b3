"""
Static Class Map Builder

Offline job that flattens the Wikidata subclass hierarchy below each curated
root class into a `ClassId -> Category` table.

Rules
-----
- Roots are expanded in list order; a class already claimed by an earlier
  root keeps that root's category (first match wins).
- A root whose query fails contributes nothing; the build continues.
- Manual supplements are applied last and never override expanded entries.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from ..core.categories import Category, parse_category
from ..wiki.api_client import WikiClientError
from ..wiki.sparql_client import SparqlClient
from .roots import ROOT_CLASSES, RootClass
from .static_map import StaticClassMap

logger = logging.getLogger("resolver.classmap.builder")


@dataclass
class BuildStats:
    """Outcome of a build run."""
    total_classes: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    failed_roots: List[str] = field(default_factory=list)
    supplemented: int = 0


class ClassMapBuilder:
    """
    Builds a StaticClassMap from transitive-closure queries.
    """

    def __init__(
        self,
        sparql: SparqlClient,
        roots: Sequence[RootClass] = ROOT_CLASSES,
        delay: float = 0.5,
    ) -> None:
        """
        Parameters
        ----------
        sparql : SparqlClient
            Client used for the closure queries.

        roots : Sequence[RootClass]
            Root classes in priority order.

        delay : float
            Pause between root queries, in seconds.
        """
        self._sparql = sparql
        self._roots = list(roots)
        self._delay = delay

    async def build(
        self,
        supplements: Optional[Mapping[str, str]] = None,
    ) -> tuple[StaticClassMap, BuildStats]:
        """
        Expand every root and return the resulting map with statistics.

        Parameters
        ----------
        supplements : Optional[Mapping[str, str]]
            Extra `{classId: categoryName}` entries for classes the roots do
            not reach. Applied only where the class is still unmapped.

        Raises
        ------
        ValueError
            If a supplement names an unknown category.
        """
        mapping: Dict[str, Category] = {}
        stats = BuildStats()

        logger.info("Building class map from %d root classes", len(self._roots))

        for index, root in enumerate(self._roots):
            if index and self._delay:
                await asyncio.sleep(self._delay)

            try:
                descendants = await self._sparql.subclass_closure(root.class_id, root.limit)
            except WikiClientError as exc:
                logger.error(
                    "Skipping root %s (%s): %s",
                    root.class_id,
                    root.label,
                    type(exc).__name__,
                )
                stats.failed_roots.append(root.class_id)
                continue

            claimed = 0
            for class_id in [root.class_id, *descendants]:
                if class_id not in mapping:
                    mapping[class_id] = root.category
                    claimed += 1

            stats.by_category[root.category.value] = (
                stats.by_category.get(root.category.value, 0) + claimed
            )
            logger.info(
                "%s (%s): %d descendants, %d newly claimed for %s",
                root.class_id,
                root.label,
                len(descendants),
                claimed,
                root.category.value,
            )

        for class_id, name in (supplements or {}).items():
            category = parse_category(name)
            if class_id not in mapping:
                mapping[class_id] = category
                stats.supplemented += 1
                stats.by_category[category.value] = stats.by_category.get(category.value, 0) + 1

        stats.total_classes = len(mapping)
        return StaticClassMap(mapping), stats
