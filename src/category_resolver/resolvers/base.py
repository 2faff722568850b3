"""
Resolver chain primitives.

Each classification stage is a `Resolver`: given the still-unresolved items
of a batch and the caller's blocked categories, it returns a category for the
items it could place. The orchestrator runs resolvers in order and hands each
one only what the previous stages left over.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Sequence, Set

from ..core.categories import Category


class AncestorMatch(NamedTuple):
    """Shallowest mapped ancestor found by the subclass-chain walk."""
    category: Category
    class_id: str
    depth: int


@dataclass(frozen=True)
class ResolutionItem:
    """A canonical title and its instance-of class ids in declared order."""
    title: str
    class_ids: List[str] = field(default_factory=list)


@dataclass
class ResolutionContext:
    """
    Request-scoped scratch state shared by the resolvers of one batch.

    - parents: memoized subclass-of edges (class id -> parent ids)
    - ancestors: memoized walk outcomes (class id -> match or None)
    - has_class_category: titles whose classes mapped to some category,
      whether or not that category was blocked
    """
    parents: Dict[str, List[str]] = field(default_factory=dict)
    ancestors: Dict[str, Optional[AncestorMatch]] = field(default_factory=dict)
    has_class_category: Set[str] = field(default_factory=set)
    parent_fetches: int = 0


class Resolver(ABC):
    """One stage of the classification chain."""

    name: str = "resolver"

    @abstractmethod
    async def resolve(
        self,
        items: Sequence[ResolutionItem],
        allowed: FrozenSet[Category],
        context: ResolutionContext,
    ) -> Dict[str, Category]:
        """
        Return `{title: category}` for the items this stage can place within
        `allowed`. Items it cannot place are simply absent.
        """
