"""
Resolution Orchestrator

Runs one classification batch end to end:

1. Override: target-article aliases are never blocked (input and canonical
   titles are both checked).
2. Redirects: input titles are mapped to canonical titles.
3. Category cache: a live entry whose category is blocked answers at once.
   The entry holds the category resolved under the blocked set of the
   request that wrote it. A title belonging to several blocked categories
   may therefore be labelled differently than a fresh run would label it
   (e.g. Religion cached earlier, People first in declared order now).
   Whether the title is blocked does not change, only the label.
4. Class cache, then the entity resolver for class lists still missing.
5. Resolver chain (direct, subclass walk, keyword fallback), each stage
   seeing only what earlier stages left unresolved.
6. Persistence: every newly fetched class list (empty ones included) goes to
   the class cache; only real categories go to the category cache.

Every remote or cache failure degrades to "no result" for that stage, so the
worst outcome is an unblocked title, never a failed request.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Protocol, Sequence, Union

from ..core.categories import Category, parse_categories
from ..core.errors import InvalidRequestError
from ..core.titles import TargetAliases
from .base import ResolutionContext, ResolutionItem, Resolver
from .entity import EntityResolver

logger = logging.getLogger("resolver.orchestrator")


class ResolutionCache(Protocol):
    async def get_classes(self, titles: Sequence[str]) -> Dict[str, List[str]]: ...
    async def put_classes(self, entries: Dict[str, List[str]]) -> None: ...
    async def get_categories(self, titles: Sequence[str]) -> Dict[str, Category]: ...
    async def put_categories(self, entries: Dict[str, Optional[Category]]) -> None: ...


class ResolutionOrchestrator:
    """
    Composes entity resolution, caches and the resolver chain.
    """

    def __init__(
        self,
        entities: EntityResolver,
        cache: ResolutionCache,
        resolvers: Sequence[Resolver],
        target_aliases: TargetAliases,
        max_titles: Optional[int] = None,
    ) -> None:
        """
        Parameters
        ----------
        entities : EntityResolver
            Redirect and class lookup.

        cache : ResolutionCache
            Class and category caches (normally a CacheStore).

        resolvers : Sequence[Resolver]
            Classification stages, in the order they should run.

        target_aliases : TargetAliases
            Titles that must never be reported as blocked.

        max_titles : Optional[int]
            Upper bound on titles per call, if any.
        """
        self._entities = entities
        self._cache = cache
        self._resolvers = list(resolvers)
        self._aliases = target_aliases
        self._max_titles = max_titles

    async def classify(
        self,
        titles: Sequence[str],
        blocked: Iterable[Union[Category, str]],
    ) -> Dict[str, Optional[Category]]:
        """
        Return, for every input title, the blocked category it belongs to or
        None.

        Raises
        ------
        InvalidRequestError
            On malformed input (non-string or blank titles, too many titles,
            unknown category names). Raised before any remote call.
        """
        allowed = self._validate(titles, blocked)
        result: Dict[str, Optional[Category]] = {title: None for title in titles}

        if not allowed or not result:
            return result

        pending = [title for title in result if title not in self._aliases]
        if not pending:
            return result

        canonical = await self._entities.resolve_redirects(pending)
        canon = {
            title: canonical.get(title, title)
            for title in pending
            if canonical.get(title, title) not in self._aliases
        }
        if not canon:
            return result

        # Category cache: serve titles whose cached category is blocked
        cached_categories = await self._cache.get_categories(_unique(canon.values()))
        unresolved: Dict[str, str] = {}
        for title, canonical_title in canon.items():
            cached = cached_categories.get(canonical_title)
            if cached is not None and cached in allowed:
                result[title] = cached
            else:
                unresolved[title] = canonical_title

        if not unresolved:
            return result

        # Class cache, then remote fetch for the rest
        needed = _unique(unresolved.values())
        classes = await self._cache.get_classes(needed)
        missing = [t for t in needed if t not in classes]
        fetched = await self._entities.fetch_classes(missing) if missing else {}
        classes.update(fetched)

        resolved = await self._run_chain(
            [ResolutionItem(t, list(classes.get(t, []))) for t in needed],
            allowed,
        )

        for title, canonical_title in unresolved.items():
            result[title] = resolved.get(canonical_title)

        await self._cache.put_classes(fetched)
        await self._cache.put_categories(resolved)

        logger.debug(
            "Classified %d titles: %d cache hits, %d class fetches, %d resolved",
            len(result),
            len(canon) - len(unresolved),
            len(missing),
            len(resolved),
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_chain(
        self,
        items: List[ResolutionItem],
        allowed: FrozenSet[Category],
    ) -> Dict[str, Category]:
        context = ResolutionContext()
        resolved: Dict[str, Category] = {}
        remaining = items

        for resolver in self._resolvers:
            if not remaining:
                break
            found = await resolver.resolve(remaining, allowed, context)
            if found:
                logger.debug("%s resolved %d of %d", resolver.name, len(found), len(remaining))
            resolved.update(found)
            remaining = [item for item in remaining if item.title not in found]

        return resolved

    def _validate(
        self,
        titles: Sequence[str],
        blocked: Iterable[Union[Category, str]],
    ) -> FrozenSet[Category]:
        if isinstance(titles, str) or not isinstance(titles, Sequence):
            raise InvalidRequestError("titles must be a list of strings")
        for title in titles:
            if not isinstance(title, str) or not title.strip():
                raise InvalidRequestError(f"Invalid title: {title!r}")
        if self._max_titles is not None and len(titles) > self._max_titles:
            raise InvalidRequestError(f"At most {self._max_titles} titles per request")
        if isinstance(blocked, str):
            raise InvalidRequestError("blocked categories must be a list")

        return parse_categories(
            c.value if isinstance(c, Category) else c for c in blocked
        )


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
