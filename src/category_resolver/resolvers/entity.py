"""
Entity Resolver

Turns article titles into canonical titles and instance-of class ids.

The resolver never touches the caches (the orchestrator owns cache policy)
and never raises on remote failure:
- redirect lookups that fail fall back to the identity mapping;
- class lookups that fail are left out of the result, so the caller can tell
  "no classes" (an empty list, worth caching) from "unknown" (absent).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from ..config import settings
from ..wiki.api_client import WikiClientError, chunked
from ..wiki.wikidata_client import WikidataClient
from ..wiki.wikipedia_client import WikipediaClient

logger = logging.getLogger("resolver.entity")


class EntityResolver:
    """
    Redirect resolution (Wikipedia) and class lookup (Wikidata).
    """

    def __init__(
        self,
        wikipedia: WikipediaClient,
        wikidata: WikidataClient,
        batch_size: Optional[int] = None,
    ) -> None:
        self._wikipedia = wikipedia
        self._wikidata = wikidata
        self._batch_size = batch_size or settings.remote_batch_size

    async def resolve_redirects(self, titles: Sequence[str]) -> Dict[str, str]:
        """
        Map every title to its canonical title (identity when unknown).
        """
        unique = list(dict.fromkeys(titles))
        canonical = {title: title for title in unique}

        parts = await asyncio.gather(
            *(self._redirect_batch(b) for b in chunked(unique, self._batch_size))
        )
        for part in parts:
            canonical.update(part)
        return canonical

    async def fetch_classes(self, titles: Sequence[str]) -> Dict[str, List[str]]:
        """
        Fetch ordered class ids for canonical titles. Titles from failed
        batches are absent from the result.
        """
        unique = list(dict.fromkeys(titles))
        if not unique:
            return {}

        parts = await asyncio.gather(
            *(self._classes_batch(b) for b in chunked(unique, self._batch_size))
        )

        classes: Dict[str, List[str]] = {}
        for part in parts:
            classes.update(part)
        return classes

    async def resolve(self, titles: Sequence[str]) -> Dict[str, List[str]]:
        """
        Redirects then classes, keyed by the original titles.
        """
        canonical = await self.resolve_redirects(titles)
        classes = await self.fetch_classes(list(canonical.values()))
        return {
            title: classes[canonical[title]]
            for title in canonical
            if canonical[title] in classes
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _redirect_batch(self, titles: List[str]) -> Dict[str, str]:
        try:
            return await self._wikipedia.resolve_redirects(titles)
        except WikiClientError as exc:
            logger.warning(
                "Redirect lookup failed for %d titles, using titles as-is (%s)",
                len(titles),
                type(exc).__name__,
            )
            return {}

    async def _classes_batch(self, titles: List[str]) -> Dict[str, List[str]]:
        try:
            return await self._wikidata.get_instance_classes(titles)
        except WikiClientError as exc:
            logger.warning(
                "Class lookup failed for %d titles (%s)",
                len(titles),
                type(exc).__name__,
            )
            return {}
