"""
Wikipedia Client

Redirect resolution and free-text topic tags (non-hidden page categories)
for batches of article titles.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import settings
from .api_client import MediaWikiClient

logger = logging.getLogger("resolver.wiki.wikipedia")

CATEGORY_PREFIX = "Category:"

# Upper bound on continuation requests per tag batch
MAX_CONTINUATIONS = 20


class WikipediaClient(MediaWikiClient):
    """
    Client for the Wikipedia action API.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(str(settings.wikipedia_api_url), transport=transport)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve_redirects(self, titles: Sequence[str]) -> Dict[str, str]:
        """
        Map each title to its canonical (normalized, redirect-followed) title.

        Titles absent from the response map to themselves. All batches are
        issued concurrently; titles of a failed batch are left out.

        Raises
        ------
        WikiClientError
            If every batch fails after retries.
        """
        return await self._gather_batches(self._redirect_batch, titles)

    async def get_topic_tags(self, titles: Sequence[str]) -> Dict[str, List[str]]:
        """
        Return the visible (non-hidden) categories of each page, without the
        `Category:` prefix. Pages with no categories map to an empty list;
        titles of a failed batch are left out.

        Raises
        ------
        WikiClientError
            If every batch fails after retries.
        """
        return await self._gather_batches(self._tags_batch, titles)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _redirect_batch(self, titles: List[str]) -> Dict[str, str]:
        params = {
            "action": "query",
            "titles": "|".join(titles),
            "redirects": 1,
            "formatversion": 2,
        }
        data = await self._request(params)
        query = data.get("query", {})

        normalized = {n["from"]: n["to"] for n in query.get("normalized", []) if "from" in n}
        redirects = {r["from"]: r["to"] for r in query.get("redirects", []) if "from" in r}

        result: Dict[str, str] = {}
        for title in titles:
            name = normalized.get(title, title)
            result[title] = redirects.get(name, name)
        return result

    async def _tags_batch(self, titles: List[str]) -> Dict[str, List[str]]:
        """
        Categories are capped per response across the whole batch, so the
        `continue` block is followed until every page has been listed.
        """
        params: Dict[str, Any] = {
            "action": "query",
            "prop": "categories",
            "titles": "|".join(titles),
            "clshow": "!hidden",
            "cllimit": "max",
            "redirects": 1,
            "formatversion": 2,
        }

        normalized: Dict[str, str] = {}
        redirects: Dict[str, str] = {}
        by_page: Dict[str, List[str]] = {}

        for _ in range(MAX_CONTINUATIONS):
            data = await self._request(params)
            query = data.get("query", {})

            normalized.update(
                {n["from"]: n["to"] for n in query.get("normalized", []) if "from" in n}
            )
            redirects.update(
                {r["from"]: r["to"] for r in query.get("redirects", []) if "from" in r}
            )

            for page in query.get("pages", []):
                title = page.get("title")
                if not title:
                    continue
                by_page.setdefault(title, []).extend(
                    _strip_prefix(c.get("title", ""))
                    for c in page.get("categories", [])
                    if c.get("title")
                )

            cont = data.get("continue")
            if not cont:
                break
            params = {**params, **cont}
        else:
            logger.warning(
                "Topic tags for %d titles still incomplete after %d continuations",
                len(titles),
                MAX_CONTINUATIONS,
            )

        result: Dict[str, List[str]] = {}
        for title in titles:
            name = normalized.get(title, title)
            name = redirects.get(name, name)
            result[title] = by_page.get(name, [])
        return result


def _strip_prefix(category_title: str) -> str:
    if category_title.startswith(CATEGORY_PREFIX):
        return category_title[len(CATEGORY_PREFIX):]
    return category_title
