"""
Wikidata Client

Batch lookups against the Wikidata action API (`wbgetentities`):

- instance-of (P31) class ids of the entities behind Wikipedia titles
- subclass-of (P279) parent class ids of taxonomy classes

Claim values are returned in declared order, deduplicated, with deprecated
statements skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import settings
from ..core.titles import title_key
from .api_client import MediaWikiClient

logger = logging.getLogger("resolver.wiki.wikidata")

INSTANCE_OF = "P31"
SUBCLASS_OF = "P279"
SITE = "enwiki"


def claim_item_ids(entity: Dict[str, Any], prop: str) -> List[str]:
    """
    Extract the item ids of `prop` statements from an entity, in order.
    """
    ids: List[str] = []
    for claim in entity.get("claims", {}).get(prop, []) or []:
        if not isinstance(claim, dict) or claim.get("rank") == "deprecated":
            continue
        value = (claim.get("mainsnak") or {}).get("datavalue", {}).get("value")
        item_id = value.get("id") if isinstance(value, dict) else None
        if item_id and item_id not in ids:
            ids.append(item_id)
    return ids


class WikidataClient(MediaWikiClient):
    """
    Client for the Wikidata action API.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(str(settings.wikidata_api_url), transport=transport)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_instance_classes(self, titles: Sequence[str]) -> Dict[str, List[str]]:
        """
        Fetch the P31 class ids for the entity linked to each Wikipedia title.

        Titles without an entity or without P31 statements map to an empty
        list. Titles of a failed batch are absent from the result.

        Raises
        ------
        WikiClientError
            If every batch fails after retries.
        """
        return await self._gather_batches(self._instance_batch, titles)

    async def get_subclass_parents(self, class_ids: Sequence[str]) -> Dict[str, List[str]]:
        """
        Fetch the P279 parent class ids of each class id.

        Unknown ids map to an empty list. Ids of a failed batch are absent
        from the result.

        Raises
        ------
        WikiClientError
            If every batch fails after retries.
        """
        return await self._gather_batches(self._parents_batch, class_ids)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _instance_batch(self, titles: List[str]) -> Dict[str, List[str]]:
        params = {
            "action": "wbgetentities",
            "sites": SITE,
            "titles": "|".join(titles),
            "props": "claims|sitelinks",
            "sitefilter": SITE,
        }
        data = await self._request(params)

        by_key: Dict[str, List[str]] = {}
        for entity_id, entity in (data.get("entities") or {}).items():
            if entity_id.startswith("-") or "missing" in entity:
                continue
            sitelink = (entity.get("sitelinks") or {}).get(SITE) or {}
            site_title = sitelink.get("title")
            if not site_title:
                continue
            by_key[title_key(site_title)] = claim_item_ids(entity, INSTANCE_OF)

        return {title: by_key.get(title_key(title), []) for title in titles}

    async def _parents_batch(self, class_ids: List[str]) -> Dict[str, List[str]]:
        params = {
            "action": "wbgetentities",
            "ids": "|".join(class_ids),
            "props": "claims",
        }
        data = await self._request(params)
        entities = data.get("entities") or {}

        return {
            class_id: claim_item_ids(entities.get(class_id) or {}, SUBCLASS_OF)
            for class_id in class_ids
        }
