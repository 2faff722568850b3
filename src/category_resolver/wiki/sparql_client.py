"""
Wikidata SPARQL Client

Transitive-closure queries used by the offline class map builder. This is not
on the request path, so it retries linearly (`attempt * retry_delay`) and
favours politeness over latency.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .api_client import WikiRequestError, WikiResponseError

logger = logging.getLogger("resolver.wiki.sparql")

ENTITY_PREFIX = "http://www.wikidata.org/entity/"

SUBCLASS_CLOSURE_QUERY = """
SELECT DISTINCT ?class WHERE {{
  ?class wdt:P279* wd:{root} .
}}
LIMIT {limit}
"""


class SparqlClient:
    """
    Client for the Wikidata Query Service.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retries: int = 3,
        retry_delay: float = 5.0,
        timeout: float = 90.0,
    ) -> None:
        self.endpoint = str(endpoint or settings.wikidata_sparql_url)
        self.retries = retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._transport = transport
        self._headers = {
            "Accept": "application/sparql-results+json",
            "User-Agent": settings.user_agent,
        }

    async def query(self, sparql: str) -> Dict[str, Any]:
        """
        Run a SELECT query and return the decoded JSON result.

        Raises
        ------
        WikiRequestError
            If all attempts fail.

        WikiResponseError
            If the response is not JSON.
        """
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport,
        ) as client:
            for attempt in range(1, self.retries + 1):
                try:
                    resp = await client.get(
                        self.endpoint, params={"query": sparql, "format": "json"}
                    )
                    if resp.status_code in (429, 503):
                        last_error = httpx.HTTPStatusError(
                            f"HTTP {resp.status_code}", request=resp.request, response=resp
                        )
                        logger.warning(
                            "SPARQL endpoint returned %d, waiting %.0fs (attempt %d/%d)",
                            resp.status_code,
                            attempt * self.retry_delay,
                            attempt,
                            self.retries,
                        )
                        if attempt < self.retries:
                            await asyncio.sleep(attempt * self.retry_delay)
                        continue
                    resp.raise_for_status()
                except httpx.HTTPError as exc:
                    last_error = exc
                    logger.warning(
                        "SPARQL attempt %d/%d failed: %s",
                        attempt,
                        self.retries,
                        type(exc).__name__,
                    )
                    if attempt < self.retries:
                        await asyncio.sleep(attempt * self.retry_delay)
                    continue

                try:
                    return resp.json()
                except ValueError as exc:
                    raise WikiResponseError("SPARQL response is not JSON") from exc

        raise WikiRequestError(
            f"SPARQL query failed after {self.retries} attempts"
        ) from last_error

    async def subclass_closure(self, root: str, limit: int = 5000) -> List[str]:
        """
        Return `root` and every class transitively subclassing it, in the
        order the endpoint returned them.
        """
        result = await self.query(SUBCLASS_CLOSURE_QUERY.format(root=root, limit=limit))
        bindings = (result.get("results") or {}).get("bindings") or []

        classes: List[str] = []
        for binding in bindings:
            uri = (binding.get("class") or {}).get("value", "")
            class_id = uri.rsplit("/", 1)[-1] if uri.startswith(ENTITY_PREFIX) else ""
            if class_id:
                classes.append(class_id)
        return classes
