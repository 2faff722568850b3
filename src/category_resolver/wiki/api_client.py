"""
MediaWiki Action API Client

Shared transport for the Wikipedia and Wikidata action APIs.

Design Goals
------------
- One place for retry and backoff on rate limits and server errors
- Batching helper that respects the API's 50-item ceiling
- Clean exception types so callers can degrade instead of crash
- Injectable transport for tests
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

import httpx

from ..config import settings

logger = logging.getLogger("resolver.wiki")

T = TypeVar("T")

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class WikiClientError(RuntimeError):
    """Base exception for remote wiki API failures."""


class WikiRequestError(WikiClientError):
    """Raised when a request fails at the transport or HTTP status level."""


class WikiResponseError(WikiClientError):
    """Raised when a response body cannot be interpreted."""


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def backoff_delay(attempt: int, retry_after: Optional[str] = None) -> float:
    """
    Delay before retry number `attempt` (1-based).

    A numeric Retry-After header wins when present; otherwise the delay grows
    exponentially from `retry_backoff_base`, capped at `retry_backoff_max`.
    """
    if retry_after:
        try:
            return min(float(retry_after), settings.retry_backoff_max)
        except ValueError:
            pass
    return min(settings.retry_backoff_base * (2 ** (attempt - 1)), settings.retry_backoff_max)


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class MediaWikiClient:
    """
    Minimal async client for a MediaWiki action API endpoint.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : str
            Full URL of the `api.php` endpoint.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional transport override (tests use `httpx.MockTransport`).

        timeout : Optional[float]
            Per-request timeout. Defaults to settings.http_timeout.

        max_retries : Optional[int]
            Attempts per request. Defaults to settings.max_retries.
        """
        self.base_url = str(base_url)
        self.timeout = timeout or settings.http_timeout
        self.max_retries = max_retries or settings.max_retries
        self.batch_size = settings.remote_batch_size
        self._transport = transport
        self._headers = {"User-Agent": settings.user_agent}

    async def _gather_batches(
        self,
        batch_fn: Callable[[List[str]], Awaitable[Dict[str, T]]],
        items: Sequence[str],
    ) -> Dict[str, T]:
        """
        Run `batch_fn` over `batch_size` chunks of the unique items
        concurrently and merge the results.

        A failed chunk is logged and left out; the others are kept.

        Raises
        ------
        WikiClientError
            If every chunk failed.
        """
        batches = list(chunked(list(dict.fromkeys(items)), self.batch_size))
        if not batches:
            return {}

        results = await asyncio.gather(
            *(batch_fn(b) for b in batches),
            return_exceptions=True,
        )

        merged: Dict[str, T] = {}
        failures: List[WikiClientError] = []
        for batch, part in zip(batches, results):
            if isinstance(part, WikiClientError):
                logger.warning(
                    "Batch of %d items from %s failed (%s)",
                    len(batch),
                    self.base_url,
                    type(part).__name__,
                )
                failures.append(part)
            elif isinstance(part, BaseException):
                raise part
            else:
                merged.update(part)

        if len(failures) == len(batches):
            raise failures[0]
        return merged

    async def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        GET the API with `params`, retrying transient failures.

        Raises
        ------
        WikiRequestError
            If every attempt failed or a non-retryable status was returned.

        WikiResponseError
            If the body is not a JSON object.
        """
        query = {"format": "json", **params}
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport,
        ) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    resp = await client.get(self.base_url, params=query)
                except httpx.TransportError as exc:
                    last_error = exc
                    logger.warning(
                        "Request to %s failed (%s), attempt %d/%d",
                        self.base_url,
                        type(exc).__name__,
                        attempt,
                        self.max_retries,
                    )
                    if attempt < self.max_retries:
                        await asyncio.sleep(backoff_delay(attempt))
                    continue

                if resp.status_code in RETRYABLE_STATUS:
                    last_error = httpx.HTTPStatusError(
                        f"HTTP {resp.status_code}", request=resp.request, response=resp
                    )
                    logger.warning(
                        "Request to %s returned %d, attempt %d/%d",
                        self.base_url,
                        resp.status_code,
                        attempt,
                        self.max_retries,
                    )
                    if attempt < self.max_retries:
                        await asyncio.sleep(
                            backoff_delay(attempt, resp.headers.get("Retry-After"))
                        )
                    continue

                try:
                    resp.raise_for_status()
                except httpx.HTTPStatusError as exc:
                    raise WikiRequestError(
                        f"Request failed with HTTP {resp.status_code}"
                    ) from exc

                try:
                    data = resp.json()
                except ValueError as exc:
                    raise WikiResponseError("Response body is not JSON") from exc

                if not isinstance(data, dict):
                    raise WikiResponseError("Response body is not a JSON object")

                if "error" in data:
                    info = data["error"]
                    code = info.get("code", "unknown") if isinstance(info, dict) else "unknown"
                    raise WikiResponseError(f"API error: {code}")

                return data

        raise WikiRequestError(
            f"Request failed after {self.max_retries} attempts: {type(last_error).__name__}"
        ) from last_error
