"""Process-wide cache of the Stellar Asset Contract interface description."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any
from urllib.parse import urlparse

import requests
from stellar_sdk import xdr as stellar_xdr

from ..constants import DEFAULT_REQUEST_TIMEOUT
from ..exceptions import NetworkError, ValidationError
from ..types import SacSpecCacheEntry
from .config import SacSpecSource

logger = logging.getLogger(__name__)

SpecFetcher = Callable[[SacSpecSource], Awaitable[Sequence[str]]]


class SacSpecCache:
    """Fetch the asset-contract interface once per source and share it.

    Concurrent callers asking for the same source await a single in-flight
    fetch. A failed fetch caches nothing, so the next call retries.
    """

    def __init__(
        self,
        fetcher: SpecFetcher | None = None,
        *,
        session: requests.Session | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._fetcher = fetcher or self._fetch_remote
        self._session = session or requests.Session()
        self._request_timeout = request_timeout
        self._cache: dict[str, SacSpecCacheEntry] = {}
        self._in_flight: dict[str, asyncio.Task[SacSpecCacheEntry]] = {}

    def __contains__(self, source: object) -> bool:
        if isinstance(source, SacSpecSource):
            return source.canonical_url() in self._cache
        return source in self._cache

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def clear(self) -> None:
        self._cache.clear()

    async def get(self, source: SacSpecSource | None = None) -> SacSpecCacheEntry:
        source = source or SacSpecSource()
        key = source.canonical_url()

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("Fetching asset contract spec from %s", key)
            task = asyncio.ensure_future(self._load(source, key))
            self._in_flight[key] = task
        return await asyncio.shield(task)

    async def _load(self, source: SacSpecSource, key: str) -> SacSpecCacheEntry:
        try:
            encoded = tuple(await self._fetcher(source))
            decoded = tuple(_decode_entry(item, key) for item in encoded)
            entry = SacSpecCacheEntry(key, encoded, decoded)
            self._cache[key] = entry
            logger.info("Cached %d asset contract spec entries from %s", len(decoded), key)
            return entry
        finally:
            self._in_flight.pop(key, None)

    # ------------------------------------------------------------------
    # Default fetcher
    # ------------------------------------------------------------------
    async def _fetch_remote(self, source: SacSpecSource) -> Sequence[str]:
        return await asyncio.to_thread(self._fetch_blocking, source)

    def _fetch_blocking(self, source: SacSpecSource) -> Sequence[str]:
        url = source.canonical_url()
        host = urlparse(url).hostname or ""
        if source.allowed_hosts and host not in source.allowed_hosts:
            raise ValidationError(
                "Spec source host is not allowed",
                field="url",
                value=url,
                details={"allowed_hosts": list(source.allowed_hosts)},
            )

        try:
            response = self._session.get(url, timeout=self._request_timeout, allow_redirects=False)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkError(
                f"Failed to fetch asset contract spec from {url}",
                endpoint=url,
                status_code=getattr(exc.response, "status_code", None),
                details={"error": str(exc)},
            ) from exc

        if 300 <= response.status_code < 400:
            raise ValidationError(
                "Spec source responded with a redirect",
                field="url",
                value=url,
                details={
                    "status": response.status_code,
                    "location": response.headers.get("Location"),
                },
            )

        return _entries_from_payload(response.json(), url)


def _entries_from_payload(payload: Any, url: str) -> list[str]:
    if isinstance(payload, Mapping):
        payload = payload.get("entries")
    if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
        raise ValidationError(
            "Spec payload must be a list of base64 XDR entries",
            field="payload",
            value=payload,
            details={"url": url},
        )
    return payload


def _decode_entry(encoded: str, key: str) -> stellar_xdr.SCSpecEntry:
    try:
        return stellar_xdr.SCSpecEntry.from_xdr(encoded)
    except Exception as exc:
        raise ValidationError(
            "Invalid spec entry XDR", field="entries", value=encoded, details={"url": key}
        ) from exc
