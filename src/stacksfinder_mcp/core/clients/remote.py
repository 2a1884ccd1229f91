"""Resilient HTTP dispatcher for the StacksFinder API.

Two guarantees wrap every outbound call:

- bounded concurrency: at most ``max_concurrency`` requests are on the wire,
  later callers queue in arrival order;
- response caching for cacheable calls, with in-flight coalescing so that
  concurrent callers asking for the same canonical key share one request.

Non-2xx responses are mapped to ``StacksFinderError`` here, once, and are
never cached.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from ..errors import ErrorKind, StacksFinderError, api_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_CACHE_CAPACITY = 256

_MISS = object()


def canonical_key(method: str, path: str, body: Any = None) -> str:
    """Deterministic cache key for a request: sha256 over sorted-key JSON."""
    payload = json.dumps(
        {"method": method.upper(), "path": path, "body": body},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl


class _ResponseCache:
    """TTL cache with a fixed capacity; the oldest entry is evicted first."""

    def __init__(self, ttl: float, capacity: int, clock: Callable[[], float]):
        self._ttl = ttl
        self._capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISS
        if entry.expired(self._clock()):
            del self._entries[key]
            return _MISS
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock(), ttl=self._ttl)
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull a human message out of an error body, if there is a usable one."""
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text if text and len(text) < 200 else None
    if isinstance(data, dict):
        return data.get("error") or data.get("message")
    return None


def _timeout_error(deadline: float) -> StacksFinderError:
    return StacksFinderError(
        ErrorKind.TIMEOUT,
        f"Request timed out after {deadline:g}s",
        ["The API may be under heavy load. Please try again."],
    )


class RemoteClient:
    """Concurrency-limited, caching dispatcher for one API base URL.

    Args:
        base_url: Service root, e.g. ``https://stacksfinder.com``.
        api_key: Bearer credential. Requests fail with CONFIG_ERROR without one.
        timeout: Default per-call deadline in seconds.
        max_concurrency: Maximum simultaneous outbound calls.
        cache_ttl: Seconds a cached response stays valid.
        cache_capacity: Maximum cached responses.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        clock: Monotonic clock used for cache expiry.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        cache_capacity: int = DEFAULT_CACHE_CAPACITY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._cache = _ResponseCache(cache_ttl, cache_capacity, clock)
        self._inflight: dict[str, asyncio.Future] = {}

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    @property
    def cached_entries(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        *,
        cacheable: bool = False,
        timeout: Optional[float] = None,
    ) -> Any:
        """Perform one API call and return the decoded JSON payload.

        Cacheable calls are answered from the cache when possible; a miss
        either joins an identical request already in flight or starts the
        only one for that key. A joining caller waits at most its own
        ``timeout``; giving up does not cancel the shared request.
        """
        if not self._api_key:
            raise StacksFinderError(
                ErrorKind.CONFIG_ERROR,
                "API key not configured. Set STACKSFINDER_API_KEY environment variable.",
                ["Get your API key from https://stacksfinder.com/settings/api"],
            )

        if not cacheable:
            return await self._send(method, path, body, timeout)

        key = canonical_key(method, path, body)
        cached = self._cache.get(key)
        if cached is not _MISS:
            logger.debug("Cache hit for %s %s", method, path)
            return cached

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_and_store(key, method, path, body, timeout))
            self._inflight[key] = pending
            pending.add_done_callback(lambda fut, k=key: self._forget(k, fut))
            return await asyncio.shield(pending)

        logger.debug("Joining in-flight request for %s %s", method, path)
        deadline = timeout or self._timeout
        try:
            return await asyncio.wait_for(asyncio.shield(pending), deadline)
        except asyncio.TimeoutError as exc:
            raise _timeout_error(deadline) from exc

    def _forget(self, key: str, future: asyncio.Future) -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        if not future.cancelled():
            # Marks the exception retrieved when every waiter was cancelled.
            future.exception()

    async def _fetch_and_store(self, key: str, method: str, path: str, body: Optional[dict], timeout: Optional[float]) -> Any:
        value = await self._send(method, path, body, timeout)
        self._cache.set(key, value)
        logger.debug("Cached response for %s %s", method, path)
        return value

    async def _send(self, method: str, path: str, body: Optional[dict], timeout: Optional[float]) -> Any:
        deadline = timeout or self._timeout
        async with self._semaphore:
            logger.debug("API request: %s %s%s", method, self._base_url, path)
            try:
                response = await asyncio.wait_for(self._dispatch(method, path, body, deadline), deadline)
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                raise _timeout_error(deadline) from exc
            except httpx.HTTPError as exc:
                logger.error("API request failed: %s %s: %s", method, path, exc)
                raise StacksFinderError(ErrorKind.API_ERROR, str(exc) or "Unknown API error") from exc
        return self._decode(response)

    async def _dispatch(self, method: str, path: str, body: Optional[dict], timeout: float) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            transport=self._transport,
        ) as client:
            return await client.request(method, path, json=body, headers=headers)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.is_success:
            raise api_error(response.status_code, _error_message(response))
        if "application/json" not in response.headers.get("content-type", ""):
            raise StacksFinderError(ErrorKind.API_ERROR, "API returned non-JSON response")
        try:
            return response.json()
        except ValueError as exc:
            raise StacksFinderError(ErrorKind.API_ERROR, "API returned malformed JSON") from exc
