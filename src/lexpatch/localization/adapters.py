"""Storage and fetch collaborators for TranslationLoader.

The loader never touches a filesystem, browser store or network directly; it
talks to two structural protocols:

    StorageAdapter - async key/value store for remote snapshots and patches
    BatchStorage   - StorageAdapter that can write/remove several keys at once
    Fetcher        - async HTTP GET returning a FetchResponse

Two implementations ship with the package: MemoryStorage (the default when no
storage is given) and HttpxFetcher (an httpx.AsyncClient adapter).

Python 3.13+.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from lexpatch.localization.types import StorageKey

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocols
    "StorageAdapter",
    "BatchStorage",
    "Fetcher",
    "FetchResponse",
    # Implementations
    "MemoryStorage",
    "FetchedResponse",
    "HttpxFetcher",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol for the async key/value store used by the loader.

    Values are JSON text (or a decimal timestamp). ``get`` returns None for a
    missing key; ``remove`` of a missing key is a no-op.

    Example:
        >>> class RedisStorage:
        ...     async def get(self, key: str) -> str | None:
        ...         return await redis.get(key)
        ...     async def set(self, key: str, value: str) -> None:
        ...         await redis.set(key, value)
        ...     async def remove(self, key: str) -> None:
        ...         await redis.delete(key)
    """

    async def get(self, key: StorageKey) -> str | None:
        """Read a value, or None when the key is absent."""

    async def set(self, key: StorageKey, value: str) -> None:
        """Write a value, replacing any previous one."""

    async def remove(self, key: StorageKey) -> None:
        """Delete a value if present."""


@runtime_checkable
class BatchStorage(StorageAdapter, Protocol):
    """StorageAdapter that writes and removes groups of keys together.

    The loader uses these for paired entries (remote snapshot plus its
    timestamp, universal plus language patch) so that a failure cannot leave
    one half of a pair behind.
    """

    async def set_many(self, items: Mapping[StorageKey, str]) -> None:
        """Write every item, or none of them."""

    async def remove_many(self, keys: Iterable[StorageKey]) -> None:
        """Delete every key, or none of them."""


class FetchResponse(Protocol):
    """Minimal view of an HTTP response."""

    @property
    def status(self) -> int:
        """HTTP status code."""
        ...

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        ...


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for the async HTTP GET used to fetch remote content."""

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> FetchResponse:
        """Perform a GET request.

        Raises:
            httpx.HTTPError or OSError: On transport failure
        """
        ...


class MemoryStorage:
    """In-process BatchStorage backed by a dict.

    Nothing survives the process; useful as a default and in tests.
    """

    __slots__ = ("_data",)

    def __init__(self, initial: Mapping[StorageKey, str] | None = None) -> None:
        self._data: dict[StorageKey, str] = dict(initial or {})

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"MemoryStorage(keys={len(self._data)})"

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[StorageKey]:
        return iter(list(self._data))

    async def get(self, key: StorageKey) -> str | None:
        return self._data.get(key)

    async def set(self, key: StorageKey, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: StorageKey) -> None:
        self._data.pop(key, None)

    async def set_many(self, items: Mapping[StorageKey, str]) -> None:
        self._data.update(items)

    async def remove_many(self, keys: Iterable[StorageKey]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[StorageKey, str]:
        """Copy of everything currently stored."""
        return dict(self._data)


@dataclass(frozen=True, slots=True)
class FetchedResponse:
    """Fully-read HTTP response returned by HttpxFetcher.

    Attributes:
        status: HTTP status code
        content: Raw response body
    """

    status: int
    content: bytes

    @property
    def ok(self) -> bool:
        """Whether the status is 2xx."""
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON (raises ValueError when invalid)."""
        return json.loads(self.content)


class HttpxFetcher:
    """Fetcher backed by httpx.AsyncClient.

    When no client is injected a short-lived client is opened per request,
    configured with ``timeout``. An injected client is used as-is and is never
    closed by the fetcher.

    Example:
        >>> async with httpx.AsyncClient(timeout=5.0) as client:
        ...     fetcher = HttpxFetcher(client)
        ...     response = await fetcher.fetch("https://cdn.example.com/en/content.json")
    """

    __slots__ = ("_client", "_timeout")

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            client: Client to reuse across requests (optional)
            timeout: Request timeout in seconds for the per-request client;
                None disables the timeout
        """
        self._client = client
        self._timeout = timeout

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"HttpxFetcher(shared_client={self._client is not None}, timeout={self._timeout})"

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> FetchedResponse:
        """GET url and read the whole body."""
        request_headers = dict(headers or {})
        if self._client is not None:
            response = await self._client.get(url, headers=request_headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers=request_headers)

        logger.debug("GET %s -> %d (%d bytes)", url, response.status_code, len(response.content))
        return FetchedResponse(status=response.status_code, content=response.content)
