"""Key-value sinks - push the id -> query view to an external store."""

from __future__ import annotations

import importlib.util
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Protocol
from urllib.parse import urlsplit

import httpx

from .config import SinkConfig
from .errors import ConfigurationError, SinkError
from .identifiers import OutputMap
from .output import invert_output_map

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """
    The capability a store offers for persisted queries.

    The push step only calls ``set``. ``get`` is the lookup a server does
    when a client sends an id instead of a query, and is what callers use
    to verify a push.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def close(self) -> None:
        ...


class MemoryStore:
    """A dict-backed store, for dry runs and tests."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def close(self) -> None:
        pass

    def __enter__(self) -> "MemoryStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class HttpKeyValueStore:
    """
    A store reached over HTTP.

    Keys map to ``{base_url}/{key}``; values are written with PUT and read
    with GET, the layout used by Consul, etcd gateways and most REST caches.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            base_url: Endpoint under which keys live
            timeout: HTTP request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client, shared by every thread writing through this store."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(timeout=self.timeout, transport=self._transport)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "HttpKeyValueStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def get(self, key: str) -> Optional[str]:
        response = self.client.get(self._url(key))
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.text

    def set(self, key: str, value: str) -> None:
        response = self.client.put(
            self._url(key),
            content=value.encode("utf-8"),
            headers={"Content-Type": "application/graphql"},
        )
        response.raise_for_status()


class RedisKeyValueStore:
    """A Redis-backed store. Requires the ``redis`` extra."""

    def __init__(self, url: str) -> None:
        import redis

        self.url = url
        self._client = redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str) -> None:
        self._client.set(key, value)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RedisKeyValueStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


REDIS_SCHEMES = ("redis", "rediss", "unix")
HTTP_SCHEMES = ("http", "https")
SINK_SCHEMES = (*REDIS_SCHEMES, *HTTP_SCHEMES, "memory")


def _redis_available() -> bool:
    return importlib.util.find_spec("redis") is not None


def sink_scheme(url: str) -> str:
    """
    The scheme of a sink URL.

    Raises:
        ConfigurationError: If the URL scheme is not supported, or names
            Redis while the redis extra is not installed
    """
    scheme = urlsplit(url).scheme.lower()
    if scheme not in SINK_SCHEMES:
        raise ConfigurationError(
            f"Unsupported sink URL '{url}'. Use redis://, http:// or https://"
        )
    if scheme in REDIS_SCHEMES and not _redis_available():
        raise ConfigurationError(
            f"{scheme}:// sinks need the redis client: install persisted-queries[redis]"
        )
    return scheme


def open_store(sink: SinkConfig) -> KeyValueStore:
    """Create the store a sink URL points at."""
    scheme = sink_scheme(sink.url)
    if scheme in REDIS_SCHEMES:
        return RedisKeyValueStore(sink.url)
    if scheme in HTTP_SCHEMES:
        return HttpKeyValueStore(sink.url, timeout=sink.timeout)
    return MemoryStore()


def push_output_map(
    output_map: OutputMap,
    store: KeyValueStore,
    prefix: str = "graphqlQueries",
    max_workers: Optional[int] = None,
) -> int:
    """
    Write every id -> query pair of ``output_map`` under ``{prefix}:{id}``.

    One write is issued per entry and all of them are awaited before
    returning. Writes that succeeded are kept even when others fail.

    Returns:
        Number of entries written

    Raises:
        SinkError: If any write failed
    """
    to_push = invert_output_map(output_map)

    def write(item: tuple[str, str]) -> None:
        query_id, query = item
        logger.debug("Pushing query with id: %s", query_id)
        store.set(f"{prefix}:{query_id}", query)

    failed: dict[str, Exception] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            query_id: executor.submit(write, (query_id, query))
            for query_id, query in to_push.items()
        }
        for query_id, future in futures.items():
            error = future.exception()
            if error is not None:
                logger.error("Error pushing query %s: %s", query_id, error)
                failed[query_id] = error

    if failed:
        raise SinkError(failed)

    logger.info("All %d queries pushed", len(to_push))
    return len(to_push)
