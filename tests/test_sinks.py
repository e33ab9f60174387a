"""Tests for pushing the query map to key-value stores."""

from __future__ import annotations

import sys
import time
import types
from typing import Optional

import httpx
import pytest

from persisted_queries import sinks
from persisted_queries.config import SinkConfig
from persisted_queries.errors import ConfigurationError, SinkError
from persisted_queries.output import invert_output_map
from persisted_queries.sinks import (
    HttpKeyValueStore,
    MemoryStore,
    RedisKeyValueStore,
    open_store,
    push_output_map,
    sink_scheme,
)

OUTPUT_MAP = {"query A {\n  a\n}": 1, "query B {\n  b\n}": 2}


def test_invert_output_map_uses_string_ids() -> None:
    assert invert_output_map(OUTPUT_MAP) == {"1": "query A {\n  a\n}", "2": "query B {\n  b\n}"}


def test_push_writes_one_key_per_entry() -> None:
    store = MemoryStore()

    pushed = push_output_map(OUTPUT_MAP, store, prefix="ns")

    assert pushed == 2
    assert store.data == {"ns:1": "query A {\n  a\n}", "ns:2": "query B {\n  b\n}"}


def test_failed_write_is_reported_after_the_others() -> None:
    class FlakyStore(MemoryStore):
        def set(self, key: str, value: str) -> None:
            if key.endswith(":1"):
                raise ConnectionError("store unavailable")
            super().set(key, value)

    store = FlakyStore()

    with pytest.raises(SinkError) as excinfo:
        push_output_map(OUTPUT_MAP, store, prefix="ns")

    assert list(excinfo.value.failed) == ["1"]
    assert store.data == {"ns:2": "query B {\n  b\n}"}


def _kv_transport(data: dict[str, str], requests: Optional[list[httpx.Request]] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        key = request.url.path.rsplit("/", 1)[-1]
        if request.method == "PUT":
            data[key] = request.content.decode("utf-8")
            return httpx.Response(200)
        if key in data:
            return httpx.Response(200, text=data[key])
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def test_http_store_round_trip() -> None:
    data: dict[str, str] = {}
    requests: list[httpx.Request] = []

    with HttpKeyValueStore("http://kv.test/v1/kv/", transport=_kv_transport(data, requests)) as store:
        store.set("graphqlQueries:1", "query A {\n  a\n}")
        assert store.get("graphqlQueries:1") == "query A {\n  a\n}"
        assert store.get("graphqlQueries:2") is None

    assert data == {"graphqlQueries:1": "query A {\n  a\n}"}
    assert str(requests[0].url) == "http://kv.test/v1/kv/graphqlQueries:1"
    assert requests[0].method == "PUT"


def test_http_store_raises_on_server_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))

    with HttpKeyValueStore("http://kv.test", transport=transport) as store:
        with pytest.raises(httpx.HTTPStatusError):
            store.set("key", "value")


def test_push_through_http_store() -> None:
    data: dict[str, str] = {}

    with HttpKeyValueStore("http://kv.test", transport=_kv_transport(data)) as store:
        push_output_map(OUTPUT_MAP, store)

    assert data == {
        "graphqlQueries:1": "query A {\n  a\n}",
        "graphqlQueries:2": "query B {\n  b\n}",
    }


def test_open_store_by_scheme() -> None:
    assert isinstance(open_store(SinkConfig(url="memory://")), MemoryStore)
    assert isinstance(open_store(SinkConfig(url="https://kv.example.com")), HttpKeyValueStore)


def test_open_store_rejects_unknown_scheme() -> None:
    with pytest.raises(ConfigurationError):
        open_store(SinkConfig(url="ftp://kv.example.com"))


def test_concurrent_pushes_share_one_http_client(monkeypatch: pytest.MonkeyPatch) -> None:
    data: dict[str, str] = {}
    created: list[httpx.Client] = []

    class SlowClient(httpx.Client):
        def __init__(self, **kwargs) -> None:
            time.sleep(0.05)
            super().__init__(**kwargs)
            created.append(self)

    monkeypatch.setattr(sinks.httpx, "Client", SlowClient)
    output_map = {f"query Q{i} {{\n  a\n}}": i for i in range(20)}

    with HttpKeyValueStore("http://kv.test", transport=_kv_transport(data)) as store:
        push_output_map(output_map, store, max_workers=8)

    assert len(created) == 1
    assert len(data) == 20


class FakeRedis:
    def __init__(self, url: str, **options) -> None:
        self.url = url
        self.options = options
        self.data: dict[str, str] = {}
        self.closed = False

    @classmethod
    def from_url(cls, url: str, **options) -> "FakeRedis":
        return cls(url, **options)

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def close(self) -> None:
        self.closed = True


def _install_fake_redis(monkeypatch: pytest.MonkeyPatch) -> None:
    module = types.ModuleType("redis")
    module.Redis = FakeRedis
    monkeypatch.setitem(sys.modules, "redis", module)
    monkeypatch.setattr(sinks, "_redis_available", lambda: True)


def test_redis_store_talks_to_client(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_redis(monkeypatch)

    with RedisKeyValueStore("redis://cache.test:6379/0") as store:
        client = store._client
        push_output_map(OUTPUT_MAP, store, prefix="ns")
        assert store.get("ns:1") == "query A {\n  a\n}"
        assert store.get("ns:3") is None

    assert client.url == "redis://cache.test:6379/0"
    assert client.options == {"decode_responses": True}
    assert client.data == {"ns:1": "query A {\n  a\n}", "ns:2": "query B {\n  b\n}"}
    assert client.closed


def test_open_store_picks_redis_for_redis_urls(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_redis(monkeypatch)

    assert isinstance(open_store(SinkConfig(url="rediss://cache.test")), RedisKeyValueStore)


def test_redis_url_without_redis_extra_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sinks, "_redis_available", lambda: False)

    for url in ("redis://localhost:6399/0", "rediss://localhost", "unix:///tmp/redis.sock"):
        with pytest.raises(ConfigurationError, match=r"install persisted-queries\[redis\]"):
            sink_scheme(url)

    assert sink_scheme("https://kv.example.com") == "https"
