"""Shared fixtures and fakes for unit tests."""

from __future__ import annotations

import json
import typing as t
from unittest.mock import AsyncMock

import httpx
import pytest

from fallback_cache.monitoring.metrics import cache_fallback_total, cache_requests_total, remote_request_seconds
from fallback_cache.remote.client import RemoteCacheClient, RemoteCacheError
from fallback_cache.utils.config import CacheConfig, LocalStoreConfig, RemoteConfig

REMOTE_URL = "https://cache.example.test"
REMOTE_TOKEN = "test-token"


class FakeClock:
    """Settable replacement for `time.time`."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_metrics():
    cache_fallback_total.reset()
    cache_requests_total.reset()
    remote_request_seconds.reset()
    yield


@pytest.fixture
def remote_config():
    """Config with remote credentials present."""
    return CacheConfig(
        remote=RemoteConfig(url=REMOTE_URL, token=REMOTE_TOKEN),
        local=LocalStoreConfig(max_size=100),
    )


@pytest.fixture
def local_config():
    """Config with no remote credentials (memory-only)."""
    return CacheConfig(local=LocalStoreConfig(max_size=100))


@pytest.fixture
def failing_remote():
    """Remote client stub whose every operation raises."""
    remote = AsyncMock()
    error = RemoteCacheError("remote unavailable")
    for name in ("set", "get", "delete", "exists", "increment", "expire", "ping"):
        setattr(remote, name, AsyncMock(side_effect=error))
    return remote


@pytest.fixture
def mock_remote():
    """Remote client stub that succeeds."""
    remote = AsyncMock()
    remote.set = AsyncMock(return_value=True)
    remote.get = AsyncMock(return_value=None)
    remote.delete = AsyncMock(return_value=True)
    remote.exists = AsyncMock(return_value=True)
    remote.increment = AsyncMock(return_value=1)
    remote.expire = AsyncMock(return_value=True)
    remote.ping = AsyncMock(return_value=True)
    return remote


class RecordingTransport:
    """Builds an `httpx.MockTransport` that answers with canned replies.

    `reply` may be a dict (sent as JSON with status 200), an `httpx.Response`,
    or an exception instance to raise. Every request body is decoded and kept
    in `commands`.
    """

    def __init__(self, reply: t.Any = None) -> None:
        self.reply = {"result": "OK"} if reply is None else reply
        self.commands: t.List[t.List[t.Any]] = []
        self.requests: t.List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.commands.append(json.loads(request.content))
        if isinstance(self.reply, Exception):
            raise self.reply
        if isinstance(self.reply, httpx.Response):
            # fresh copy so one canned reply can answer several requests
            return httpx.Response(self.reply.status_code, headers=self.reply.headers, content=self.reply.content)
        return httpx.Response(200, json=self.reply)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def recorder():
    return RecordingTransport()


@pytest.fixture
def client(recorder):
    """Remote client wired to `recorder`; set `recorder.reply` per test."""
    return RemoteCacheClient(REMOTE_URL, REMOTE_TOKEN, transport=recorder.transport)
