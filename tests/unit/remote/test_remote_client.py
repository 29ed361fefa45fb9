"""Unit tests for RemoteCacheClient against a mocked HTTP transport."""

import json

import httpx
import pytest

from fallback_cache.monitoring.metrics import remote_request_seconds
from fallback_cache.remote.client import (
    RemoteCacheClient,
    RemoteCacheError,
    RemoteCacheNotConfiguredError,
    RemoteCacheResponseError,
    RemoteCacheTimeoutError,
)
from fallback_cache.utils.config import RemoteConfig


@pytest.mark.asyncio
class TestWireProtocol:
    """Test each operation's command and result interpretation."""

    async def test_set_sends_setex_with_json_value(self, client, recorder):
        recorder.reply = {"result": "OK"}

        assert await client.set("k", {"x": 1}, 60) is True

        assert recorder.commands == [["SETEX", "k", "60", json.dumps({"x": 1})]]
        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url).rstrip("/") == "https://cache.example.test"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Content-Type"] == "application/json"

    async def test_set_uses_default_ttl(self, client, recorder):
        await client.set("k", "v")
        assert recorder.commands[0][2] == "3600"

    async def test_set_not_ok(self, client, recorder):
        recorder.reply = {"result": None}
        assert await client.set("k", "v") is False

    async def test_get_decodes_json(self, client, recorder):
        recorder.reply = {"result": json.dumps({"x": 1})}

        assert await client.get("k") == {"x": 1}
        assert recorder.commands == [["GET", "k"]]

    async def test_get_null_is_miss(self, client, recorder):
        recorder.reply = {"result": None}
        assert await client.get("k") is None

    async def test_get_falsy_value_is_hit(self, client, recorder):
        """Test a stored 0 comes back as 0, not as a miss."""
        recorder.reply = {"result": "0"}
        value = await client.get("k")
        assert value == 0
        assert value is not None

    async def test_get_undecodable_value_raises(self, client, recorder):
        recorder.reply = {"result": "not-json{"}
        with pytest.raises(RemoteCacheResponseError):
            await client.get("k")

    async def test_delete(self, client, recorder):
        recorder.reply = {"result": 1}
        assert await client.delete("k") is True
        assert recorder.commands == [["DEL", "k"]]

        recorder.reply = {"result": 0}
        assert await client.delete("k") is False

    async def test_exists(self, client, recorder):
        recorder.reply = {"result": 1}
        assert await client.exists("k") is True
        assert recorder.commands == [["EXISTS", "k"]]

        recorder.reply = {"result": 0}
        assert await client.exists("k") is False

    async def test_increment(self, client, recorder):
        recorder.reply = {"result": 7}
        assert await client.increment("counter") == 7
        assert recorder.commands == [["INCR", "counter"]]

    async def test_expire(self, client, recorder):
        recorder.reply = {"result": 1}
        assert await client.expire("k", 30) is True
        assert recorder.commands == [["EXPIRE", "k", "30"]]

        recorder.reply = {"result": 0}
        assert await client.expire("k", 30) is False

    async def test_ping(self, client, recorder):
        recorder.reply = {"result": "PONG"}
        assert await client.ping() is True
        assert recorder.commands == [["PING"]]

        recorder.reply = {"result": "NOPE"}
        assert await client.ping() is False

    async def test_one_request_per_call(self, client, recorder):
        await client.set("a", 1)
        await client.set("b", 2)
        assert len(recorder.requests) == 2

    async def test_latency_is_recorded(self, client, recorder):
        recorder.reply = {"result": "PONG"}
        await client.ping()
        assert remote_request_seconds.total(command="PING") == 1


@pytest.mark.asyncio
class TestFailures:
    """Test every failure mode surfaces as a RemoteCacheError."""

    async def test_not_configured_fails_fast(self, recorder):
        client = RemoteCacheClient(None, "test-token", transport=recorder.transport)

        assert client.is_configured is False
        with pytest.raises(RemoteCacheNotConfiguredError):
            await client.get("k")
        assert recorder.requests == []

    async def test_missing_token_fails_fast(self):
        client = RemoteCacheClient("https://cache.example.test", "")
        with pytest.raises(RemoteCacheNotConfiguredError):
            await client.ping()

    async def test_non_2xx_status(self, client, recorder):
        recorder.reply = httpx.Response(500, json={"result": "OK"})
        with pytest.raises(RemoteCacheResponseError, match="500"):
            await client.set("k", "v")

    async def test_unauthorized_status(self, client, recorder):
        recorder.reply = httpx.Response(401, json={"error": "Unauthorized"})
        with pytest.raises(RemoteCacheError):
            await client.get("k")

    async def test_error_body(self, client, recorder):
        recorder.reply = {"error": "WRONGTYPE Operation against a key"}
        with pytest.raises(RemoteCacheResponseError, match="WRONGTYPE"):
            await client.increment("k")

    async def test_malformed_body(self, client, recorder):
        recorder.reply = httpx.Response(200, content=b"<html>oops</html>")
        with pytest.raises(RemoteCacheResponseError):
            await client.get("k")

    async def test_body_without_result(self, client, recorder):
        recorder.reply = {"something": "else"}
        with pytest.raises(RemoteCacheResponseError):
            await client.get("k")

    async def test_non_object_body(self, client, recorder):
        recorder.reply = httpx.Response(200, json=["OK"])
        with pytest.raises(RemoteCacheResponseError):
            await client.ping()

    async def test_non_numeric_result(self, client, recorder):
        recorder.reply = {"result": "many"}
        with pytest.raises(RemoteCacheResponseError):
            await client.delete("k")

    async def test_connection_error(self, client, recorder):
        recorder.reply = httpx.ConnectError("connection refused")
        with pytest.raises(RemoteCacheError):
            await client.get("k")

    async def test_timeout(self, client, recorder):
        recorder.reply = httpx.ReadTimeout("timed out")
        with pytest.raises(RemoteCacheTimeoutError):
            await client.get("k")


class TestConstruction:
    def test_from_config(self):
        config = RemoteConfig(url="https://cache.example.test", token="t", timeout_seconds=2.5)
        client = RemoteCacheClient.from_config(config)
        assert client.is_configured is True
        assert client._timeout == 2.5

    def test_default_timeout_is_explicit(self):
        client = RemoteCacheClient("https://cache.example.test", "t")
        assert client._timeout == 5.0
