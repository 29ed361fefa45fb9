from __future__ import annotations

import json
import logging
import time
import typing as t

import httpx

from fallback_cache.monitoring.metrics import remote_request_seconds
from fallback_cache.utils.config import RemoteConfig

_logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class RemoteCacheError(Exception):
    """Any failure talking to the remote cache service."""


class RemoteCacheNotConfiguredError(RemoteCacheError):
    pass


class RemoteCacheTimeoutError(RemoteCacheError):
    pass


class RemoteCacheResponseError(RemoteCacheError):
    pass


class RemoteCacheClient:
    """Client for a REST key/value service speaking the Redis command protocol.

    - Every call is one `POST <url>` whose JSON body is the command array,
      e.g. `["SETEX", key, "60", "<json>"]`
    - Auth is `Authorization: Bearer <token>`
    - Replies are `{"result": ...}` or `{"error": "..."}`

    Values are JSON-encoded on the way out and decoded on the way back. Any
    transport error, timeout, non-2xx status or malformed body raises a
    `RemoteCacheError`; deciding what to do about it is the caller's job.
    """

    def __init__(
        self,
        url: t.Optional[str],
        token: t.Optional[str],
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: t.Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._token = token
        self._timeout = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: RemoteConfig, *, transport: t.Optional[httpx.AsyncBaseTransport] = None
    ) -> "RemoteCacheClient":
        return cls(config.url, config.token, timeout_seconds=config.timeout_seconds, transport=transport)

    @property
    def is_configured(self) -> bool:
        return bool(self._url and self._token)

    async def _command(self, *command: str) -> t.Any:
        if not self.is_configured:
            raise RemoteCacheNotConfiguredError("remote cache URL and token are required")
        name = command[0]
        headers = {"Authorization": f"Bearer {self._token}"}
        started = time.perf_counter()
        try:
            # One client per request; nothing is pooled between calls
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=list(command), headers=headers)
        except httpx.TimeoutException as exc:
            raise RemoteCacheTimeoutError(f"{name} timed out after {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            raise RemoteCacheError(f"{name} request failed: {exc}") from exc
        finally:
            remote_request_seconds.observe(time.perf_counter() - started, command=name)

        if not response.is_success:
            raise RemoteCacheResponseError(f"{name} failed with status {response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteCacheResponseError(f"{name} returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise RemoteCacheResponseError(f"{name} returned an unexpected body: {body!r}")
        if body.get("error") is not None:
            raise RemoteCacheResponseError(f"{name} failed: {body['error']}")
        if "result" not in body:
            raise RemoteCacheResponseError(f"{name} reply has no result")
        _logger.debug("remote %s ok", name)
        return body["result"]

    @staticmethod
    def _as_int(name: str, result: t.Any) -> int:
        try:
            return int(result)
        except (TypeError, ValueError) as exc:
            raise RemoteCacheResponseError(f"{name} returned a non-numeric result: {result!r}") from exc

    async def set(self, key: str, value: t.Any, ttl_seconds: float = 3600) -> bool:
        result = await self._command("SETEX", key, str(ttl_seconds), json.dumps(value))
        return result == "OK"

    async def get(self, key: str) -> t.Optional[t.Any]:
        result = await self._command("GET", key)
        # Only an explicit null is a miss; 0, "" and False are stored values
        if result is None:
            return None
        if not isinstance(result, str):
            return result
        try:
            return json.loads(result)
        except ValueError as exc:
            raise RemoteCacheResponseError(f"GET {key} returned a value that is not JSON") from exc

    async def delete(self, key: str) -> bool:
        return self._as_int("DEL", await self._command("DEL", key)) > 0

    async def exists(self, key: str) -> bool:
        return self._as_int("EXISTS", await self._command("EXISTS", key)) > 0

    async def increment(self, key: str) -> int:
        return self._as_int("INCR", await self._command("INCR", key))

    async def expire(self, key: str, ttl_seconds: float) -> bool:
        return self._as_int("EXPIRE", await self._command("EXPIRE", key, str(ttl_seconds))) == 1

    async def ping(self) -> bool:
        return await self._command("PING") == "PONG"
