"""Shared fixtures for unit tests: a scripted transport and response builders."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock

import pytest
from multidict import CIMultiDict

from meridian.graph.core import ClientConfig
from meridian.graph.runtime.rest import RequestExecutor, TransportResponse


class ScriptedTransport:
    """Transport replaying a fixed list of responses (or exceptions) in order."""

    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        data: bytes | None = None,
    ) -> TransportResponse:
        self.calls.append({"method": method, "url": url, "headers": dict(headers), "data": data})
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


def _json_response(
    status: int,
    payload: Any = None,
    headers: dict[str, str] | None = None,
) -> TransportResponse:
    all_headers = CIMultiDict({"Content-Type": "application/json; charset=utf-8"})
    all_headers.update(headers or {})
    body = b"" if payload is None else json.dumps(payload).encode()
    return TransportResponse(status=status, headers=all_headers, body=body)


def _text_response(
    status: int,
    text: str = "",
    headers: dict[str, str] | None = None,
) -> TransportResponse:
    all_headers = CIMultiDict({"Content-Type": "text/plain"})
    all_headers.update(headers or {})
    return TransportResponse(status=status, headers=all_headers, body=text.encode())


@pytest.fixture
def json_response():
    """Builder for JSON transport responses."""
    return _json_response


@pytest.fixture
def text_response():
    """Builder for plain-text transport responses."""
    return _text_response


@pytest.fixture
def scripted_transport():
    """Factory for ScriptedTransport instances."""
    return ScriptedTransport


@pytest.fixture
def config():
    """Default v1.0 client configuration for tenant 'contoso'."""
    return ClientConfig(api_version="v1.0", tenant_id="contoso")


@pytest.fixture
def sleep():
    """Recording replacement for asyncio.sleep."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_executor(config, sleep):
    """Build a RequestExecutor over a transport with recorded sleeps."""

    def _make(transport, *, authorizer=None, executor_config=None):
        return RequestExecutor(
            executor_config or config,
            transport,
            authorizer,
            sleep=sleep,
        )

    return _make
