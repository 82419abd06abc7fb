"""aiohttp transport used by the request executor."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

import aiohttp
from multidict import CIMultiDict
from yarl import URL

from ...core.exceptions import TransportError


@dataclass(frozen=True)
class TransportResponse:
    """Fully buffered HTTP response; the connection is already released."""

    status: int
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: bytes = b""


class Transport(Protocol):
    """Anything that can send one HTTP request and buffer its response."""

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        data: bytes | None = None,
    ) -> TransportResponse: ...

    async def close(self) -> None: ...


class HTTPTransport:
    """Async HTTP transport wrapper around an aiohttp session."""

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        data: bytes | None = None,
    ) -> TransportResponse:
        """Send a request and read the whole response body.

        URLs are passed pre-encoded so server-issued next links are sent
        byte-for-byte.

        Raises:
            TransportError: On connection, protocol or socket timeout failures
        """
        try:
            async with self.session.request(
                method, URL(url, encoded=True), headers=headers, data=data
            ) as response:
                body = await response.read()
                return TransportResponse(
                    status=response.status,
                    headers=CIMultiDict(response.headers),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{method} {url}: {e}") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPTransport:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
