"""Normalized response handed back to callers."""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from typing import Any

from multidict import CIMultiDict

from .envelope import Envelope


@dataclass
class GraphResponse:
    """Final response of one logical request.

    The body is a fresh in-memory stream owned by the caller; the underlying
    connection has already been released by the transport.
    """

    status_code: int
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: io.BytesIO = field(default_factory=io.BytesIO)
    envelope: Envelope | None = None

    @classmethod
    def from_bytes(
        cls,
        status_code: int,
        headers: CIMultiDict[str],
        content: bytes,
        envelope: Envelope | None = None,
    ) -> GraphResponse:
        return cls(
            status_code=status_code,
            headers=headers,
            body=io.BytesIO(content),
            envelope=envelope,
        )

    def read(self) -> bytes:
        """Read the remaining body bytes."""
        return self.body.read()

    def json(self) -> Any:
        """Decode the full body as JSON, regardless of the stream position."""
        return json.loads(self.body.getvalue())

    def close(self) -> None:
        self.body.close()
