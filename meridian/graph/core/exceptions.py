"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.envelope import Envelope


class GraphError(Exception):
    """Base exception for all library errors.

    Every error carries the last observed HTTP status and decoded envelope
    (when any were observed) so callers can diagnose the failure path.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        envelope: Envelope | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.envelope = envelope


class EndpointParseError(GraphError):
    """Base endpoint is not a valid absolute URL."""

    pass


class AuthTokenError(GraphError):
    """Authorizer failed to produce an access token."""

    pass


class TransportError(GraphError):
    """Request could not be sent or its response could not be received."""

    pass


class EnvelopeDecodeError(GraphError):
    """Response body could not be decoded into an envelope."""

    pass


class UnexpectedStatusError(GraphError):
    """Response status was neither valid nor retryable.

    ``detail`` holds the structured error text from the envelope when the
    API returned one, otherwise the raw response body.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        envelope: Envelope | None = None,
    ) -> None:
        super().__init__(
            f"unexpected status {status_code} with {detail}",
            status_code=status_code,
            envelope=envelope,
        )
        self.detail = detail


class CancellationError(GraphError):
    """Call deadline expired before a final response was produced."""

    pass
