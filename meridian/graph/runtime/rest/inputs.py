"""Per-verb request inputs and the capability contract the executor reads.

Architecture:
    Every verb input exposes the same three capabilities through the
    RequestInput protocol: the statuses it considers valid, an optional
    extra-valid predicate, and an optional consistency-failure predicate.
    The concrete inputs are a small closed set of frozen dataclasses; only
    GET adds paging controls.

Design Decisions:
    - Protocol over inheritance: the executor never needs to know the verb
    - Frozen dataclasses: inputs are per-call values, copied with replace()
    - ``_raw_uri`` is private to pagination and hidden from repr
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .uri import Uri

if TYPE_CHECKING:
    from ...models.envelope import Envelope
    from .transport import TransportResponse

# (response, envelope) -> bool
ConsistencyFailureFunc = Callable[["TransportResponse", "Envelope | None"], bool]
ValidStatusFunc = Callable[["TransportResponse", "Envelope | None"], bool]


class RequestInput(Protocol):
    """Anything that can validate the response to an HTTP request."""

    @property
    def consistency_failure_func(self) -> ConsistencyFailureFunc | None: ...

    @property
    def valid_status_codes(self) -> Collection[int]: ...

    @property
    def valid_status_func(self) -> ValidStatusFunc | None: ...


@dataclass(frozen=True)
class GetRequestInput:
    """Configures a GET request."""

    uri: Uri
    valid_status_codes: Collection[int] = (200,)
    valid_status_func: ValidStatusFunc | None = None
    consistency_failure_func: ConsistencyFailureFunc | None = None
    disable_paging: bool = False
    _raw_uri: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class PostRequestInput:
    """Configures a POST request."""

    uri: Uri
    body: bytes | None = None
    valid_status_codes: Collection[int] = (201,)
    valid_status_func: ValidStatusFunc | None = None
    consistency_failure_func: ConsistencyFailureFunc | None = None


@dataclass(frozen=True)
class PutRequestInput:
    """Configures a PUT request."""

    uri: Uri
    body: bytes | None = None
    valid_status_codes: Collection[int] = (200, 201, 204)
    valid_status_func: ValidStatusFunc | None = None
    consistency_failure_func: ConsistencyFailureFunc | None = None


@dataclass(frozen=True)
class PatchRequestInput:
    """Configures a PATCH request."""

    uri: Uri
    body: bytes | None = None
    valid_status_codes: Collection[int] = (204,)
    valid_status_func: ValidStatusFunc | None = None
    consistency_failure_func: ConsistencyFailureFunc | None = None


@dataclass(frozen=True)
class DeleteRequestInput:
    """Configures a DELETE request."""

    uri: Uri
    valid_status_codes: Collection[int] = (204,)
    valid_status_func: ValidStatusFunc | None = None
    consistency_failure_func: ConsistencyFailureFunc | None = None


def retry_on_404(response: TransportResponse, _envelope: Envelope | None) -> bool:
    """Retry a request while the API still answers 404 Not Found."""
    return response.status == 404


def retry_on_error_match(*fragments: str) -> ConsistencyFailureFunc:
    """Build a predicate that retries while the structured error mentions a fragment.

    Args:
        fragments: Case-insensitive message fragments, e.g. "does not exist"

    Returns:
        Consistency failure predicate for a request input
    """

    def predicate(_response: TransportResponse, envelope: Envelope | None) -> bool:
        if envelope is None or envelope.error is None:
            return False
        return any(envelope.error.match(fragment) for fragment in fragments)

    return predicate
