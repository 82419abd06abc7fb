"""Request executor: retry, backoff and status validation for one logical request.

Architecture:
    The executor sends a single logical request through the transport and
    owns every retry decision for it:
    - Rate limiting: statuses in RATE_LIMIT_STATUSES are retried with
      exponential backoff, or with the server's Retry-After when present
    - Eventual consistency: a caller-supplied predicate may flag a
      well-formed response as stale state; such responses are retried
      a bounded number of times
    - Validation: the input's valid statuses and extra-valid predicate
      decide success; anything else raises UnexpectedStatusError

Design Decisions:
    - Request body buffered once so every attempt sends identical bytes
    - Transport, auth and decode failures are fatal on first occurrence
    - When the attempt budget runs out the last response is returned as a
      normal result. No "retries exhausted" error is synthesized; callers
      inspect ``status_code``.
    - No state survives across calls; the executor is safe to share

See Also:
    - PaginationWalker: Drives the executor once per page
    - RequestInput: Capability contract read by the retry loop
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import IO

from ...core.config import (
    REQUEST_ATTEMPTS_FOR_CONSISTENCY,
    REQUEST_ATTEMPTS_FOR_RATE_LIMITING,
    RETRY_BACKOFF_DELAY_CAP,
    RETRY_BACKOFF_INITIAL_DELAY,
    ClientConfig,
)
from ...core.enums import RATE_LIMIT_STATUSES
from ...core.exceptions import (
    AuthTokenError,
    CancellationError,
    TransportError,
    UnexpectedStatusError,
)
from ...models.envelope import Envelope, decode_envelope
from ...models.response import GraphResponse
from .auth import Authorizer
from .inputs import RequestInput
from .telemetry import (
    log_attempts_exhausted,
    log_request_attempt,
    log_request_failed,
    log_retry_scheduled,
)
from .transport import Transport, TransportResponse

RequestBody = bytes | bytearray | IO[bytes] | None


def backoff_delay(exponent: int) -> float:
    """Default exponential backoff: 1s * 2**exponent, capped at 64s."""
    return min(RETRY_BACKOFF_INITIAL_DELAY * (1 << exponent), RETRY_BACKOFF_DELAY_CAP)


def parse_retry_after(value: str | None) -> float | None:
    """Parse a numeric Retry-After header (seconds, fractions allowed).

    Returns None for missing, non-numeric, non-finite or non-positive values;
    HTTP-date forms are not honoured.
    """
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


def buffer_body(body: RequestBody) -> bytes | None:
    """Read a request body once so it can be replayed on every attempt."""
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    return body.read()


@dataclass
class AttemptState:
    """Last status and envelope observed during one logical call."""

    status_code: int | None = None
    envelope: Envelope | None = None

    def record(self, status_code: int, envelope: Envelope | None) -> None:
        self.status_code = status_code
        self.envelope = envelope


@asynccontextmanager
async def deadline_scope(deadline: float | None) -> AsyncIterator[AttemptState]:
    """Abort the enclosed call when ``deadline`` seconds elapse.

    Yields the AttemptState the enclosed call should update, so the raised
    error carries the last response seen before expiry.

    Raises:
        CancellationError: If the deadline expired; in-flight sends and
            pending backoff sleeps are aborted and no further retries happen
    """
    state = AttemptState()
    scope = asyncio.timeout(deadline)
    try:
        async with scope:
            yield state
    except TimeoutError as e:
        if not scope.expired():
            raise
        raise CancellationError(
            f"request cancelled: deadline of {deadline}s expired",
            status_code=state.status_code,
            envelope=state.envelope,
        ) from e


class RequestExecutor:
    """Sends one logical request with bounded retry and validates the result."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport,
        authorizer: Authorizer | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize executor.

        Args:
            config: Client configuration
            transport: Transport used for every attempt
            authorizer: Optional source of bearer credentials
            sleep: Backoff pause, replaceable in tests
        """
        self._config = config
        self._transport = transport
        self._authorizer = authorizer
        self._sleep = sleep

    async def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json; charset=utf-8",
        }
        if self._config.user_agent:
            headers["User-Agent"] = self._config.user_agent

        if self._authorizer is not None:
            try:
                token = await self._authorizer.token()
            except AuthTokenError:
                raise
            except Exception as e:
                raise AuthTokenError(f"obtaining access token: {e}") from e
            headers["Authorization"] = token.auth_header()
        return headers

    async def execute(
        self,
        method: str,
        url: str,
        body: RequestBody,
        request_input: RequestInput,
        *,
        state: AttemptState | None = None,
    ) -> GraphResponse:
        """Perform the request, retrying rate limits and consistency failures.

        Args:
            method: HTTP method
            url: Absolute request URL
            body: Request body, buffered once and replayed on each attempt
            request_input: Verb input declaring valid statuses and predicates
            state: Updated after every attempt; shared across pages by callers
                that walk several requests under one deadline

        Returns:
            GraphResponse for a valid response, or the last response when the
            attempt budget is exhausted

        Raises:
            AuthTokenError: If the authorizer fails
            TransportError: If a send fails at the transport level; carries
                the last observed status and envelope
            EnvelopeDecodeError: If a JSON response cannot be decoded
            UnexpectedStatusError: If the status is neither valid nor retryable
        """
        if state is None:
            state = AttemptState()
        data = buffer_body(body)
        headers = await self._build_headers()

        backoff = 0.0
        exponent = 0
        consistency_retries = 0
        attempt = 0

        while True:
            if attempt > 0:
                await self._sleep(backoff)

            backoff = backoff_delay(exponent)
            exponent += 1

            try:
                response = await self._transport.send(method, url, headers=headers, data=data)
            except TransportError as e:
                if state.status_code is None:
                    raise
                raise TransportError(
                    str(e), status_code=state.status_code, envelope=state.envelope
                ) from e
            log_request_attempt(method=method, url=url, attempt=attempt, status=response.status)
            envelope = decode_envelope(response.headers, response.body, response.status)
            state.record(response.status, envelope)

            is_stale = request_input.consistency_failure_func
            if (
                not self._config.disable_retries
                and is_stale is not None
                and consistency_retries < REQUEST_ATTEMPTS_FOR_CONSISTENCY
                and is_stale(response, envelope)
            ):
                consistency_retries += 1
                reason = "consistency"
            else:
                status = response.status
                if status in request_input.valid_status_codes:
                    return _to_result(response, envelope)

                is_valid = request_input.valid_status_func
                if is_valid is not None and is_valid(response, envelope):
                    return _to_result(response, envelope)

                if status not in RATE_LIMIT_STATUSES:
                    error = _unexpected_status(response, envelope)
                    log_request_failed(method=method, url=url, status=status, error=error.detail)
                    raise error

                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                if retry_after is not None:
                    backoff = retry_after
                    exponent = 0
                reason = "rate_limited"

            if attempt + 1 >= REQUEST_ATTEMPTS_FOR_RATE_LIMITING:
                log_attempts_exhausted(
                    method=method,
                    url=url,
                    attempts=REQUEST_ATTEMPTS_FOR_RATE_LIMITING,
                    status=response.status,
                )
                return _to_result(response, envelope)

            log_retry_scheduled(
                method=method,
                url=url,
                attempt=attempt,
                reason=reason,
                delay_seconds=backoff,
            )
            attempt += 1


def _to_result(response: TransportResponse, envelope: Envelope | None) -> GraphResponse:
    return GraphResponse.from_bytes(response.status, response.headers, response.body, envelope)


def _unexpected_status(
    response: TransportResponse, envelope: Envelope | None
) -> UnexpectedStatusError:
    if envelope is not None and envelope.error_text:
        detail = f"OData error: {envelope.error_text}"
    else:
        detail = f"response: {response.body.decode('utf-8', errors='replace')}"
    return UnexpectedStatusError(response.status, detail, envelope=envelope)
