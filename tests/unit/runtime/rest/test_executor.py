"""Precise unit tests for RequestExecutor.

Tests focus on backoff timing, consistency retries, status validation and
error construction.
"""

from __future__ import annotations

import asyncio
import io
from unittest.mock import MagicMock, patch

import pytest
from multidict import CIMultiDict

from meridian.graph.core import (
    AuthTokenError,
    CancellationError,
    ClientConfig,
    EnvelopeDecodeError,
    TransportError,
    UnexpectedStatusError,
)
from meridian.graph.runtime.rest import (
    AccessToken,
    GetRequestInput,
    PostRequestInput,
    RequestExecutor,
    StaticTokenAuthorizer,
    TransportResponse,
    Uri,
    backoff_delay,
    buffer_body,
    deadline_scope,
    parse_retry_after,
    retry_on_404,
)

URL = "https://graph.microsoft.com/v1.0/users"


def _get_input(**kwargs) -> GetRequestInput:
    return GetRequestInput(uri=Uri("/users"), **kwargs)


def _delays(sleep) -> list[float]:
    return [call.args[0] for call in sleep.await_args_list]


class TestBackoffHelpers:
    """Test backoff and Retry-After helpers."""

    def test_backoff_sequence_is_exponential_and_capped(self):
        """Test backoff doubles from 1s and caps at 64s."""
        assert [backoff_delay(k) for k in range(9)] == [1, 2, 4, 8, 16, 32, 64, 64, 64]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("2", 2.0), ("0.5", 0.5), (None, None), ("", None), ("0", None), ("-3", None),
         ("soon", None), ("inf", None), ("Wed, 21 Oct 2015 07:28:00 GMT", None)],
    )
    def test_parse_retry_after(self, value, expected):
        """Test Retry-After parsing accepts positive numbers only."""
        assert parse_retry_after(value) == expected

    def test_buffer_body_reads_stream_once(self):
        """Test request bodies are buffered to bytes."""
        stream = io.BytesIO(b'{"a":1}')
        assert buffer_body(stream) == b'{"a":1}'
        assert buffer_body(bytearray(b"x")) == b"x"
        assert buffer_body(None) is None


class TestExecutorSuccess:
    """Test valid-status handling."""

    @pytest.mark.asyncio
    async def test_valid_status_returns_immediately(
        self, make_executor, scripted_transport, json_response, sleep
    ):
        """Test a valid status returns without retrying."""
        transport = scripted_transport([json_response(200, {"id": "1"})])
        executor = make_executor(transport)

        result = await executor.execute("GET", URL, None, _get_input())

        assert result.status_code == 200
        assert result.json() == {"id": "1"}
        assert result.envelope is not None
        assert len(transport.calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_error_after_rate_limit_carries_last_status(
        self, make_executor, scripted_transport, json_response
    ):
        """Test a transport failure after a 429 reports the 429 and its envelope."""
        payload = {"error": {"code": "TooManyRequests", "message": "Throttled"}}
        transport = scripted_transport(
            [json_response(429, payload), TransportError("connection refused")]
        )
        executor = make_executor(transport)

        with pytest.raises(TransportError, match="connection refused") as exc_info:
            await executor.execute("GET", URL, None, _get_input())

        assert exc_info.value.status_code == 429
        assert exc_info.value.envelope.error.code == "TooManyRequests"
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_standard_headers_attached(self, make_executor, scripted_transport, json_response):
        """Test standard and auth headers are sent."""
        transport = scripted_transport([json_response(200, {})])
        executor = make_executor(transport, authorizer=StaticTokenAuthorizer("tok"))

        await executor.execute("GET", URL, None, _get_input())

        headers = transport.calls[0]["headers"]
        assert headers["Accept"] == "application/json"
        assert headers["Content-Type"] == "application/json; charset=utf-8"
        assert headers["User-Agent"] == "meridian-graph (aiohttp)"
        assert headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_empty_user_agent_omits_header(
        self, make_executor, scripted_transport, json_response
    ):
        """Test an empty user agent omits the header."""
        transport = scripted_transport([json_response(200, {})])
        executor = make_executor(
            transport, executor_config=ClientConfig(api_version="v1.0", user_agent="")
        )

        await executor.execute("GET", URL, None, _get_input())

        assert "User-Agent" not in transport.calls[0]["headers"]

    @pytest.mark.asyncio
    async def test_extra_valid_predicate_accepts_undeclared_status(
        self, make_executor, scripted_transport, json_response
    ):
        """Test the extra-valid predicate accepts other statuses."""
        transport = scripted_transport([json_response(409, {"error": {"code": "Conflict"}})])
        executor = make_executor(transport)
        request_input = _get_input(valid_status_func=lambda resp, env: resp.status == 409)

        result = await executor.execute("GET", URL, None, request_input)

        assert result.status_code == 409
        assert result.envelope.error.code == "Conflict"


class TestExecutorRateLimiting:
    """Test rate-limit retry and backoff."""

    @pytest.mark.asyncio
    async def test_retry_after_overrides_exponential_backoff(
        self, make_executor, scripted_transport, json_response, sleep
    ):
        """Test Retry-After replaces the default delay."""
        transport = scripted_transport(
            [
                json_response(429, {}, headers={"Retry-After": "2"}),
                json_response(200, {"ok": True}),
            ]
        )
        executor = make_executor(transport)

        result = await executor.execute("GET", URL, None, _get_input())

        assert result.status_code == 200
        assert _delays(sleep) == [2.0]

    @pytest.mark.asyncio
    async def test_exponential_backoff_without_retry_after(
        self, make_executor, scripted_transport, json_response, sleep
    ):
        """Test delays double without Retry-After."""
        transport = scripted_transport(
            [json_response(503, {}) for _ in range(5)] + [json_response(200, {})]
        )
        executor = make_executor(transport)

        await executor.execute("GET", URL, None, _get_input())

        assert _delays(sleep) == [1, 2, 4, 8, 16]

    @pytest.mark.asyncio
    async def test_retry_after_resets_exponential_progression(
        self, make_executor, scripted_transport, json_response, sleep
    ):
        """Test Retry-After restarts the doubling from 1s."""
        transport = scripted_transport(
            [
                json_response(429, {}),
                json_response(429, {}),
                json_response(429, {}, headers={"Retry-After": "0.5"}),
                json_response(502, {}),
                json_response(200, {}),
            ]
        )
        executor = make_executor(transport)

        await executor.execute("GET", URL, None, _get_input())

        assert _delays(sleep) == [1, 2, 0.5, 1]

    @pytest.mark.asyncio
    async def test_backoff_capped_at_64_seconds(
        self, make_executor, scripted_transport, json_response, sleep
    ):
        """Test delays never exceed 64s."""
        transport = scripted_transport([json_response(500, {}) for _ in range(10)])
        executor = make_executor(transport)

        await executor.execute("GET", URL, None, _get_input())

        assert _delays(sleep) == [1, 2, 4, 8, 16, 32, 64, 64, 64]

    @pytest.mark.asyncio
    async def test_exhausted_budget_returns_last_response(
        self, make_executor, scripted_transport, json_response
    ):
        """Test the last response is returned after ten attempts."""
        transport = scripted_transport([json_response(429, {"n": i}) for i in range(10)])
        executor = make_executor(transport)

        result = await executor.execute("GET", URL, None, _get_input())

        assert len(transport.calls) == 10
        assert result.status_code == 429
        assert result.json() == {"n": 9}

    @pytest.mark.asyncio
    async def test_body_replayed_identically(
        self, make_executor, scripted_transport, json_response
    ):
        """Test every attempt sends the same body bytes."""
        transport = scripted_transport(
            [json_response(429, {}), json_response(424, {}), json_response(201, {"id": "x"})]
        )
        executor = make_executor(transport)
        body = io.BytesIO(b'{"displayName":"Jane"}')

        await executor.execute("POST", URL, body, PostRequestInput(uri=Uri("/users")))

        sent = [call["data"] for call in transport.calls]
        assert sent == [b'{"displayName":"Jane"}'] * 3


class TestExecutorConsistency:
    """Test eventual-consistency retries."""

    @pytest.mark.asyncio
    async def test_predicate_true_three_times_yields_four_sends(
        self, make_executor, scripted_transport, json_response
    ):
        """Test three consistency failures lead to four sends."""
        transport = scripted_transport([json_response(200, {}) for _ in range(4)])
        predicate = MagicMock(side_effect=[True, True, True, False])
        executor = make_executor(transport)

        result = await executor.execute(
            "GET", URL, None, _get_input(consistency_failure_func=predicate)
        )

        assert result.status_code == 200
        assert len(transport.calls) == 4
        assert predicate.call_count == 4

    @pytest.mark.asyncio
    async def test_consistency_retries_capped_at_six(
        self, make_executor, scripted_transport, json_response
    ):
        """Test consistency retries stop after six."""
        transport = scripted_transport(
            [json_response(404, {"error": {"code": "Request_ResourceNotFound"}}) for _ in range(7)]
        )
        executor = make_executor(transport)

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await executor.execute(
                "GET", URL, None, _get_input(consistency_failure_func=retry_on_404)
            )

        assert len(transport.calls) == 7
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_disable_retries_skips_consistency_predicate(
        self, make_executor, scripted_transport, json_response
    ):
        """Test disable_retries skips the consistency predicate."""
        transport = scripted_transport([json_response(404, {})])
        predicate = MagicMock(return_value=True)
        executor = make_executor(
            transport,
            executor_config=ClientConfig(api_version="v1.0", disable_retries=True),
        )

        with pytest.raises(UnexpectedStatusError):
            await executor.execute("GET", URL, None, _get_input(consistency_failure_func=predicate))

        predicate.assert_not_called()
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_disable_retries_still_retries_rate_limits(
        self, make_executor, scripted_transport, json_response
    ):
        """Test disable_retries keeps rate-limit retries."""
        transport = scripted_transport([json_response(429, {}), json_response(200, {})])
        executor = make_executor(
            transport,
            executor_config=ClientConfig(api_version="v1.0", disable_retries=True),
        )

        result = await executor.execute("GET", URL, None, _get_input())

        assert result.status_code == 200
        assert len(transport.calls) == 2


class TestExecutorErrors:
    """Test fatal paths and error construction."""

    @pytest.mark.asyncio
    async def test_structured_error_preferred(
        self, make_executor, scripted_transport, json_response
    ):
        """Test structured error text is used in the error detail."""
        payload = {"error": {"code": "Authorization_RequestDenied", "message": "Insufficient privileges"}}
        transport = scripted_transport([json_response(403, payload)])
        executor = make_executor(transport)

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await executor.execute("GET", URL, None, _get_input())

        error = exc_info.value
        assert error.status_code == 403
        assert error.detail == "OData error: Authorization_RequestDenied: Insufficient privileges"
        assert str(error).startswith("unexpected status 403 with OData error")
        assert error.envelope.error.code == "Authorization_RequestDenied"

    @pytest.mark.asyncio
    async def test_raw_body_used_without_structured_error(
        self, make_executor, scripted_transport, text_response
    ):
        """Test the raw body is used without a structured error."""
        transport = scripted_transport([text_response(400, "bad request body")])
        executor = make_executor(transport)

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await executor.execute("GET", URL, None, _get_input())

        assert exc_info.value.detail == "response: bad request body"
        assert exc_info.value.envelope is None

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self, make_executor, scripted_transport, sleep):
        """Test transport errors are not retried."""
        transport = scripted_transport([TransportError("connection refused")])
        executor = make_executor(transport)

        with pytest.raises(TransportError):
            await executor.execute("GET", URL, None, _get_input())

        assert len(transport.calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_decode_error_not_retried(self, make_executor, scripted_transport):
        """Test decode errors are not retried."""
        broken = TransportResponse(
            status=200,
            headers=CIMultiDict({"Content-Type": "application/json"}),
            body=b"{not json",
        )
        transport = scripted_transport([broken])
        executor = make_executor(transport)

        with pytest.raises(EnvelopeDecodeError) as exc_info:
            await executor.execute("GET", URL, None, _get_input())

        assert exc_info.value.status_code == 200
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_authorizer_failure_is_fatal(self, make_executor, scripted_transport):
        """Test authorizer failures raise AuthTokenError before sending."""
        class FailingAuthorizer:
            async def token(self) -> AccessToken:
                raise RuntimeError("token endpoint unreachable")

        transport = scripted_transport([])
        executor = make_executor(transport, authorizer=FailingAuthorizer())

        with pytest.raises(AuthTokenError, match="token endpoint unreachable"):
            await executor.execute("GET", URL, None, _get_input())

        assert transport.calls == []


class TestExecutorLogging:
    """Test retry telemetry."""

    @pytest.mark.asyncio
    async def test_no_retry_logged_after_final_attempt(
        self, make_executor, scripted_transport, json_response
    ):
        """Test the last attempt logs exhaustion instead of a retry."""
        transport = scripted_transport([json_response(503, {}) for _ in range(10)])
        executor = make_executor(transport)

        with (
            patch("meridian.graph.runtime.rest.executor.log_retry_scheduled") as retry_log,
            patch("meridian.graph.runtime.rest.executor.log_attempts_exhausted") as exhausted_log,
        ):
            await executor.execute("GET", URL, None, _get_input())

        assert retry_log.call_count == 9
        assert [c.kwargs["attempt"] for c in retry_log.call_args_list] == list(range(9))
        exhausted_log.assert_called_once()
        assert exhausted_log.call_args.kwargs["status"] == 503


class TestDeadlineScope:
    """Test deadline_scope conversion of timeouts."""

    @pytest.mark.asyncio
    async def test_expiry_raises_cancellation_with_last_observed_response(
        self, make_executor, scripted_transport, json_response
    ):
        """Test expiry reports the status and envelope recorded by the executor."""

        async def slow_sleep(delay):
            await asyncio.sleep(30)

        payload = {"error": {"code": "TooManyRequests"}}
        transport = scripted_transport([json_response(503, payload), json_response(200, {})])
        executor = RequestExecutor(
            ClientConfig(api_version="v1.0"), transport, sleep=slow_sleep
        )

        with pytest.raises(CancellationError) as exc_info:
            async with deadline_scope(0.05) as state:
                await executor.execute("GET", URL, None, _get_input(), state=state)

        assert exc_info.value.status_code == 503
        assert exc_info.value.envelope.error.code == "TooManyRequests"
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_foreign_timeout_propagates_unchanged(self):
        """Test a TimeoutError not caused by the deadline is re-raised as-is."""
        with pytest.raises(TimeoutError, match="upstream"):
            async with deadline_scope(None):
                raise TimeoutError("upstream")

    @pytest.mark.asyncio
    async def test_foreign_timeout_before_deadline_propagates(self):
        """Test an unrelated TimeoutError inside an unexpired deadline is re-raised."""
        with pytest.raises(TimeoutError, match="upstream"):
            async with deadline_scope(30.0):
                raise TimeoutError("upstream")

    @pytest.mark.asyncio
    async def test_no_deadline_yields_empty_state(self):
        """Test the yielded state starts with nothing observed."""
        async with deadline_scope(None) as state:
            assert state.status_code is None
            assert state.envelope is None
