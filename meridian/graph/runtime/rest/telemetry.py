"""Structured logging for request execution and pagination.

This module provides telemetry hooks for the request executor and the
pagination walker, emitting structured logs for observability.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_request_attempt(*, method: str, url: str, attempt: int, status: int) -> None:
    """Log the status received for one send attempt."""
    logger.debug(
        "request_attempt",
        extra={"method": method, "url": url, "attempt": attempt, "status": status},
    )


def log_retry_scheduled(
    *,
    method: str,
    url: str,
    attempt: int,
    reason: str,
    delay_seconds: float,
) -> None:
    """Log a retry decision.

    Args:
        method: HTTP method
        url: Request URL
        attempt: Zero-based index of the attempt that triggered the retry
        reason: "rate_limited" or "consistency"
        delay_seconds: Pause before the next attempt
    """
    logger.info(
        "request_retry_scheduled",
        extra={
            "method": method,
            "url": url,
            "attempt": attempt,
            "reason": reason,
            "delay_seconds": delay_seconds,
        },
    )


def log_request_failed(*, method: str, url: str, status: int | None, error: str) -> None:
    """Log a terminal request failure."""
    logger.error(
        "request_failed",
        extra={"method": method, "url": url, "status": status, "error": error},
    )


def log_attempts_exhausted(*, method: str, url: str, attempts: int, status: int) -> None:
    """Log that the retry budget ran out and the last response is returned as-is."""
    logger.warning(
        "request_attempts_exhausted",
        extra={"method": method, "url": url, "attempts": attempts, "status": status},
    )


def log_page_fetched(*, url: str, page_index: int, rows: int, total_rows: int) -> None:
    """Log one page merged by the pagination walker."""
    logger.debug(
        "page_fetched",
        extra={
            "url": url,
            "page_index": page_index,
            "rows": rows,
            "total_rows": total_rows,
        },
    )
