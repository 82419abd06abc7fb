"""Core components."""

from .config import (
    DEFAULT_USER_AGENT,
    ENDPOINTS,
    GRAPH_CHINA,
    GRAPH_GERMANY,
    GRAPH_GLOBAL,
    GRAPH_USGOV_L4,
    GRAPH_USGOV_L5,
    REQUEST_ATTEMPTS_FOR_CONSISTENCY,
    REQUEST_ATTEMPTS_FOR_RATE_LIMITING,
    RETRY_BACKOFF_DELAY_CAP,
    RETRY_BACKOFF_INITIAL_DELAY,
    ClientConfig,
    get_endpoint,
)
from .enums import RATE_LIMIT_STATUSES, ApiVersion, HttpMethod
from .exceptions import (
    AuthTokenError,
    CancellationError,
    EndpointParseError,
    EnvelopeDecodeError,
    GraphError,
    TransportError,
    UnexpectedStatusError,
)

__all__ = [
    "ApiVersion",
    "HttpMethod",
    "RATE_LIMIT_STATUSES",
    "ClientConfig",
    "get_endpoint",
    "ENDPOINTS",
    "GRAPH_GLOBAL",
    "GRAPH_CHINA",
    "GRAPH_USGOV_L4",
    "GRAPH_USGOV_L5",
    "GRAPH_GERMANY",
    "DEFAULT_USER_AGENT",
    "RETRY_BACKOFF_INITIAL_DELAY",
    "RETRY_BACKOFF_DELAY_CAP",
    "REQUEST_ATTEMPTS_FOR_RATE_LIMITING",
    "REQUEST_ATTEMPTS_FOR_CONSISTENCY",
    # Errors
    "GraphError",
    "EndpointParseError",
    "AuthTokenError",
    "TransportError",
    "EnvelopeDecodeError",
    "UnexpectedStatusError",
    "CancellationError",
]
