"""Core enumerations and status classes."""

from enum import Enum


class ApiVersion(str, Enum):
    """Graph API version segment placed first in every request path."""

    V1 = "v1.0"
    BETA = "beta"


class HttpMethod(str, Enum):
    """HTTP verbs used by the client operations."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


# Statuses signalling transient overload rather than a client error.
# Failed Dependency shows up when a backing service of the API is throttled.
RATE_LIMIT_STATUSES = frozenset({424, 429, 500, 502, 503})
