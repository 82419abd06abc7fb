"""Meridian Graph - transport core for the tenant-scoped Graph REST API."""

from .clients import GraphClient
from .core import (
    ENDPOINTS,
    GRAPH_CHINA,
    GRAPH_GERMANY,
    GRAPH_GLOBAL,
    GRAPH_USGOV_L4,
    GRAPH_USGOV_L5,
    ApiVersion,
    AuthTokenError,
    CancellationError,
    ClientConfig,
    EndpointParseError,
    EnvelopeDecodeError,
    GraphError,
    HttpMethod,
    TransportError,
    UnexpectedStatusError,
    get_endpoint,
)
from .models import Envelope, GraphResponse, ODataError
from .runtime.rest import (
    AccessToken,
    Authorizer,
    DeleteRequestInput,
    GetRequestInput,
    HTTPTransport,
    PatchRequestInput,
    PostRequestInput,
    PutRequestInput,
    RequestInput,
    StaticTokenAuthorizer,
    Transport,
    TransportResponse,
    Uri,
    retry_on_404,
    retry_on_error_match,
)

__version__ = "0.1.0"

__all__ = [
    "GraphClient",
    "ClientConfig",
    "ApiVersion",
    "HttpMethod",
    "get_endpoint",
    "ENDPOINTS",
    "GRAPH_GLOBAL",
    "GRAPH_CHINA",
    "GRAPH_USGOV_L4",
    "GRAPH_USGOV_L5",
    "GRAPH_GERMANY",
    # Models
    "Envelope",
    "ODataError",
    "GraphResponse",
    # Requests
    "Uri",
    "RequestInput",
    "GetRequestInput",
    "PostRequestInput",
    "PutRequestInput",
    "PatchRequestInput",
    "DeleteRequestInput",
    "retry_on_404",
    "retry_on_error_match",
    # Transport and auth
    "Transport",
    "TransportResponse",
    "HTTPTransport",
    "Authorizer",
    "AccessToken",
    "StaticTokenAuthorizer",
    # Errors
    "GraphError",
    "EndpointParseError",
    "AuthTokenError",
    "TransportError",
    "EnvelopeDecodeError",
    "UnexpectedStatusError",
    "CancellationError",
]
