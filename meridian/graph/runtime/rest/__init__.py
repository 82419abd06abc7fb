"""REST runtime: transport, request executor and pagination."""

from .auth import AccessToken, Authorizer, StaticTokenAuthorizer
from .executor import (
    AttemptState,
    RequestExecutor,
    backoff_delay,
    buffer_body,
    deadline_scope,
    parse_retry_after,
)
from .inputs import (
    ConsistencyFailureFunc,
    DeleteRequestInput,
    GetRequestInput,
    PatchRequestInput,
    PostRequestInput,
    PutRequestInput,
    RequestInput,
    ValidStatusFunc,
    retry_on_404,
    retry_on_error_match,
)
from .pagination import PaginationWalker
from .transport import HTTPTransport, Transport, TransportResponse
from .uri import Uri, build_uri, encode_params

__all__ = [
    "AccessToken",
    "Authorizer",
    "StaticTokenAuthorizer",
    "AttemptState",
    "RequestExecutor",
    "PaginationWalker",
    "HTTPTransport",
    "Transport",
    "TransportResponse",
    "Uri",
    "build_uri",
    "encode_params",
    "backoff_delay",
    "buffer_body",
    "deadline_scope",
    "parse_retry_after",
    # Verb inputs
    "RequestInput",
    "GetRequestInput",
    "PostRequestInput",
    "PutRequestInput",
    "PatchRequestInput",
    "DeleteRequestInput",
    "ConsistencyFailureFunc",
    "ValidStatusFunc",
    "retry_on_404",
    "retry_on_error_match",
]
