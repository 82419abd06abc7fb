"""Request URI construction."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from ...core.config import ClientConfig
from ...core.exceptions import EndpointParseError

QueryParams = Mapping[str, str | Sequence[str]]

# Sub-delims plus ":" and "@" stay literal in path segments
_PATH_SAFE = "/!$&'()*+,;=:@"


@dataclass(frozen=True)
class Uri:
    """A Graph entity path relative to the versioned API root."""

    entity: str
    params: QueryParams | None = None
    has_tenant_id: bool = False


def encode_params(params: QueryParams) -> str:
    """Encode query parameters, keys sorted, repeated values allowed."""
    pairs: list[tuple[str, str]] = []
    for key in sorted(params):
        values = params[key]
        if isinstance(values, str):
            pairs.append((key, values))
        else:
            pairs.extend((key, v) for v in values)
    return urlencode(pairs)


def build_uri(config: ClientConfig, uri: Uri) -> str:
    """Build a complete URI string for an API request.

    The endpoint's own path is replaced by ``/<version>[/<tenant>]/<entity>``.

    Args:
        config: Client configuration supplying endpoint, version and tenant
        uri: Entity path and query parameters

    Returns:
        Absolute request URL

    Raises:
        EndpointParseError: If the configured endpoint is not an absolute http(s) URL

    Examples:
        >>> build_uri(ClientConfig("v1.0", "t1"), Uri("/users", {"$top": "5"}))
        'https://graph.microsoft.com/v1.0/users?%24top=5'
    """
    try:
        parts = urlsplit(config.endpoint)
    except ValueError as e:
        raise EndpointParseError(f"invalid endpoint {config.endpoint!r}: {e}") from e
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise EndpointParseError(f"invalid endpoint {config.endpoint!r}")

    path = f"/{config.version}"
    if uri.has_tenant_id:
        path = f"{path}/{config.tenant_id}"
    path = f"{path}/{uri.entity.lstrip('/')}"

    query = encode_params(uri.params) if uri.params is not None else ""
    return urlunsplit((parts.scheme, parts.netloc, quote(path, safe=_PATH_SAFE), query, ""))
