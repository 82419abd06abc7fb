"""GraphClient: the five verb operations over the request executor.

This is the base client used by entity-specific clients. It can send GET,
POST, PUT, PATCH and DELETE requests and is API-version and tenant aware:

- every operation builds its URL from a Uri, except paged GETs which follow
  the server's next links
- GET responses are merged across pages unless paging is disabled
- each operation accepts an optional ``deadline`` in seconds; expiry raises
  CancellationError carrying the last observed status and stops any further
  retries
"""

from __future__ import annotations

import logging

from ..core.config import DEFAULT_USER_AGENT, GRAPH_GLOBAL, ClientConfig
from ..core.enums import ApiVersion, HttpMethod
from ..models.response import GraphResponse
from ..runtime.rest.auth import Authorizer
from ..runtime.rest.executor import RequestExecutor, RequestBody, deadline_scope
from ..runtime.rest.inputs import (
    DeleteRequestInput,
    GetRequestInput,
    PatchRequestInput,
    PostRequestInput,
    PutRequestInput,
    RequestInput,
)
from ..runtime.rest.pagination import PaginationWalker
from ..runtime.rest.transport import HTTPTransport, Transport
from ..runtime.rest.uri import Uri, build_uri

logger = logging.getLogger(__name__)


class GraphClient:
    """Base Graph client, API-version and tenant aware."""

    def __init__(
        self,
        api_version: ApiVersion | str,
        tenant_id: str = "",
        *,
        endpoint: str = GRAPH_GLOBAL,
        user_agent: str = DEFAULT_USER_AGENT,
        authorizer: Authorizer | None = None,
        disable_retries: bool = False,
        transport: Transport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            api_version: API version segment ("v1.0" or "beta")
            tenant_id: Tenant placed in paths of Uris with ``has_tenant_id``
            endpoint: Base endpoint, usually the global Graph cloud
            user_agent: User-Agent header value; empty disables the header
            authorizer: Optional source of bearer tokens
            disable_retries: Skip consistency retries (rate limits are always retried)
            transport: Transport to send requests with; an aiohttp transport by default
        """
        self.config = ClientConfig(
            api_version=api_version,
            tenant_id=tenant_id,
            endpoint=endpoint,
            user_agent=user_agent,
            disable_retries=disable_retries,
        )
        self._transport: Transport = transport or HTTPTransport()
        self._executor = RequestExecutor(self.config, self._transport, authorizer)
        self._walker = PaginationWalker(self.config, self._executor)
        logger.debug(
            "Graph client created",
            extra={"endpoint": endpoint, "api_version": self.config.version},
        )

    def build_uri(self, uri: Uri) -> str:
        """Build the absolute URL for ``uri`` under this client's configuration."""
        return build_uri(self.config, uri)

    async def _send(
        self,
        method: HttpMethod,
        uri: Uri,
        body: RequestBody,
        request_input: RequestInput,
        deadline: float | None,
    ) -> GraphResponse:
        url = self.build_uri(uri)
        async with deadline_scope(deadline) as state:
            return await self._executor.execute(
                method.value, url, body, request_input, state=state
            )

    async def get(
        self, request_input: GetRequestInput, *, deadline: float | None = None
    ) -> GraphResponse:
        """Perform a GET request, merging all pages unless paging is disabled."""
        async with deadline_scope(deadline) as state:
            return await self._walker.walk(request_input, state=state)

    async def post(
        self, request_input: PostRequestInput, *, deadline: float | None = None
    ) -> GraphResponse:
        """Perform a POST request."""
        return await self._send(
            HttpMethod.POST, request_input.uri, request_input.body, request_input, deadline
        )

    async def put(
        self, request_input: PutRequestInput, *, deadline: float | None = None
    ) -> GraphResponse:
        """Perform a PUT request."""
        return await self._send(
            HttpMethod.PUT, request_input.uri, request_input.body, request_input, deadline
        )

    async def patch(
        self, request_input: PatchRequestInput, *, deadline: float | None = None
    ) -> GraphResponse:
        """Perform a PATCH request."""
        return await self._send(
            HttpMethod.PATCH, request_input.uri, request_input.body, request_input, deadline
        )

    async def delete(
        self, request_input: DeleteRequestInput, *, deadline: float | None = None
    ) -> GraphResponse:
        """Perform a DELETE request."""
        return await self._send(
            HttpMethod.DELETE, request_input.uri, None, request_input, deadline
        )

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def __aenter__(self) -> GraphClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
