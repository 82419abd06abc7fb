"""Pagination walker for GET requests.

Follows ``@odata.nextLink`` through the request executor and merges every
page's ``value`` array into one logical response. Pages are walked with an
explicit loop, so stack depth does not grow with the page count. Page bodies
are read through the envelopes the executor already decoded.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

from ...core.config import ClientConfig
from ...core.enums import HttpMethod
from ...core.exceptions import EnvelopeDecodeError
from ...models.envelope import Envelope
from ...models.response import GraphResponse
from .executor import AttemptState, RequestExecutor
from .inputs import GetRequestInput
from .telemetry import log_page_fetched
from .uri import build_uri


class PaginationWalker:
    """Executes GET requests and merges server-side pages."""

    def __init__(self, config: ClientConfig, executor: RequestExecutor) -> None:
        self._config = config
        self._executor = executor

    def url_for(self, request_input: GetRequestInput) -> str:
        """Use the raw next-page URL when set, else build one from the Uri."""
        if request_input._raw_uri:
            return request_input._raw_uri
        return build_uri(self._config, request_input.uri)

    async def walk(
        self,
        request_input: GetRequestInput,
        *,
        state: AttemptState | None = None,
    ) -> GraphResponse:
        """Fetch the first page and, unless paging is disabled, every following page.

        Args:
            request_input: GET input; its validation and retry settings apply
                to every page
            state: Shared with the executor for every page, so errors raised
                mid-walk report the last response seen

        Returns:
            The first response unchanged when there is nothing to merge,
            otherwise a response whose body is the last page's document with
            ``value`` replaced by all results in page-arrival order

        Raises:
            EnvelopeDecodeError: If a follow-up page has no JSON envelope
            GraphError: Any executor error raised while fetching a page
        """
        if state is None:
            state = AttemptState()
        url = self.url_for(request_input)
        first = await self._executor.execute(
            HttpMethod.GET.value, url, None, request_input, state=state
        )
        envelope = first.envelope
        if (
            envelope is None
            or request_input.disable_paging
            or envelope.next_link is None
            or envelope.value is None
        ):
            return first

        results: list[Any] = list(envelope.value)
        log_page_fetched(url=url, page_index=0, rows=len(results), total_rows=len(results))

        last = envelope
        last_status = first.status_code
        page_input = request_input
        page_index = 0

        while last.next_link is not None:
            page_input = replace(page_input, _raw_uri=last.next_link)
            page_url = self.url_for(page_input)
            page = await self._executor.execute(
                HttpMethod.GET.value, page_url, None, page_input, state=state
            )
            page.close()
            page_index += 1

            if page.envelope is None:
                raise EnvelopeDecodeError(
                    f"page {page_index} has no JSON envelope",
                    status_code=page.status_code,
                )

            last = page.envelope
            last_status = page.status_code
            if last.value is None:
                break

            results.extend(last.value)
            log_page_fetched(
                url=page_url,
                page_index=page_index,
                rows=len(last.value),
                total_rows=len(results),
            )

        merged = {
            **last.model_dump(mode="json", by_alias=True, exclude_unset=True),
            "value": results,
        }
        merged_content = json.dumps(merged, separators=(",", ":")).encode()

        headers = first.headers.copy()
        headers.popall("Content-Length", None)
        first.close()

        return GraphResponse.from_bytes(
            last_status,
            headers,
            merged_content,
            Envelope.model_validate(merged),
        )
