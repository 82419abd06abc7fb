"""OData response envelope models.

The envelope is the structured wrapper Graph places around every JSON
response: pagination links, the ``value`` result array, and structured error
detail. Models use the exact wire names as aliases; unknown keys are kept so
a merged page can be re-serialized without losing metadata.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.exceptions import EnvelopeDecodeError


class ODataInnerError(BaseModel):
    """Diagnostic detail nested under ``error.innerError``."""

    code: str | None = None
    message: str | None = None
    date: str | None = None
    request_id: str | None = Field(None, alias="request-id")
    client_request_id: str | None = Field(None, alias="client-request-id")
    inner_error: ODataInnerError | None = Field(None, alias="innererror")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")


class ODataErrorDetail(BaseModel):
    """One entry of ``error.details``."""

    code: str | None = None
    message: str | None = None
    target: str | None = None

    model_config = ConfigDict(frozen=True, extra="allow")


class ODataError(BaseModel):
    """Structured error returned in the ``error`` field of an envelope."""

    code: str | None = None
    message: str | None = None
    target: str | None = None
    inner_error: ODataInnerError | None = Field(None, alias="innerError")
    details: list[ODataErrorDetail] | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    def __str__(self) -> str:
        text = ": ".join(part for part in (self.code, self.message) if part)
        inner = self.inner_error
        while inner is not None:
            nested = ": ".join(part for part in (inner.code, inner.message) if part)
            if nested:
                text = f"{text} [{nested}]" if text else nested
            inner = inner.inner_error
        return text

    def match(self, fragment: str) -> bool:
        """Check whether the error message or any detail contains ``fragment``.

        Comparison is case-insensitive. Useful for consistency predicates that
        must recognise "does not exist" style errors after a create.
        """
        needle = fragment.lower()
        haystacks = [self.message or ""]
        haystacks.extend(detail.message or "" for detail in self.details or [])
        return any(needle in text.lower() for text in haystacks)


class Envelope(BaseModel):
    """Decoded OData response envelope."""

    context: str | None = Field(None, alias="@odata.context")
    id: str | None = Field(None, alias="@odata.id")
    type: str | None = Field(None, alias="@odata.type")
    count: int | None = Field(None, alias="@odata.count")
    next_link: str | None = Field(None, alias="@odata.nextLink")
    delta_link: str | None = Field(None, alias="@odata.deltaLink")
    value: list[Any] | None = None
    error: ODataError | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    @property
    def error_text(self) -> str:
        """Structured error text, empty when there is no error."""
        return str(self.error) if self.error is not None else ""


def is_json_content(headers: Mapping[str, str]) -> bool:
    """Return True when the Content-Type header declares JSON."""
    return headers.get("Content-Type", "").lower().startswith("application/json")


def decode_envelope(
    headers: Mapping[str, str],
    body: bytes,
    status_code: int | None = None,
) -> Envelope | None:
    """Decode a response body into an Envelope.

    Args:
        headers: Response headers (case-insensitive mapping)
        body: Fully buffered response body
        status_code: Response status, attached to any decode error

    Returns:
        Envelope for JSON responses, None for non-JSON or empty bodies

    Raises:
        EnvelopeDecodeError: If a JSON body is not a valid envelope object
    """
    if not is_json_content(headers) or not body.strip():
        return None
    try:
        return Envelope.model_validate_json(body)
    except ValidationError as e:
        raise EnvelopeDecodeError(
            f"could not decode response envelope: {e}", status_code=status_code
        ) from e
