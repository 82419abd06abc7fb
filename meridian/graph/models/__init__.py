"""Data models for Graph responses.

Architecture:
    Envelope models are Pydantic v2 and frozen; they are produced by the
    envelope decoder and never mutated by the request executor. GraphResponse
    is a plain dataclass because it owns a byte stream.

Model Categories:
    - Envelope: Envelope, ODataError, ODataInnerError, ODataErrorDetail
    - Results: GraphResponse
"""

from .envelope import (
    Envelope,
    ODataError,
    ODataErrorDetail,
    ODataInnerError,
    decode_envelope,
    is_json_content,
)
from .response import GraphResponse

__all__ = [
    "Envelope",
    "ODataError",
    "ODataErrorDetail",
    "ODataInnerError",
    "decode_envelope",
    "is_json_content",
    "GraphResponse",
]
