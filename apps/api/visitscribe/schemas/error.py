"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    ok: bool = False
    code: str
    message: str
    details: dict[str, Any] | None = None


class ValidationErrorResponse(BaseModel):
    ok: bool = False
    code: Literal["VALIDATION_ERROR"]
    message: str
    details: dict[str, Any] | None = None


class UpstreamErrorResponse(BaseModel):
    ok: bool = False
    code: Literal[
        "TRANSCODE_FAILED",
        "TRANSCRIPTION_SUBMIT_FAILED",
        "TRANSCRIPT_EXTRACTION_FAILED",
        "TRANSCRIPTION_QUERY_FAILED",
        "TRANSCRIPTION_FAILED",
    ]
    message: str
    details: dict[str, Any] | None = None
