"""Application exception types."""

from visitscribe.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class ValidationError(ApiError):
    """Required request fields are missing; raised before any I/O."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(status_code=400, code="VALIDATION_ERROR", message=message, details=details)


class NoChunksError(ApiError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            status_code=400,
            code="NO_CHUNKS",
            message="No uploaded chunks found for session.",
            details={"session_id": session_id},
        )


class TranscodeError(ApiError):
    """The external audio normalization process failed."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            status_code=500,
            code="TRANSCODE_FAILED",
            message="Audio normalization failed.",
            details={"reason": reason},
        )


class SubmissionError(ApiError):
    """The transcription service rejected the job."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            status_code=500,
            code="TRANSCRIPTION_SUBMIT_FAILED",
            message="Failed to submit transcription job.",
            details={"reason": reason},
        )


class ExtractionError(ApiError):
    """Transcription reports done but no recognizable result shape was found."""

    def __init__(self, job_id: str, reason: str | None = None) -> None:
        details = {"job_id": job_id}
        if reason:
            details["reason"] = reason
        super().__init__(
            status_code=500,
            code="TRANSCRIPT_EXTRACTION_FAILED",
            message="Cannot extract transcription response.",
            details=details,
        )


class TranscriptionQueryError(ApiError):
    """The transcription service could not report job progress."""

    def __init__(self, job_id: str, reason: str) -> None:
        super().__init__(
            status_code=502,
            code="TRANSCRIPTION_QUERY_FAILED",
            message="Failed to query transcription job.",
            details={"job_id": job_id, "reason": reason},
        )


class TranscriptionFailedError(ApiError):
    """The transcription service finished the job with an error."""

    def __init__(self, job_id: str, reason: str) -> None:
        super().__init__(
            status_code=502,
            code="TRANSCRIPTION_FAILED",
            message="Transcription job failed.",
            details={"job_id": job_id, "reason": reason},
        )


class ParseError(Exception):
    """Structured model output could not be decoded. Always recovered locally."""


class GenerationError(Exception):
    """The generative-text service call failed. Always recovered locally."""


class DeliveryError(Exception):
    """The messaging service rejected a push for a reason other than deduplication."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RaceLostError(Exception):
    """A conditional-create found the record already present."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)


__all__ = [
    "ApiError",
    "DeliveryError",
    "ExtractionError",
    "GenerationError",
    "NoChunksError",
    "ParseError",
    "RaceLostError",
    "SubmissionError",
    "TranscodeError",
    "TranscriptionFailedError",
    "TranscriptionQueryError",
    "ValidationError",
]
