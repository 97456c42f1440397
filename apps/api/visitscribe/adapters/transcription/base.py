"""Long-running transcription service interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class RecognitionOptions:
    language_code: str = "ja-JP"
    sample_rate_hertz: int = 16000
    model: str = "latest_long"
    enable_automatic_punctuation: bool = True


@dataclass(slots=True)
class TranscriptionJobState:
    """Snapshot of a submitted job as reported by the service.

    A finished job may expose its response in one of three shapes: an
    immediately available ``result``, a ``pending`` callable that resolves to
    the response, or a ``latest_response`` mapping with a nested ``response``.
    """

    job_id: str
    done: bool
    result: Any | None = None
    pending: Callable[[], Any] | None = None
    latest_response: dict[str, Any] | None = None
    error: str | None = None

    def is_finished(self) -> bool:
        if self.done:
            return True
        return bool(self.latest_response and self.latest_response.get("done") is True)


class Transcriber(ABC):
    """Provider-neutral long-running recognition client."""

    @abstractmethod
    def submit(self, audio_uri: str, options: RecognitionOptions) -> str:
        """Start recognition for ``audio_uri`` and return the job id."""

    @abstractmethod
    def get_job(self, job_id: str) -> TranscriptionJobState:
        """Re-query job progress; there is no local job state."""


__all__ = ["RecognitionOptions", "Transcriber", "TranscriptionJobState"]
