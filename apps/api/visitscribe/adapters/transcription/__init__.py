"""Transcription service adapters."""

from .base import RecognitionOptions, Transcriber, TranscriptionJobState
from .mock_speech import MockTranscriber

__all__ = [
    "MockTranscriber",
    "RecognitionOptions",
    "Transcriber",
    "TranscriptionJobState",
]
