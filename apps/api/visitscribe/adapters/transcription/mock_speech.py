"""Mock transcription service for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass
import threading
from typing import Literal

from visitscribe.adapters.transcription.base import RecognitionOptions, Transcriber, TranscriptionJobState

ResultShape = Literal["result", "pending", "latest_response", "requery", "missing"]


@dataclass(slots=True)
class _MockJob:
    audio_uri: str
    options: RecognitionOptions
    done: bool = False
    transcript: str = ""
    shape: ResultShape = "result"
    error: str | None = None


def build_response(transcript: str) -> dict:
    """Recognition response shaped like the service payload, one result per line."""
    return {"results": [{"alternatives": [{"transcript": line}]} for line in transcript.split("\n")]}


class MockTranscriber(Transcriber):
    """Jobs stay running until ``complete`` is called, unless ``auto_complete_transcript`` is set."""

    def __init__(self, auto_complete_transcript: str | None = None) -> None:
        self.auto_complete_transcript = auto_complete_transcript
        self.jobs: dict[str, _MockJob] = {}
        self.submit_count = 0
        self.get_job_count = 0
        self.submit_failure_message: str | None = None
        self._lock = threading.Lock()

    def submit(self, audio_uri: str, options: RecognitionOptions) -> str:
        with self._lock:
            if self.submit_failure_message is not None:
                message = self.submit_failure_message
                self.submit_failure_message = None
                raise RuntimeError(message)
            self.submit_count += 1
            job_id = f"mock-op-{self.submit_count}"
            job = _MockJob(audio_uri=audio_uri, options=options)
            if self.auto_complete_transcript is not None:
                job.done = True
                job.transcript = self.auto_complete_transcript
            self.jobs[job_id] = job
            return job_id

    def complete(self, job_id: str, transcript: str, *, shape: ResultShape = "result") -> None:
        with self._lock:
            job = self.jobs[job_id]
            job.done = True
            job.transcript = transcript
            job.shape = shape

    def fail(self, job_id: str, message: str) -> None:
        with self._lock:
            job = self.jobs[job_id]
            job.done = True
            job.error = message

    def get_job(self, job_id: str) -> TranscriptionJobState:
        with self._lock:
            self.get_job_count += 1
            job = self.jobs.get(job_id)
            if job is None:
                raise KeyError(job_id)
            if not job.done:
                return TranscriptionJobState(job_id=job_id, done=False)
            if job.error is not None:
                return TranscriptionJobState(job_id=job_id, done=True, error=job.error)

            response = build_response(job.transcript)
            if job.shape == "result":
                return TranscriptionJobState(job_id=job_id, done=True, result=response)
            if job.shape == "pending":
                return TranscriptionJobState(job_id=job_id, done=True, pending=lambda: [response])
            if job.shape == "latest_response":
                return TranscriptionJobState(
                    job_id=job_id,
                    done=False,
                    latest_response={"done": True, "response": response},
                )
            if job.shape == "requery":
                # The first finished snapshot carries no payload; the next one does.
                job.shape = "result"
                return TranscriptionJobState(job_id=job_id, done=True)
            return TranscriptionJobState(job_id=job_id, done=True)


__all__ = ["MockTranscriber", "build_response"]
