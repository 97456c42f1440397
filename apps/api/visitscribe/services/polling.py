"""Transcription poll state machine.

Every poll re-derives state from the object store and the transcription
service. The terminal transition (summarize, deliver, mark done) runs in at
most one process per job, guarded by the delivery lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from visitscribe.adapters.transcription import Transcriber, TranscriptionJobState
from visitscribe.core.config import Settings
from visitscribe.core.logging_safety import safe_log_identifier, safe_log_reason
from visitscribe.domain.transcript_extraction import resolve_response, transcript_text, visible_length
from visitscribe.errors import TranscriptionFailedError, TranscriptionQueryError
from visitscribe.repositories.records import PipelineRecords
from visitscribe.schemas.job import JobMetadata, PollStatus
from visitscribe.services.delivery import DeliveryService
from visitscribe.services.summarization import SummarizationService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PollResult:
    status: PollStatus
    transcript: str | None = None
    summary: dict[str, Any] | None = None

    @classmethod
    def running(cls) -> "PollResult":
        return cls(status=PollStatus.RUNNING)


class PollService:
    def __init__(
        self,
        records: PipelineRecords,
        transcriber: Transcriber,
        summarizer: SummarizationService,
        delivery: DeliveryService,
        settings: Settings,
    ) -> None:
        self._records = records
        self._transcriber = transcriber
        self._summarizer = summarizer
        self._delivery = delivery
        self._settings = settings

    def poll(self, job_id: str) -> PollResult:
        safe_job_id = safe_log_identifier(job_id, prefix="jid")
        if self._records.is_done(job_id):
            return PollResult(status=PollStatus.DONE, summary=self._stored_summary(job_id))

        state = self._query(job_id)
        if not state.is_finished():
            return PollResult.running()
        if state.error:
            logger.error("poll.transcription_failed job_id=%s reason=%s", safe_job_id, " ".join(state.error.split()))
            raise TranscriptionFailedError(job_id, state.error)

        if not self._records.acquire_delivery_lock(
            job_id,
            stale_after_seconds=self._settings.delivery_lock_ttl_seconds,
        ):
            stored = self._stored_summary(job_id)
            if stored is None:
                logger.info("poll.lock_held job_id=%s", safe_job_id)
                return PollResult.running()
            return PollResult(status=PollStatus.DONE, summary=stored)

        logger.info("poll.claimed job_id=%s", safe_job_id)
        response = resolve_response(state, lambda: self._query(job_id))
        transcript = transcript_text(response)

        metadata = self._records.read_job_record(job_id)
        if metadata is None:
            logger.warning("poll.metadata_missing job_id=%s", safe_job_id)
            self._records.mark_done(job_id)
            return PollResult(status=PollStatus.DONE, transcript=transcript)

        self._records.save_transcript(metadata.session_id, transcript)
        existing = self._records.load_summary(metadata.session_id)
        if existing is not None:
            self._records.mark_done(job_id)
            logger.info("poll.summary_exists job_id=%s", safe_job_id)
            return PollResult(status=PollStatus.DONE, transcript=transcript, summary=existing)

        if visible_length(transcript) < self._settings.short_transcript_min_chars:
            return self._finish_short(job_id, metadata, transcript)
        return self._finish_full(job_id, metadata, transcript)

    def _finish_short(self, job_id: str, metadata: JobMetadata, transcript: str) -> PollResult:
        safe_job_id = safe_log_identifier(job_id, prefix="jid")
        try:
            outcome = self._delivery.deliver_text(
                job_id=job_id,
                recipient=metadata.user_id,
                text=self._settings.short_notice_text,
            )
            logger.info(
                "poll.short_transcript job_id=%s chars=%s delivery=%s",
                safe_job_id,
                visible_length(transcript),
                outcome.value,
            )
        except Exception as exc:
            logger.error("poll.short_notice_failed job_id=%s reason=%s", safe_job_id, safe_log_reason(exc))
        finally:
            self._records.mark_done(job_id)
        return PollResult(status=PollStatus.DONE, transcript=transcript)

    def _finish_full(self, job_id: str, metadata: JobMetadata, transcript: str) -> PollResult:
        safe_job_id = safe_log_identifier(job_id, prefix="jid")
        summary: dict[str, Any] | None = None
        try:
            artifacts = self._summarizer.summarize(transcript, metadata)
            summary = artifacts.summary
            outcome = self._delivery.deliver_text(
                job_id=job_id,
                recipient=metadata.user_id,
                text=artifacts.message,
            )
            logger.info("poll.delivered job_id=%s delivery=%s", safe_job_id, outcome.value)
        except Exception as exc:
            logger.error("poll.summarize_failed job_id=%s reason=%s", safe_job_id, safe_log_reason(exc))
        finally:
            self._records.mark_done(job_id)
        return PollResult(status=PollStatus.DONE, transcript=transcript, summary=summary)

    def _query(self, job_id: str) -> TranscriptionJobState:
        try:
            return self._transcriber.get_job(job_id)
        except Exception as exc:
            reason = safe_log_reason(exc)
            logger.error(
                "poll.query_failed job_id=%s reason=%s",
                safe_log_identifier(job_id, prefix="jid"),
                reason,
            )
            raise TranscriptionQueryError(job_id, reason) from exc

    def _stored_summary(self, job_id: str) -> dict[str, Any] | None:
        metadata = self._records.read_job_record(job_id)
        if metadata is None:
            return None
        return self._records.load_summary(metadata.session_id)


__all__ = ["PollResult", "PollService"]
