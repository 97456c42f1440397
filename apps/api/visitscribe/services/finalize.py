"""Job Coordinator: idempotent session finalize."""

from __future__ import annotations

import logging
import tempfile
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from visitscribe.adapters.audio import AudioTranscoder
from visitscribe.adapters.transcription import RecognitionOptions, Transcriber
from visitscribe.core.config import Settings
from visitscribe.core.logging_safety import elapsed_ms, safe_log_identifier, safe_log_reason
from visitscribe.errors import ApiError, NoChunksError, RaceLostError, SubmissionError, ValidationError
from visitscribe.repositories import layout
from visitscribe.repositories.records import PipelineRecords
from visitscribe.schemas.job import JobMetadata
from visitscribe.services.assembly import compose_many

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FinalizeResult:
    job_id: str
    replayed: bool


class FinalizeService:
    def __init__(
        self,
        records: PipelineRecords,
        transcoder: AudioTranscoder,
        transcriber: Transcriber,
        settings: Settings,
    ) -> None:
        self._records = records
        self._store = records.store
        self._transcoder = transcoder
        self._transcriber = transcriber
        self._settings = settings

    def finalize(
        self,
        *,
        session_id: str | None,
        user_id: str | None,
        context: dict[str, Any] | None = None,
    ) -> FinalizeResult:
        session_id = (session_id or "").strip()
        user_id = (user_id or "").strip()
        missing = [name for name, value in (("sessionId", session_id), ("userId", user_id)) if not value]
        if missing:
            raise ValidationError("sessionId and userId are required.", details={"missing": missing})

        safe_session_id = safe_log_identifier(session_id, prefix="sid")
        existing = self._records.read_session_record(session_id)
        if existing is not None and existing.job_id:
            logger.info(
                "finalize.replayed session_id=%s job_id=%s",
                safe_session_id,
                safe_log_identifier(existing.job_id, prefix="jid"),
            )
            return FinalizeResult(job_id=existing.job_id, replayed=True)

        started = time.monotonic()
        chunks = [
            key
            for key in self._store.list_prefix(layout.session_prefix(session_id))
            if layout.CHUNK_NAME_PATTERN.search(key)
        ]
        if not chunks:
            logger.warning("finalize.no_chunks session_id=%s", safe_session_id)
            raise NoChunksError(session_id)

        ext = chunks[0].rsplit(".", 1)[-1]
        assembled = layout.assembled_key(session_id, ext)
        rounds = compose_many(self._store, chunks, assembled, batch_size=self._settings.compose_batch_size)
        logger.info(
            "finalize.assembled session_id=%s chunks=%s rounds=%s elapsed_ms=%s",
            safe_session_id,
            len(chunks),
            rounds,
            elapsed_ms(started),
        )

        audio_uri = self._normalize_audio(session_id, assembled, ext)
        job_id = self._submit(session_id, audio_uri)

        record = JobMetadata(
            session_id=session_id,
            user_id=user_id,
            audio_uri=audio_uri,
            job_id=job_id,
            context=context or {},
            finalized_at=datetime.now(UTC),
        )
        try:
            self._records.create_session_record(record)
        except RaceLostError:
            return self._resolve_lost_race(session_id, orphaned_job_id=job_id)

        self._records.write_job_record(record)
        self._records.write_cache_record(record)
        logger.info(
            "finalize.created session_id=%s job_id=%s elapsed_ms=%s",
            safe_session_id,
            safe_log_identifier(job_id, prefix="jid"),
            elapsed_ms(started),
        )
        return FinalizeResult(job_id=job_id, replayed=False)

    def _normalize_audio(self, session_id: str, assembled: str, ext: str) -> str:
        work_root = self._settings.data_dir / "sessions"
        work_root.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=work_root) as workdir:
            source = Path(workdir) / f"assembled.{ext}"
            destination = Path(workdir) / "audio.wav"
            source.write_bytes(self._store.download(assembled))
            self._transcoder.to_wav16k_mono(source, destination)
            audio_key = layout.audio_key(session_id)
            self._store.upload(audio_key, destination.read_bytes(), "audio/wav")
        return self._store.uri(audio_key)

    def _submit(self, session_id: str, audio_uri: str) -> str:
        options = RecognitionOptions(
            language_code=self._settings.language_code,
            model=self._settings.speech_model,
        )
        try:
            return self._transcriber.submit(audio_uri, options)
        except ApiError:
            raise
        except Exception as exc:
            reason = safe_log_reason(exc)
            logger.error(
                "finalize.submit_failed session_id=%s reason=%s",
                safe_log_identifier(session_id, prefix="sid"),
                reason,
            )
            raise SubmissionError(reason) from exc

    def _resolve_lost_race(self, session_id: str, *, orphaned_job_id: str) -> FinalizeResult:
        safe_session_id = safe_log_identifier(session_id, prefix="sid")
        winner = self._records.read_session_record(session_id)
        if winner is None or not winner.job_id:
            logger.error("finalize.race_winner_unreadable session_id=%s", safe_session_id)
            raise ApiError(
                status_code=500,
                code="SESSION_RECORD_UNREADABLE",
                message="Session record exists but could not be read.",
                details={"session_id": session_id},
            )

        logger.warning(
            "finalize.race_lost session_id=%s job_id=%s orphaned_job_id=%s",
            safe_session_id,
            safe_log_identifier(winner.job_id, prefix="jid"),
            safe_log_identifier(orphaned_job_id, prefix="jid"),
        )
        return FinalizeResult(job_id=winner.job_id, replayed=True)


__all__ = ["FinalizeResult", "FinalizeService"]
