"""Pipeline records persisted in the object store.

The object store is the only shared state between instances. Every record that
more than one process may race on is written with ``create_if_absent``.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from visitscribe.adapters.storage import ObjectNotFoundError, ObjectStore
from visitscribe.core.logging_safety import safe_log_identifier, safe_log_reason
from visitscribe.errors import DeliveryError, RaceLostError
from visitscribe.repositories import layout
from visitscribe.schemas.job import JobMetadata

logger = logging.getLogger(__name__)

_JSON = "application/json; charset=utf-8"
_TEXT = "text/plain; charset=utf-8"
_HTML = "text/html; charset=utf-8"
RECENT_JOBS_LIMIT = 20


class PipelineRecords:
    def __init__(self, store: ObjectStore, cache_dir: Path | None = None) -> None:
        self._store = store
        self._cache_dir = cache_dir

    @property
    def store(self) -> ObjectStore:
        return self._store

    # Job metadata

    def read_session_record(self, session_id: str) -> JobMetadata | None:
        return self._read_metadata(layout.session_meta_key(session_id))

    def create_session_record(self, record: JobMetadata) -> None:
        key = layout.session_meta_key(record.session_id)
        if not self._store.create_if_absent(key, record.to_json_bytes(), _JSON):
            raise RaceLostError(key)

    def write_job_record(self, record: JobMetadata) -> None:
        if not record.job_id:
            return
        try:
            self._store.upload(layout.job_meta_key(record.job_id), record.to_json_bytes(), _JSON)
        except Exception as exc:
            logger.warning(
                "records.job_meta_write_failed job_id=%s reason=%s",
                safe_log_identifier(record.job_id, prefix="jid"),
                safe_log_reason(exc),
            )

    def write_cache_record(self, record: JobMetadata) -> None:
        if self._cache_dir is None or not record.job_id:
            return
        try:
            path = self._cache_path(record.job_id)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(record.to_json_bytes())
        except OSError as exc:
            logger.warning(
                "records.cache_write_failed job_id=%s reason=%s",
                safe_log_identifier(record.job_id, prefix="jid"),
                safe_log_reason(exc),
            )

    def read_job_record(self, job_id: str) -> JobMetadata | None:
        """Job-indexed record from the store, falling back to the local cache copy."""
        record = self._read_metadata(layout.job_meta_key(job_id))
        if record is not None or self._cache_dir is None:
            return record

        path = self._cache_path(job_id)
        if not path.is_file():
            return None
        try:
            return JobMetadata.model_validate_json(path.read_bytes())
        except (OSError, PydanticValidationError) as exc:
            logger.warning(
                "records.cache_read_failed job_id=%s reason=%s",
                safe_log_identifier(job_id, prefix="jid"),
                safe_log_reason(exc),
            )
            return None

    def list_job_records(self, limit: int = RECENT_JOBS_LIMIT) -> list[JobMetadata]:
        records = []
        for key in self._store.list_prefix(layout.JOB_META_PREFIX):
            if not key.endswith(".json"):
                continue
            record = self._read_metadata(key)
            if record is not None:
                records.append(record)

        records.sort(key=lambda item: _sort_time(item.finalized_at), reverse=True)
        return records[:limit]

    def _read_metadata(self, key: str) -> JobMetadata | None:
        try:
            raw = self._store.download(key)
        except ObjectNotFoundError:
            return None
        try:
            return JobMetadata.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.warning("records.metadata_invalid key=%s reason=%s", key, safe_log_reason(exc))
            return None

    def _cache_path(self, job_id: str) -> Path:
        assert self._cache_dir is not None
        return self._cache_dir / "jobs" / f"{job_id}.json"

    # Delivery coordination

    def is_done(self, job_id: str) -> bool:
        return self._store.exists(layout.done_key(job_id))

    def mark_done(self, job_id: str) -> None:
        payload = json.dumps({"jobId": job_id, "doneAt": _now_iso()}).encode("utf-8")
        try:
            self._store.create_if_absent(layout.done_key(job_id), payload, _JSON)
        except Exception as exc:
            logger.error(
                "records.done_marker_failed job_id=%s reason=%s",
                safe_log_identifier(job_id, prefix="jid"),
                safe_log_reason(exc),
            )

    def acquire_delivery_lock(self, job_id: str, *, stale_after_seconds: int | None = None) -> bool:
        """Claim the right to run the terminal transition for ``job_id``.

        A lock older than ``stale_after_seconds`` is superseded by creating the
        next lock epoch; each epoch still has exactly one winner.
        """
        payload = json.dumps({"jobId": job_id, "acquiredAt": _now_iso()}).encode("utf-8")
        if self._store.create_if_absent(layout.lock_key(job_id), payload, _JSON):
            return True
        if stale_after_seconds is None:
            return False

        epochs = [
            epoch
            for epoch in (
                layout.lock_epoch(job_id, key) for key in self._store.list_prefix(layout.lock_key(job_id))
            )
            if epoch is not None
        ]
        current = max(epochs, default=0)
        acquired_at = self._lock_acquired_at(layout.lock_key(job_id, current))
        if acquired_at is not None:
            age = (datetime.now(UTC) - acquired_at).total_seconds()
            if age < stale_after_seconds:
                return False

        if self.is_done(job_id):
            return False

        taken = self._store.create_if_absent(layout.lock_key(job_id, current + 1), payload, _JSON)
        if taken:
            logger.warning(
                "records.lock_taken_over job_id=%s epoch=%s",
                safe_log_identifier(job_id, prefix="jid"),
                current + 1,
            )
        return taken

    def _lock_acquired_at(self, key: str) -> datetime | None:
        """``None`` means the lock payload is unreadable and counts as stale."""
        try:
            payload = json.loads(self._store.download(key))
            acquired_at = datetime.fromisoformat(payload["acquiredAt"])
        except (ObjectNotFoundError, ValueError, KeyError, TypeError):
            return None
        if acquired_at.tzinfo is None:
            acquired_at = acquired_at.replace(tzinfo=UTC)
        return acquired_at

    def get_or_create_retry_key(self, job_id: str) -> str:
        key = layout.retry_key_key(job_id)
        existing = self._read_text(key)
        if existing:
            return existing

        candidate = str(uuid4())
        if self._store.create_if_absent(key, candidate.encode("utf-8"), _TEXT):
            return candidate

        winner = self._read_text(key)
        if not winner:
            raise DeliveryError("retry key exists but could not be read")
        return winner

    def _read_text(self, key: str) -> str | None:
        try:
            return self._store.download_text(key).strip()
        except ObjectNotFoundError:
            return None

    # Artifacts

    def save_transcript(self, session_id: str, transcript: str) -> None:
        try:
            self._store.upload_text(layout.transcript_key(session_id), transcript)
        except Exception as exc:
            logger.warning(
                "records.transcript_write_failed session_id=%s reason=%s",
                safe_log_identifier(session_id, prefix="sid"),
                safe_log_reason(exc),
            )

    def load_summary(self, session_id: str) -> dict[str, Any] | None:
        try:
            decoded = json.loads(self._store.download(layout.summary_key(session_id)))
        except ObjectNotFoundError:
            return None
        except ValueError as exc:
            logger.warning(
                "records.summary_invalid session_id=%s reason=%s",
                safe_log_identifier(session_id, prefix="sid"),
                safe_log_reason(exc),
            )
            return None
        return decoded if isinstance(decoded, dict) else None

    def save_summary_artifacts(
        self,
        session_id: str,
        summary: dict[str, Any],
        *,
        detail: dict[str, Any] | None = None,
        html: str | None = None,
    ) -> None:
        """Write summary artifacts; ``summaries/{id}.json`` goes last."""
        writes: list[tuple[str, bytes, str]] = []
        if detail is not None:
            writes.append((layout.detail_key(session_id), _json_bytes(detail), _JSON))
        if html is not None:
            writes.append((layout.detail_html_key(session_id), html.encode("utf-8"), _HTML))
        writes.append((layout.summary_key(session_id), _json_bytes(summary), _JSON))

        for key, data, content_type in writes:
            try:
                self._store.upload(key, data, content_type)
            except Exception as exc:
                logger.warning(
                    "records.artifact_write_failed session_id=%s artifact=%s reason=%s",
                    safe_log_identifier(session_id, prefix="sid"),
                    key.rsplit("/", 1)[-1].split(".", 1)[-1],
                    safe_log_reason(exc),
                )


def _json_bytes(value: dict[str, Any]) -> bytes:
    return json.dumps(value, ensure_ascii=False, indent=2).encode("utf-8")


def _sort_time(value: datetime | None) -> datetime:
    if value is None:
        return datetime.min.replace(tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


__all__ = ["PipelineRecords", "RECENT_JOBS_LIMIT"]
