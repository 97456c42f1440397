"""Chunk upload signing."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from visitscribe.adapters.storage import ObjectStore
from visitscribe.core.config import Settings
from visitscribe.core.logging_safety import safe_log_identifier
from visitscribe.errors import ValidationError
from visitscribe.repositories import layout

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_CONTENT_TYPE = "audio/webm"


@dataclass(slots=True)
class SignedUpload:
    signed_url: str
    object_path: str


def chunk_extension(content_type: str) -> str:
    return "mp4" if "mp4" in content_type.lower() else "webm"


class UploadService:
    def __init__(self, store: ObjectStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def sign_chunk_upload(
        self,
        *,
        session_id: str | None,
        user_id: str | None,
        seq: int | None,
        content_type: str | None,
    ) -> SignedUpload:
        session_id = (session_id or "").strip()
        user_id = (user_id or "").strip()
        missing = [name for name, value in (("sessionId", session_id), ("userId", user_id)) if not value]
        if seq is None:
            missing.append("seq")
        if missing:
            raise ValidationError("sessionId, userId and seq are required.", details={"missing": missing})
        if seq < 1:
            raise ValidationError("seq must be 1 or greater.", details={"seq": seq})

        content_type = (content_type or "").strip() or DEFAULT_CHUNK_CONTENT_TYPE
        key = layout.chunk_key(session_id, seq, chunk_extension(content_type))
        signed_url = self._store.signed_url(
            key,
            method="PUT",
            expires_in_seconds=self._settings.upload_url_ttl_minutes * 60,
            content_type=content_type,
        )
        logger.info(
            "upload.signed session_id=%s user_id=%s seq=%s",
            safe_log_identifier(session_id, prefix="sid"),
            safe_log_identifier(user_id, prefix="uid"),
            seq,
        )
        return SignedUpload(signed_url=signed_url, object_path=key)


__all__ = ["SignedUpload", "UploadService", "chunk_extension"]
