"""Idempotent push delivery."""

from __future__ import annotations

import logging
from enum import Enum

from visitscribe.adapters.messaging import PushMessenger, PushOutcome
from visitscribe.core.logging_safety import safe_log_identifier, safe_log_reason
from visitscribe.domain.messages import cap_message
from visitscribe.errors import DeliveryError
from visitscribe.repositories.records import PipelineRecords

logger = logging.getLogger(__name__)


class DeliveryOutcome(str, Enum):
    SENT = "SENT"
    DEDUPLICATED = "DEDUPLICATED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class DeliveryService:
    """Pushes a message at most once per job.

    The idempotency key is stored next to the job's delivery lock so every
    retry, from any instance, reuses the same key.
    """

    def __init__(self, records: PipelineRecords, messenger: PushMessenger) -> None:
        self._records = records
        self._messenger = messenger

    def deliver_text(self, *, job_id: str, recipient: str | None, text: str) -> DeliveryOutcome:
        safe_job_id = safe_log_identifier(job_id, prefix="jid")
        if not recipient:
            logger.warning("delivery.skipped job_id=%s reason=missing_recipient", safe_job_id)
            return DeliveryOutcome.SKIPPED

        safe_user_id = safe_log_identifier(recipient, prefix="uid")
        try:
            retry_key = self._records.get_or_create_retry_key(job_id)
            outcome = self._messenger.push_text(recipient, cap_message(text), retry_key)
        except DeliveryError as exc:
            logger.error(
                "delivery.failed job_id=%s user_id=%s status_code=%s reason=%s",
                safe_job_id,
                safe_user_id,
                exc.status_code,
                safe_log_reason(exc),
            )
            return DeliveryOutcome.FAILED

        if outcome is PushOutcome.DEDUPLICATED:
            logger.info("delivery.deduplicated job_id=%s user_id=%s", safe_job_id, safe_user_id)
            return DeliveryOutcome.DEDUPLICATED

        logger.info("delivery.sent job_id=%s user_id=%s chars=%s", safe_job_id, safe_user_id, len(text))
        return DeliveryOutcome.SENT


__all__ = ["DeliveryOutcome", "DeliveryService"]
