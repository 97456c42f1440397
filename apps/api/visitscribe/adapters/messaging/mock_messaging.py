"""Mock push messenger that deduplicates on the idempotency key like the real service."""

from __future__ import annotations

from dataclasses import dataclass
import threading

from visitscribe.adapters.messaging.base import PushMessenger, PushOutcome
from visitscribe.errors import DeliveryError


@dataclass(frozen=True, slots=True)
class SentMessage:
    recipient: str
    text: str
    idempotency_key: str


class MockPushMessenger(PushMessenger):
    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self.attempts: list[SentMessage] = []
        self.failure_status_code: int | None = None
        self._seen_keys: set[str] = set()
        self._lock = threading.Lock()

    def push_text(self, recipient: str, text: str, idempotency_key: str) -> PushOutcome:
        message = SentMessage(recipient=recipient, text=text, idempotency_key=idempotency_key)
        with self._lock:
            self.attempts.append(message)
            if self.failure_status_code is not None:
                raise DeliveryError("Injected push failure", status_code=self.failure_status_code)
            if idempotency_key in self._seen_keys:
                return PushOutcome.DEDUPLICATED
            self._seen_keys.add(idempotency_key)
            self.sent.append(message)
            return PushOutcome.SENT


__all__ = ["MockPushMessenger", "SentMessage"]
