"""Push-messaging service interface."""

from abc import ABC, abstractmethod
from enum import Enum


class PushOutcome(str, Enum):
    SENT = "SENT"
    DEDUPLICATED = "DEDUPLICATED"


class PushMessenger(ABC):
    """Sends one text message to a recipient under an idempotency key."""

    @abstractmethod
    def push_text(self, recipient: str, text: str, idempotency_key: str) -> PushOutcome:
        """Return ``DEDUPLICATED`` when the key was already used; raise ``DeliveryError`` otherwise."""


__all__ = ["PushMessenger", "PushOutcome"]
