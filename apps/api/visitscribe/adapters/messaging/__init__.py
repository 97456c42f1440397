"""Push-messaging adapters."""

from .base import PushMessenger, PushOutcome
from .line_push import LinePushMessenger
from .mock_messaging import MockPushMessenger, SentMessage

__all__ = [
    "LinePushMessenger",
    "MockPushMessenger",
    "PushMessenger",
    "PushOutcome",
    "SentMessage",
]
