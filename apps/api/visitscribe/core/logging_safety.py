"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
import time
from typing import Any

_MAX_REASON_CHARS = 200


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_log_reason(exc: BaseException) -> str:
    """Single-line, length-capped description of an upstream failure."""
    message = " ".join(str(exc).split())
    if len(message) > _MAX_REASON_CHARS:
        message = message[: _MAX_REASON_CHARS - 3] + "..."
    return f"{type(exc).__name__}:{message}" if message else type(exc).__name__


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.monotonic()`` reading."""
    return int((time.monotonic() - started) * 1000)
