"""Tolerant decoding of JSON embedded in generative model output."""

from __future__ import annotations

import json
import re
from typing import Any

from visitscribe.errors import ParseError

_LEADING_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"```$")


def extract_json_text(text: str | None) -> str:
    """Strip code fences and slice from the first ``{`` to the last ``}``."""
    if not text:
        raise ParseError("empty model output")

    candidate = str(text).strip()
    candidate = _LEADING_FENCE.sub("", candidate)
    candidate = _TRAILING_FENCE.sub("", candidate).strip()

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start >= 0 and end > start:
        candidate = candidate[start : end + 1]
    return candidate


def parse_json_loose(text: str | None) -> dict[str, Any]:
    """Decode a JSON object from model output that may carry fences or prose."""
    candidate = extract_json_text(text)
    try:
        decoded = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON at position {exc.pos}: {exc.msg}") from exc
    if not isinstance(decoded, dict):
        raise ParseError(f"expected a JSON object, got {type(decoded).__name__}")
    return decoded


__all__ = ["extract_json_text", "parse_json_loose"]
