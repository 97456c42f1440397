"""Transcript extraction from finished recognition jobs."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from visitscribe.adapters.transcription.base import TranscriptionJobState
from visitscribe.core.logging_safety import safe_log_reason
from visitscribe.errors import ExtractionError


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _unwrap(resolved: Any) -> Any:
    if isinstance(resolved, (list, tuple)):
        return resolved[0] if resolved else None
    return resolved


def _response_from_state(state: TranscriptionJobState) -> Any:
    if state.pending is not None:
        try:
            resolved = state.pending()
        except Exception as exc:
            raise ExtractionError(state.job_id, safe_log_reason(exc)) from exc
        return _unwrap(resolved)
    if state.result is not None:
        return state.result
    if state.latest_response is not None:
        return state.latest_response.get("response")
    return None


def resolve_response(
    state: TranscriptionJobState,
    requery: Callable[[], TranscriptionJobState],
) -> Any:
    """Return the recognition response, re-querying the service once if needed."""
    response = _response_from_state(state)
    if response is not None:
        return response

    retried = requery()
    if retried.result is not None:
        return retried.result
    if retried.latest_response is not None and retried.latest_response.get("response") is not None:
        return retried.latest_response["response"]
    raise ExtractionError(state.job_id)


def transcript_text(response: Any) -> str:
    """Join the top alternative of every result, one line per result."""
    lines: list[str] = []
    for result in _field(response, "results") or []:
        alternatives = _field(result, "alternatives") or []
        transcript = _field(alternatives[0], "transcript") if alternatives else None
        lines.append(transcript or "")
    return "\n".join(lines).strip()


def visible_length(text: str) -> int:
    """Number of non-whitespace characters."""
    return len("".join(text.split()))


__all__ = ["resolve_response", "transcript_text", "visible_length"]
