"""Structured summary models produced from generative output.

Every list-valued field is coerced to an empty list when it is missing or has
the wrong shape, and text fields are coerced to strings, so downstream
formatting never branches on a missing field.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _coerce_text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_coerce_text(item) for item in value if item is not None]


def _coerce_object_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PlainTerm(_Lenient):
    term: str = ""
    easy: str = ""
    note: str = ""

    @field_validator("term", "easy", "note", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)


class TopicBlock(_Lenient):
    title: str = ""
    bullets: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("bullets", mode="before")
    @classmethod
    def _bullets(cls, value: Any) -> list[str]:
        return _coerce_text_list(value)


class TimelineEntry(_Lenient):
    when: str = ""
    what: str = ""
    note: str = ""

    @field_validator("when", "what", "note", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)


class VisitSummary(_Lenient):
    """Short visit memo delivered in the push message."""

    summary_top3: list[str] = Field(default_factory=list)
    decisions: list[str] = Field(default_factory=list)
    todos_until_next: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    ask_next_time: list[str] = Field(default_factory=list)
    terms_plain: list[PlainTerm] = Field(default_factory=list)

    @field_validator("summary_top3", "decisions", "todos_until_next", "red_flags", "ask_next_time", mode="before")
    @classmethod
    def _text_lists(cls, value: Any) -> list[str]:
        return _coerce_text_list(value)

    @field_validator("terms_plain", mode="before")
    @classmethod
    def _terms(cls, value: Any) -> list[dict[str, Any]]:
        return _coerce_object_list(value)

    @classmethod
    def from_payload(cls, payload: Any) -> "VisitSummary":
        return cls.model_validate(payload if isinstance(payload, dict) else {})


class VisitDetail(VisitSummary):
    """Long-form visit memo rendered into the detail document."""

    summary: str = ""
    topic_blocks: list[TopicBlock] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_text(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("topic_blocks", "timeline", mode="before")
    @classmethod
    def _object_lists(cls, value: Any) -> list[dict[str, Any]]:
        return _coerce_object_list(value)

    @classmethod
    def from_short(cls, short: VisitSummary) -> "VisitDetail":
        """Fallback detail built from the short memo when the detail call failed."""
        return cls.model_validate(short.model_dump())


class SoapNote(_Lenient):
    s: str = ""
    o: str = ""
    a: str = ""
    p: str = ""

    @model_validator(mode="before")
    @classmethod
    def _lowercase_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {str(key).lower(): item for key, item in value.items()}

    @field_validator("s", "o", "a", "p", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _coerce_text(value)


class PharmacyNote(_Lenient):
    """Pharmacist SOAP draft plus a short report for the dispensing system."""

    report_100: str = ""
    soap: SoapNote = Field(default_factory=SoapNote)

    @field_validator("report_100", mode="before")
    @classmethod
    def _report_text(cls, value: Any) -> str:
        return _coerce_text(value)

    @field_validator("soap", mode="before")
    @classmethod
    def _soap(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @classmethod
    def from_payload(cls, payload: Any) -> "PharmacyNote":
        return cls.model_validate(payload if isinstance(payload, dict) else {})

    @classmethod
    def fallback(cls) -> "PharmacyNote":
        return cls(report_100="Summary generation failed")


__all__ = [
    "PharmacyNote",
    "PlainTerm",
    "SoapNote",
    "TimelineEntry",
    "TopicBlock",
    "VisitDetail",
    "VisitSummary",
]
