"""Summarization stage: generative calls, tolerant parsing and artifact persistence."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from visitscribe.adapters.generation import GenerationOptions, TextGenerator
from visitscribe.core.config import Settings
from visitscribe.core.logging_safety import elapsed_ms, safe_log_identifier, safe_log_reason
from visitscribe.domain.messages import format_pharmacy_message, format_visit_message
from visitscribe.domain.prompts import render_document, render_prompt
from visitscribe.domain.structured_output import parse_json_loose
from visitscribe.errors import GenerationError, ParseError
from visitscribe.repositories import layout
from visitscribe.repositories.records import PipelineRecords
from visitscribe.schemas.job import JobMetadata
from visitscribe.schemas.summary import PharmacyNote, VisitDetail, VisitSummary

logger = logging.getLogger(__name__)

SHORT_OPTIONS = GenerationOptions(max_output_tokens=2200)
DETAIL_OPTIONS = GenerationOptions(max_output_tokens=3200)
PHARMACY_OPTIONS = GenerationOptions(max_output_tokens=2500)


@dataclass(slots=True)
class SummaryArtifacts:
    profile: str
    summary: dict[str, Any]
    message: str
    detail: dict[str, Any] | None = None
    html: str | None = None
    detail_url: str | None = None
    fallbacks: list[str] = field(default_factory=list)


class SummarizationService:
    def __init__(self, records: PipelineRecords, generator: TextGenerator, settings: Settings) -> None:
        self._records = records
        self._generator = generator
        self._settings = settings

    def summarize(self, transcript: str, metadata: JobMetadata) -> SummaryArtifacts:
        started = time.monotonic()
        if self._settings.summary_profile == "pharmacy":
            artifacts = self._summarize_pharmacy(transcript)
        else:
            artifacts = self._summarize_visit(transcript, metadata)

        self._records.save_summary_artifacts(
            metadata.session_id,
            artifacts.summary,
            detail=artifacts.detail,
            html=artifacts.html,
        )
        logger.info(
            "summarize.completed session_id=%s profile=%s fallbacks=%s elapsed_ms=%s",
            safe_log_identifier(metadata.session_id, prefix="sid"),
            artifacts.profile,
            ",".join(artifacts.fallbacks) or "none",
            elapsed_ms(started),
        )
        return artifacts

    def _summarize_visit(self, transcript: str, metadata: JobMetadata) -> SummaryArtifacts:
        language = self._settings.summary_language
        short_prompt = render_prompt("visit_short", language=language, transcript=transcript)
        detail_prompt = render_prompt("visit_detail", language=language, transcript=transcript)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="summarize") as pool:
            short_future = pool.submit(self._generate_json, "short", short_prompt, SHORT_OPTIONS)
            detail_future = pool.submit(self._generate_json, "detail", detail_prompt, DETAIL_OPTIONS)
            short_payload = short_future.result()
            detail_payload = detail_future.result()

        fallbacks = []
        short = VisitSummary.from_payload(short_payload or {})
        if short_payload is None:
            fallbacks.append("short")
        if detail_payload is None:
            fallbacks.append("detail")
            detail = VisitDetail.from_short(short)
        else:
            detail = VisitDetail.from_payload(detail_payload)

        html = render_document(
            "visit_detail.html",
            lang=self._settings.language_code.split("-", 1)[0],
            context=metadata.context,
            detail=detail,
            sections=[
                ("Decided today", detail.decisions),
                ("Things to do", detail.todos_until_next),
                ("Call or come back if", detail.red_flags),
                ("Ask next time", detail.ask_next_time),
            ],
            transcript=transcript,
        )
        detail_url = self._detail_url(metadata.session_id)
        message = format_visit_message(
            short,
            detail,
            detail_url=detail_url,
            url_ttl_days=self._settings.detail_url_ttl_days,
        )
        summary = short.model_dump()
        if detail_url:
            summary["detail_url"] = detail_url
        return SummaryArtifacts(
            profile="visit",
            summary=summary,
            message=message,
            detail=detail.model_dump(),
            html=html,
            detail_url=detail_url,
            fallbacks=fallbacks,
        )

    def _summarize_pharmacy(self, transcript: str) -> SummaryArtifacts:
        prompt = render_prompt("pharmacy_note", language=self._settings.summary_language, transcript=transcript)
        payload = self._generate_json("pharmacy", prompt, PHARMACY_OPTIONS)
        note = PharmacyNote.fallback() if payload is None else PharmacyNote.from_payload(payload)
        return SummaryArtifacts(
            profile="pharmacy",
            summary=note.model_dump(),
            message=format_pharmacy_message(note),
            fallbacks=["pharmacy"] if payload is None else [],
        )

    def _generate_json(self, call: str, prompt: str, options: GenerationOptions) -> dict[str, Any] | None:
        """Decoded model output, or ``None`` when the call or the parse failed."""
        started = time.monotonic()
        try:
            raw = self._generator.generate(prompt, options)
            payload = parse_json_loose(raw)
        except (GenerationError, ParseError) as exc:
            logger.warning(
                "summarize.call_fallback call=%s elapsed_ms=%s reason=%s",
                call,
                elapsed_ms(started),
                safe_log_reason(exc),
            )
            return None
        logger.info("summarize.call_completed call=%s elapsed_ms=%s", call, elapsed_ms(started))
        return payload

    def _detail_url(self, session_id: str) -> str | None:
        try:
            return self._records.store.signed_url(
                layout.detail_html_key(session_id),
                method="GET",
                expires_in_seconds=self._settings.detail_url_ttl_days * 24 * 60 * 60,
            )
        except Exception as exc:
            logger.warning(
                "summarize.detail_url_failed session_id=%s reason=%s",
                safe_log_identifier(session_id, prefix="sid"),
                safe_log_reason(exc),
            )
            return None


__all__ = ["SummarizationService", "SummaryArtifacts"]
