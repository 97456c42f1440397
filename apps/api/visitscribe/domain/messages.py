"""Push message formatting with per-field caps."""

from __future__ import annotations

from visitscribe.schemas.summary import PharmacyNote, VisitDetail, VisitSummary

MAX_MESSAGE_CHARS = 4999
ITEM_CHARS = 40
TERM_CHARS = 24

_CAPS: dict[str, int] = {
    "summary_top3": 3,
    "decisions": 3,
    "todos_until_next": 5,
    "red_flags": 3,
    "ask_next_time": 3,
    "terms_plain": 3,
}


def short_text(value: str | None, limit: int = ITEM_CHARS) -> str:
    text = (value or "").strip()
    if len(text) > limit:
        return text[: limit - 1] + "…"
    return text


def cap_message(text: str) -> str:
    return text[:MAX_MESSAGE_CHARS]


def _bullets(items: list[str]) -> str:
    return "\n".join(f"・ {item}" for item in items)


def _capped(items: list[str], field: str) -> list[str]:
    return [short_text(item) for item in items[: _CAPS[field]]]


def format_visit_message(
    summary: VisitSummary,
    detail: VisitDetail | None = None,
    *,
    detail_url: str | None = None,
    url_ttl_days: int = 7,
) -> str:
    top = _capped(summary.summary_top3, "summary_top3")
    if not top and detail is not None:
        top = [short_text(line) for line in detail.summary.splitlines() if line.strip()][:3]

    sections = ["■Visit memo", f"🧾 Key points today\n{_bullets(top)}".rstrip()]

    decisions = _capped(summary.decisions, "decisions")
    if decisions:
        sections.append(f"\n[Decided today]\n{_bullets(decisions)}")
    todos = _capped(summary.todos_until_next, "todos_until_next")
    if todos:
        sections.append(f"\n✅ Things to do\n{_bullets(todos)}")
    flags = _capped(summary.red_flags, "red_flags")
    if flags:
        sections.append(f"\n🚩 Call or come back if\n{_bullets(flags)}")
    terms = summary.terms_plain[: _CAPS["terms_plain"]]
    if terms:
        lines = "\n".join(f"・ {short_text(t.term, TERM_CHARS)}: {short_text(t.easy)}" for t in terms)
        sections.append(f"\n🔎 In plain words\n{lines}")
    questions = _capped(summary.ask_next_time, "ask_next_time")
    if questions:
        sections.append(f"\n❓ Ask next time\n{_bullets(questions)}")

    message = "\n".join(sections)
    if detail_url:
        message += f"\n\n🔗 See details (valid for {url_ttl_days} days)\n{detail_url}"
    return cap_message(message)


def format_pharmacy_message(note: PharmacyNote) -> str:
    sections = ["■Pharmacy note"]
    if note.report_100:
        sections.append(f"📝 Report summary\n{note.report_100}")
    return cap_message("\n".join(sections))


__all__ = [
    "MAX_MESSAGE_CHARS",
    "cap_message",
    "format_pharmacy_message",
    "format_visit_message",
    "short_text",
]
