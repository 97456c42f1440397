"""Jinja2 prompt and document templates shipped with the package."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_PACKAGE_DIR = Path(__file__).resolve().parent.parent
PROMPT_DIR = _PACKAGE_DIR / "prompts"
DOCUMENT_DIR = _PACKAGE_DIR / "templates"


class PromptNotFoundError(FileNotFoundError):
    """Raised when a requested template is not found on disk."""


@lru_cache(maxsize=None)
def _environment(directory: str, autoescape: bool) -> Environment:
    return Environment(
        loader=FileSystemLoader(directory),
        autoescape=autoescape,
        undefined=StrictUndefined,
        keep_trailing_newline=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _render(directory: Path, name: str, autoescape: bool, params: dict[str, Any]) -> str:
    template_name = name if name.endswith(".j2") else f"{name}.j2"
    if not (directory / template_name).is_file():
        raise PromptNotFoundError(f"Template not found: {directory / template_name}")
    template = _environment(str(directory), autoescape).get_template(template_name)
    return template.render(**params).strip()


def render_prompt(name: str, **params: Any) -> str:
    """Render a generative prompt, e.g. ``render_prompt("visit_short", transcript=...)``."""
    return _render(PROMPT_DIR, name, False, params)


def render_document(name: str, **params: Any) -> str:
    """Render an HTML document with autoescaping enabled."""
    return _render(DOCUMENT_DIR, name, True, params)


__all__ = ["PromptNotFoundError", "render_document", "render_prompt"]
