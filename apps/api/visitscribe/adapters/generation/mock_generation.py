"""Mock text generator for local development and tests."""

from __future__ import annotations

from collections.abc import Callable
import threading

from visitscribe.adapters.generation.base import GenerationOptions, TextGenerator
from visitscribe.errors import GenerationError


def _empty_object(_prompt: str) -> str:
    return "{}"


class MockTextGenerator(TextGenerator):
    """Returns ``responder(prompt)``; records every prompt it receives."""

    def __init__(self, responder: Callable[[str], str] | None = None) -> None:
        self.responder = responder or _empty_object
        self.prompts: list[str] = []
        self.options: list[GenerationOptions] = []
        self.failure_message: str | None = None
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.prompts)

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        with self._lock:
            self.prompts.append(prompt)
            self.options.append(options)
            failure = self.failure_message
        if failure is not None:
            raise GenerationError(failure)
        return self.responder(prompt)


__all__ = ["MockTextGenerator"]
