"""Generative-text service interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    temperature: float = 0.2
    top_p: float = 0.9
    max_output_tokens: int = 2200
    structured_output: bool = True


class TextGenerator(ABC):
    """Single-prompt text generation; failures raise ``GenerationError``."""

    @abstractmethod
    def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Return the raw model text for ``prompt``."""


__all__ = ["GenerationOptions", "TextGenerator"]
