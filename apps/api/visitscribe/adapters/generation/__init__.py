"""Generative-text adapters."""

from .base import GenerationOptions, TextGenerator
from .mock_generation import MockTextGenerator

__all__ = ["GenerationOptions", "MockTextGenerator", "TextGenerator"]
