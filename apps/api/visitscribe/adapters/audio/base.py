"""Audio normalization interface."""

from abc import ABC, abstractmethod
from pathlib import Path


class AudioTranscoder(ABC):
    """Converts an arbitrary audio container to mono 16 kHz PCM WAV."""

    @abstractmethod
    def to_wav16k_mono(self, source: Path, destination: Path) -> None:
        """Write the normalized WAV to ``destination`` or raise ``TranscodeError``."""


__all__ = ["AudioTranscoder"]
