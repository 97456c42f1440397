"""Passthrough transcoder for local development and tests."""

from pathlib import Path
import shutil

from visitscribe.adapters.audio.base import AudioTranscoder
from visitscribe.errors import TranscodeError


class PassthroughTranscoder(AudioTranscoder):
    """Copies input bytes unchanged. ``failure_message`` injects one failure."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path]] = []
        self.failure_message: str | None = None

    def to_wav16k_mono(self, source: Path, destination: Path) -> None:
        self.calls.append((source, destination))
        if self.failure_message is not None:
            message = self.failure_message
            self.failure_message = None
            raise TranscodeError(message)
        shutil.copyfile(source, destination)


__all__ = ["PassthroughTranscoder"]
