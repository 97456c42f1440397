"""ffmpeg-backed audio normalization."""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess

from visitscribe.adapters.audio.base import AudioTranscoder
from visitscribe.errors import TranscodeError


class FfmpegTranscoder(AudioTranscoder):
    """Runs ffmpeg with fixed arguments; any stderr output is treated as failure."""

    def __init__(self, binary: str = "ffmpeg", timeout_seconds: float | None = None) -> None:
        self._binary = binary
        self._timeout_seconds = timeout_seconds

    def build_command(self, source: Path, destination: Path) -> list[str]:
        return [
            self._binary,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(source),
            "-ar",
            "16000",
            "-ac",
            "1",
            "-c:a",
            "pcm_s16le",
            str(destination),
        ]

    def to_wav16k_mono(self, source: Path, destination: Path) -> None:
        executable = shutil.which(self._binary)
        if executable is None:
            raise TranscodeError(f"{self._binary} not found on PATH")

        try:
            res = subprocess.run(
                self.build_command(source, destination),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self._timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise TranscodeError(f"{self._binary} timed out") from exc

        stderr = res.stderr.decode("utf-8", errors="replace").strip()
        if res.returncode != 0:
            raise TranscodeError(stderr or f"{self._binary} exited with code {res.returncode}")
        if stderr:
            raise TranscodeError(stderr)


__all__ = ["FfmpegTranscoder"]
