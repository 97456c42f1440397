"""Audio transcoder adapters."""

from .base import AudioTranscoder
from .ffmpeg import FfmpegTranscoder
from .passthrough import PassthroughTranscoder

__all__ = ["AudioTranscoder", "FfmpegTranscoder", "PassthroughTranscoder"]
