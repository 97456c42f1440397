"""Resolve provider adapters from configuration."""

from __future__ import annotations

from dataclasses import dataclass

from visitscribe.adapters.audio import AudioTranscoder, FfmpegTranscoder, PassthroughTranscoder
from visitscribe.adapters.generation import MockTextGenerator, TextGenerator
from visitscribe.adapters.messaging import LinePushMessenger, MockPushMessenger, PushMessenger
from visitscribe.adapters.storage import InMemoryObjectStore, ObjectStore
from visitscribe.adapters.transcription import MockTranscriber, Transcriber
from visitscribe.core.config import Settings


@dataclass(slots=True)
class Adapters:
    store: ObjectStore
    transcriber: Transcriber
    generator: TextGenerator
    messenger: PushMessenger
    transcoder: AudioTranscoder


def build_store(settings: Settings) -> ObjectStore:
    if settings.storage_provider == "gcs":
        from visitscribe.adapters.storage.gcs_storage import GcsObjectStore

        return GcsObjectStore(settings.gcs_bucket or "")
    return InMemoryObjectStore()


def build_transcriber(settings: Settings) -> Transcriber:
    if settings.speech_provider == "google":
        from visitscribe.adapters.transcription.google_speech import GoogleSpeechTranscriber

        return GoogleSpeechTranscriber()
    return MockTranscriber()


def build_generator(settings: Settings) -> TextGenerator:
    if settings.llm_provider == "gemini":
        from visitscribe.adapters.generation.gemini import GeminiTextGenerator

        return GeminiTextGenerator(api_key=settings.gemini_api_key, model=settings.gemini_model)
    return MockTextGenerator()


def build_messenger(settings: Settings) -> PushMessenger:
    if settings.push_provider == "line":
        return LinePushMessenger(settings.line_channel_access_token, base_url=settings.line_api_base)
    return MockPushMessenger()


def build_transcoder(settings: Settings) -> AudioTranscoder:
    if settings.transcoder_provider == "ffmpeg":
        return FfmpegTranscoder(binary=settings.ffmpeg_binary)
    return PassthroughTranscoder()


def build_adapters(settings: Settings) -> Adapters:
    return Adapters(
        store=build_store(settings),
        transcriber=build_transcriber(settings),
        generator=build_generator(settings),
        messenger=build_messenger(settings),
        transcoder=build_transcoder(settings),
    )


__all__ = ["Adapters", "build_adapters"]
