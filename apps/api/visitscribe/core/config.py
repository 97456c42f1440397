"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    storage_provider: Literal["memory", "gcs"] = "gcs"
    speech_provider: Literal["mock", "google"] = "google"
    llm_provider: Literal["mock", "gemini"] = "gemini"
    push_provider: Literal["mock", "line"] = "line"
    transcoder_provider: Literal["passthrough", "ffmpeg"] = "ffmpeg"

    gcs_bucket: str | None = None
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-pro"
    line_channel_access_token: str | None = None
    line_api_base: str = "https://api.line.me"

    data_dir: Path = Path("/tmp/data")
    ffmpeg_binary: str = "ffmpeg"
    language_code: str = "ja-JP"
    speech_model: str = "latest_long"

    summary_profile: Literal["visit", "pharmacy"] = "visit"
    summary_language: str = "Japanese"
    short_transcript_min_chars: int = 15
    short_notice_text: str = "■Visit memo\n(The recording was too short, so no memo was created.)"
    compose_batch_size: int = 32
    upload_url_ttl_minutes: int = 15
    detail_url_ttl_days: int = 7
    delivery_lock_ttl_seconds: int | None = 900

    model_config = SettingsConfigDict(env_prefix="VISITSCRIBE_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
