"""Configuration for the Reddit Shorts pipeline.

Credentials are read from the environment (or a ``.env`` file) under the
same names the services document. Tunables are grouped into nested models
that can be overridden with ``GROUP__FIELD`` variables, for example
``SOURCE__SUBREDDIT=nosleep`` or ``AUDIO__MAX_CHUNK_SECONDS=45``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    AUDIO_FORMAT,
    AUDIO_TARGET_DBFS,
    BACKGROUND_SCALE_HEIGHT,
    BACKGROUND_SCALE_WIDTH,
    BACKGROUND_Y,
    CAPTION_FONT_COLOR,
    CAPTION_FONT_FAMILY,
    CAPTION_FONT_SIZE,
    CAPTION_FONT_WEIGHT,
    CAPTION_MAX_SPAN_SECONDS,
    CAPTION_SHADOW,
    CAPTION_WIDTH,
    CHUNK_MAX_SECONDS,
    HTTP_TIMEOUT_SECONDS,
    REDDIT_FETCH_LIMIT_DEFAULT,
    REDDIT_SORTS,
    REDDIT_TIME_WINDOWS,
    RENDER_POLL_BACKOFF,
    RENDER_POLL_INTERVAL_SECONDS,
    RENDER_POLL_MAX_INTERVAL_SECONDS,
    RENDER_QUALITIES,
    RENDER_QUALITY,
    RENDER_TIMEOUT_SECONDS,
    TTS_DEFAULT_MODEL,
    TTS_DEFAULT_VOICE,
    TTS_MAX_INPUT_CHARS,
    VIDEO_EXTENSIONS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)


class SourceConfig(BaseModel):
    """Where stories come from and which of them are used."""

    subreddit: str = "stories"
    sort: str = "top"
    time_window: str = "day"
    limit: int = Field(default=REDDIT_FETCH_LIMIT_DEFAULT, ge=1, le=100)
    post_count: int = Field(default=1, ge=1)
    min_length: int = Field(default=500, ge=0)
    max_length: int = Field(default=3000, ge=1)
    reverse: bool = False

    @field_validator("sort")
    @classmethod
    def _known_sort(cls, value: str) -> str:
        value = value.lower()
        if value not in REDDIT_SORTS:
            raise ValueError(f"sort must be one of {', '.join(REDDIT_SORTS)}")
        return value

    @field_validator("time_window")
    @classmethod
    def _known_time_window(cls, value: str) -> str:
        value = value.lower()
        if value not in REDDIT_TIME_WINDOWS:
            raise ValueError(f"time_window must be one of {', '.join(REDDIT_TIME_WINDOWS)}")
        return value

    @model_validator(mode="after")
    def _length_range(self) -> "SourceConfig":
        if self.min_length > self.max_length:
            raise ValueError("min_length must not exceed max_length")
        return self


class TTSConfig(BaseModel):
    """Speech synthesis settings."""

    model: str = TTS_DEFAULT_MODEL
    voice: str = TTS_DEFAULT_VOICE
    max_input_chars: int = Field(default=TTS_MAX_INPUT_CHARS, ge=100)


class AudioConfig(BaseModel):
    """Narration chunking settings."""

    max_chunk_seconds: float = Field(default=CHUNK_MAX_SECONDS, gt=0)
    normalize: bool = False
    target_dbfs: float = AUDIO_TARGET_DBFS
    format: str = AUDIO_FORMAT


class CaptionStyle(BaseModel):
    """Look of the on-screen captions and the background footage."""

    font_family: str = CAPTION_FONT_FAMILY
    font_weight: int = CAPTION_FONT_WEIGHT
    font_size: str = CAPTION_FONT_SIZE
    font_color: str = CAPTION_FONT_COLOR
    text_shadow: str = CAPTION_SHADOW
    width: int = CAPTION_WIDTH
    video_scale_width: int = BACKGROUND_SCALE_WIDTH
    video_scale_height: int = BACKGROUND_SCALE_HEIGHT
    video_y: int = BACKGROUND_Y


class CaptionConfig(BaseModel):
    """Caption grouping and styling."""

    max_span_seconds: float = Field(default=CAPTION_MAX_SPAN_SECONDS, gt=0)
    style: CaptionStyle = Field(default_factory=CaptionStyle)


class OutputConfig(BaseModel):
    """Rendered video settings."""

    width: int = VIDEO_WIDTH
    height: int = VIDEO_HEIGHT
    quality: str = RENDER_QUALITY
    archive_dir: Optional[Path] = None  # Keep a text copy of every narrated post

    @field_validator("quality")
    @classmethod
    def _known_quality(cls, value: str) -> str:
        if value not in RENDER_QUALITIES:
            raise ValueError(f"quality must be one of {', '.join(RENDER_QUALITIES)}")
        return value


class RenderPollConfig(BaseModel):
    """How render status is polled."""

    interval_seconds: float = Field(default=RENDER_POLL_INTERVAL_SECONDS, gt=0)
    backoff: float = Field(default=RENDER_POLL_BACKOFF, ge=1.0)
    max_interval_seconds: float = Field(default=RENDER_POLL_MAX_INTERVAL_SECONDS, gt=0)
    timeout_seconds: float = Field(default=RENDER_TIMEOUT_SECONDS, gt=0)


class StorageConfig(BaseModel):
    """Asset store layout."""

    audio_bucket: str = "audio"
    video_bucket: str = "video"
    video_extensions: list[str] = Field(default_factory=lambda: list(VIDEO_EXTENSIONS))
    recycle_video_assets: bool = False

    @field_validator("video_extensions")
    @classmethod
    def _dotted_lowercase(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class NotifierConfig(BaseModel):
    """Discord webhook settings."""

    username: Optional[str] = None
    timeout_seconds: float = Field(default=HTTP_TIMEOUT_SECONDS, gt=0)


class Settings(BaseSettings):
    """All settings for one pipeline run."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Credentials
    openai_api_key: Optional[str] = None
    deepgram_api_key: Optional[str] = None
    json2video_api_key: Optional[str] = None
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    discord_webhook_url: Optional[str] = None
    reddit_client_id: Optional[str] = None
    reddit_secret: Optional[str] = None
    reddit_username: Optional[str] = None
    reddit_password: Optional[str] = None
    reddit_user_agent: str = "reddit-shorts/0.1.0"

    # Groups
    source: SourceConfig = Field(default_factory=SourceConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    captions: CaptionConfig = Field(default_factory=CaptionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    render: RenderPollConfig = Field(default_factory=RenderPollConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)

    http_timeout_seconds: float = HTTP_TIMEOUT_SECONDS

    def require(self, *fields: str) -> None:
        """Ensure credential fields are set.

        Args:
            fields: Field names, e.g. ``"openai_api_key"``.

        Raises:
            ConfigurationError: Listing the environment variable of every
                missing field.
        """
        from .pipeline.base import ConfigurationError

        missing = [name.upper() for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigurationError(missing)

    def public_dump(self) -> dict[str, Any]:
        """Return the non-secret settings (the grouped tunables)."""
        return self.model_dump(
            mode="json",
            include={"source", "tts", "audio", "captions", "output", "render", "storage", "notifier"},
        )


REDDIT_FIELDS = ("reddit_client_id", "reddit_secret", "reddit_username", "reddit_password")
CLOUDINARY_FIELDS = ("cloudinary_cloud_name", "cloudinary_api_key", "cloudinary_api_secret")
