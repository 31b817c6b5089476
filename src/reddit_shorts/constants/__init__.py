"""Global constants package for Reddit Shorts.

PACKAGE STRUCTURE:
-----------------
- video.py  : Output resolution, chunk length, caption styling
- limits.py : Provider limits, endpoints, polling and timeouts

USAGE EXAMPLES:
--------------
    from reddit_shorts.constants import VIDEO_WIDTH, CAPTION_MAX_SPAN_SECONDS
"""

from .limits import (
    DEEPGRAM_BASE_URL,
    DEEPGRAM_MODEL,
    HTTP_RETRYABLE_STATUS_CODES,
    HTTP_TIMEOUT_SECONDS,
    JSON2VIDEO_BASE_URL,
    REDDIT_FETCH_LIMIT_DEFAULT,
    REDDIT_SORTS,
    REDDIT_TIME_WINDOWS,
    REDDIT_TIMED_SORTS,
    RENDER_POLL_BACKOFF,
    RENDER_POLL_INTERVAL_SECONDS,
    RENDER_POLL_MAX_INTERVAL_SECONDS,
    RENDER_TIMEOUT_SECONDS,
    TTS_DEFAULT_MODEL,
    TTS_DEFAULT_VOICE,
    TTS_MAX_INPUT_CHARS,
)
from .video import (
    AUDIO_CONTENT_TYPE,
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
    RENDER_QUALITIES,
    RENDER_QUALITY,
    VIDEO_EXTENSIONS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)

__all__ = [
    # Limits
    "DEEPGRAM_BASE_URL",
    "DEEPGRAM_MODEL",
    "HTTP_RETRYABLE_STATUS_CODES",
    "HTTP_TIMEOUT_SECONDS",
    "JSON2VIDEO_BASE_URL",
    "REDDIT_FETCH_LIMIT_DEFAULT",
    "REDDIT_SORTS",
    "REDDIT_TIME_WINDOWS",
    "REDDIT_TIMED_SORTS",
    "RENDER_POLL_BACKOFF",
    "RENDER_POLL_INTERVAL_SECONDS",
    "RENDER_POLL_MAX_INTERVAL_SECONDS",
    "RENDER_TIMEOUT_SECONDS",
    "TTS_DEFAULT_MODEL",
    "TTS_DEFAULT_VOICE",
    "TTS_MAX_INPUT_CHARS",
    # Video
    "AUDIO_CONTENT_TYPE",
    "AUDIO_FORMAT",
    "AUDIO_TARGET_DBFS",
    "BACKGROUND_SCALE_HEIGHT",
    "BACKGROUND_SCALE_WIDTH",
    "BACKGROUND_Y",
    "CAPTION_FONT_COLOR",
    "CAPTION_FONT_FAMILY",
    "CAPTION_FONT_SIZE",
    "CAPTION_FONT_WEIGHT",
    "CAPTION_MAX_SPAN_SECONDS",
    "CAPTION_SHADOW",
    "CAPTION_WIDTH",
    "CHUNK_MAX_SECONDS",
    "RENDER_QUALITIES",
    "RENDER_QUALITY",
    "VIDEO_EXTENSIONS",
    "VIDEO_HEIGHT",
    "VIDEO_WIDTH",
]
