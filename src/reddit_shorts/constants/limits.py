"""Provider limits and timing constants for Reddit Shorts.

This module contains the limits imposed by the services the pipeline talks
to, plus the polling and timeout settings used when waiting on them.
"""

from typing import Final

# =============================================================================
# REDDIT
# =============================================================================

REDDIT_SORTS: Final[tuple[str, ...]] = ("hot", "new", "rising", "top", "controversial")
"""Listing sorts a subreddit can be fetched with."""

REDDIT_TIME_WINDOWS: Final[tuple[str, ...]] = ("hour", "day", "week", "month", "year", "all")
"""Time windows accepted by the top and controversial listings."""

REDDIT_TIMED_SORTS: Final[tuple[str, ...]] = ("top", "controversial")
"""Sorts that take a time window."""

REDDIT_FETCH_LIMIT_DEFAULT: Final[int] = 25
"""Default number of posts requested from a listing."""


# =============================================================================
# SPEECH SYNTHESIS
# =============================================================================

TTS_MAX_INPUT_CHARS: Final[int] = 4096
"""Maximum characters the OpenAI speech endpoint accepts per request."""

TTS_DEFAULT_MODEL: Final[str] = "tts-1"
"""Default OpenAI speech model."""

TTS_DEFAULT_VOICE: Final[str] = "onyx"
"""Default OpenAI voice."""


# =============================================================================
# TRANSCRIPTION
# =============================================================================

DEEPGRAM_MODEL: Final[str] = "nova-2"
"""Deepgram model used for word timings."""

DEEPGRAM_BASE_URL: Final[str] = "https://api.deepgram.com/v1"
"""Deepgram REST base URL."""


# =============================================================================
# RENDERING
# =============================================================================

JSON2VIDEO_BASE_URL: Final[str] = "https://api.json2video.com/v2"
"""JSON2Video REST base URL."""

RENDER_POLL_INTERVAL_SECONDS: Final[float] = 5.0
"""First delay between render status checks."""

RENDER_POLL_BACKOFF: Final[float] = 1.5
"""Multiplier applied to the delay after each status check."""

RENDER_POLL_MAX_INTERVAL_SECONDS: Final[float] = 30.0
"""Ceiling for the delay between status checks."""

RENDER_TIMEOUT_SECONDS: Final[float] = 900.0
"""Time after which a render that has not finished is abandoned."""


# =============================================================================
# HTTP
# =============================================================================

HTTP_TIMEOUT_SECONDS: Final[float] = 60.0
"""Default timeout for provider HTTP requests."""

HTTP_RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})
"""Status codes that mark a provider failure as transient."""
