"""Video and caption constants for Reddit Shorts.

This module contains everything that shapes the rendered short:
- Output resolution and render quality
- Chunk length for narrated audio
- Caption grouping and styling defaults

The target format is a 9:16 vertical short (TikTok / Reels / Shorts), so
each narration chunk stays under the one minute limit those platforms use.
"""

from typing import Final

# =============================================================================
# OUTPUT RESOLUTION
# =============================================================================

VIDEO_WIDTH: Final[int] = 1080
"""Output video width in pixels."""

VIDEO_HEIGHT: Final[int] = 1920
"""Output video height in pixels. 9:16 with 1080 width."""

RENDER_QUALITY: Final[str] = "high"
"""Render quality requested from the rendering service."""

RENDER_QUALITIES: Final[tuple[str, ...]] = ("low", "medium", "high")
"""Quality levels accepted by the rendering service."""


# =============================================================================
# BACKGROUND VIDEO
# =============================================================================
# Stock footage is landscape; it is scaled up and centred on the vertical
# canvas so the middle of the frame fills the short.

BACKGROUND_SCALE_WIDTH: Final[int] = 1920
"""Width the background footage is scaled to."""

BACKGROUND_SCALE_HEIGHT: Final[int] = 1080
"""Height the background footage is scaled to."""

BACKGROUND_Y: Final[int] = 540
"""Vertical offset of the background footage on the canvas."""

VIDEO_EXTENSIONS: Final[tuple[str, ...]] = (".mp4", ".mov", ".webm")
"""File extensions treated as background videos in the asset store."""


# =============================================================================
# AUDIO CHUNKS
# =============================================================================

CHUNK_MAX_SECONDS: Final[float] = 59.0
"""Maximum length of one narration chunk (one short per chunk)."""

AUDIO_TARGET_DBFS: Final[float] = -20.0
"""Loudness target used when chunk normalization is enabled."""

AUDIO_FORMAT: Final[str] = "mp3"
"""Encoding of uploaded narration chunks."""

AUDIO_CONTENT_TYPE: Final[str] = "audio/mpeg"
"""Content type sent with uploaded narration chunks."""


# =============================================================================
# CAPTIONS
# =============================================================================

CAPTION_MAX_SPAN_SECONDS: Final[float] = 3.0
"""Time after which a caption group is closed and a new one begins."""

CAPTION_FONT_FAMILY: Final[str] = "Playfair Display"
"""Caption font family (a Google font known to the renderer)."""

CAPTION_FONT_WEIGHT: Final[int] = 800
"""Caption font weight."""

CAPTION_FONT_SIZE: Final[str] = "68px"
"""Caption font size as a CSS length."""

CAPTION_FONT_COLOR: Final[str] = "#FFFFFF"
"""Caption text color."""

CAPTION_SHADOW: Final[str] = "2px 2px 4px rgba(0, 0, 0, 0.8)"
"""CSS text shadow keeping captions readable over bright footage."""

CAPTION_WIDTH: Final[int] = 900
"""Width of the caption text box in pixels."""
