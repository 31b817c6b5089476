"""Reddit Shorts pipeline.

Turns Reddit stories into captioned vertical shorts:

Per post:
1. Speech synthesis - Narrates the post text
2. Audio slicing - Splits narration into chunks of at most one minute

Per chunk, strictly in order:
3. Upload - Stores the chunk audio publicly
4. Transcription - Gets word timings for the chunk
5. Segmentation - Groups words into captions
6. Composition - Builds the scene (background video, audio, captions)
7. Rendering - Renders the scene and waits for the result
8. Notification - Posts "<title> Pt. N" with the video link
9. Cleanup - Deletes the chunk audio and the used background video

Example usage:
    from reddit_shorts.config import Settings
    from reddit_shorts.pipeline import PipelineOrchestrator

    orchestrator = PipelineOrchestrator.from_settings(Settings())
    report = await orchestrator.run()
"""

from .asset_pool import VideoAssetPool
from .base import (
    # Data models
    AudioChunk,
    CaptionGroup,
    ChunkOutcome,
    ChunkStatus,
    Post,
    PostReport,
    RenderJob,
    RenderResult,
    RenderStatus,
    RunReport,
    SceneDescription,
    StoredAsset,
    WordTiming,
    # Exceptions
    AssetPoolExhausted,
    CleanupError,
    ConfigurationError,
    InvalidInput,
    NoEligiblePosts,
    PipelineError,
    ProviderError,
    RenderTimeout,
    # Interfaces
    IAssetStore,
    IAudioSlicer,
    INotifier,
    IPostSource,
    IRenderer,
    ISpeechSynthesizer,
    ITranscriber,
    PipelineComponent,
)
from .cli_display import LogLevel, PipelineDisplay
from .composer import SceneComposer
from .orchestrator import PipelineOrchestrator, format_notification
from .post_selector import filter_by_length, select_posts
from .segmenter import TimeSegmenter, segment_words

__all__ = [
    # Data models
    "AudioChunk",
    "CaptionGroup",
    "ChunkOutcome",
    "ChunkStatus",
    "Post",
    "PostReport",
    "RenderJob",
    "RenderResult",
    "RenderStatus",
    "RunReport",
    "SceneDescription",
    "StoredAsset",
    "WordTiming",
    # Exceptions
    "AssetPoolExhausted",
    "CleanupError",
    "ConfigurationError",
    "InvalidInput",
    "NoEligiblePosts",
    "PipelineError",
    "ProviderError",
    "RenderTimeout",
    # Interfaces
    "IAssetStore",
    "IAudioSlicer",
    "INotifier",
    "IPostSource",
    "IRenderer",
    "ISpeechSynthesizer",
    "ITranscriber",
    "PipelineComponent",
    # Components
    "LogLevel",
    "PipelineDisplay",
    "PipelineOrchestrator",
    "SceneComposer",
    "TimeSegmenter",
    "VideoAssetPool",
    "filter_by_length",
    "format_notification",
    "segment_words",
    "select_posts",
]
