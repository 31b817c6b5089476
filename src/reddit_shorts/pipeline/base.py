"""Base classes and interfaces for the Reddit Shorts pipeline.

The orchestrator depends only on the abstractions defined here; concrete
adapters for Reddit, OpenAI, Cloudinary, Deepgram, JSON2Video and Discord
live in ``reddit_shorts.providers``.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Data Models
# =============================================================================


class Post(BaseModel):
    """A story fetched from a subreddit."""

    model_config = {"frozen": True}

    title: str
    text: str


class WordTiming(BaseModel):
    """A single transcribed word with its position in the audio."""

    word: str  # Punctuated form
    start: float
    end: float


class CaptionGroup(BaseModel):
    """Consecutive words shown together as one on-screen caption."""

    text: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        """Seconds the caption stays on screen."""
        return self.end - self.start


class AudioChunk(BaseModel):
    """One slice of narration, rendered as one short."""

    index: int
    data: bytes
    duration_seconds: float
    format: str = "mp3"


class StoredAsset(BaseModel):
    """An object held in the asset store."""

    bucket: str
    key: str
    url: str


class SceneDescription(BaseModel):
    """Declarative description of one short, ready to submit for rendering."""

    audio_track: str
    video_track: str
    captions: list[CaptionGroup]
    video_duration: float
    elements: list[dict] = Field(default_factory=list)


class RenderStatus(str, Enum):
    """Lifecycle of a render job."""

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class RenderJob(BaseModel):
    """Handle for a submitted render."""

    project_id: str


class RenderResult(BaseModel):
    """Snapshot of a render job's status."""

    status: RenderStatus
    media_url: Optional[str] = None
    message: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.status in (RenderStatus.DONE, RenderStatus.FAILED)


class ChunkStatus(str, Enum):
    """Final outcome of one chunk iteration."""

    PUBLISHED = "published"
    RENDER_FAILED = "render_failed"
    ABORTED = "aborted"


class ChunkOutcome(BaseModel):
    """What happened to one chunk."""

    index: int
    status: ChunkStatus
    media_url: Optional[str] = None
    error: Optional[str] = None


class PostReport(BaseModel):
    """Outcome of every chunk produced from one post."""

    post: Post
    chunk_count: int = 0
    outcomes: list[ChunkOutcome] = Field(default_factory=list)
    error: Optional[str] = None  # Set when the post was skipped entirely

    @property
    def published(self) -> list[ChunkOutcome]:
        return [o for o in self.outcomes if o.status == ChunkStatus.PUBLISHED]


class RunReport(BaseModel):
    """Summary of one pipeline run."""

    posts: list[PostReport] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def published_count(self) -> int:
        return sum(len(p.published) for p in self.posts)


# =============================================================================
# Abstract Base Classes (Interfaces)
# =============================================================================


class PipelineComponent(ABC):
    """Abstract base class for all pipeline collaborators."""

    def __init__(self, name: str):
        self.name = name
        self._display = None  # Set by orchestrator

    def set_display(self, display) -> None:
        """Set the CLI display instance for this component."""
        self._display = display

    def log_progress(self, message: str) -> None:
        """Log important progress (shown on console)."""
        if self._display:
            self._display.info(message, self.name)

    def log_detail(self, message: str) -> None:
        """Log detailed progress (file only, unless verbose)."""
        if self._display:
            self._display.detail(message, self.name)

    def log_warning(self, message: str) -> None:
        """Log component warning (shown on console)."""
        if self._display:
            self._display.warning(message, self.name)

    async def close(self) -> None:
        """Release any client held by the component."""
        return None


class IPostSource(PipelineComponent):
    """Interface for fetching candidate posts."""

    def __init__(self):
        super().__init__("PostSource")

    @abstractmethod
    async def fetch(
        self,
        subreddit: str,
        sort: str,
        time_window: str,
        limit: int,
    ) -> list[Post]:
        """Fetch posts from a subreddit listing.

        Args:
            subreddit: Subreddit name without the ``r/`` prefix.
            sort: Listing sort (hot, new, rising, top, controversial).
            time_window: Time window for timed sorts.
            limit: Maximum posts to request.

        Returns:
            Posts in listing order, title and text stripped.
        """
        pass


class ISpeechSynthesizer(PipelineComponent):
    """Interface for text-to-speech."""

    def __init__(self):
        super().__init__("SpeechSynthesizer")

    @abstractmethod
    async def synthesize(self, model: str, voice: str, text: str) -> bytes:
        """Narrate text.

        Returns:
            Encoded audio (MP3).
        """
        pass


class IAudioSlicer(PipelineComponent):
    """Interface for splitting narration into chunks."""

    def __init__(self):
        super().__init__("AudioSlicer")

    @abstractmethod
    async def slice(
        self,
        audio: bytes,
        max_seconds: float,
        normalize: bool = False,
    ) -> list[AudioChunk]:
        """Split audio into ordered chunks of at most ``max_seconds`` each."""
        pass


class IAssetStore(PipelineComponent):
    """Interface for name-addressed binary storage with public URLs."""

    def __init__(self):
        super().__init__("AssetStore")

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> StoredAsset:
        """Store ``data`` under ``bucket/key`` and return its descriptor."""
        pass

    @abstractmethod
    def public_url(self, bucket: str, key: str) -> str:
        """Build the public URL of an object."""
        pass

    @abstractmethod
    async def list(self, bucket: str) -> list[StoredAsset]:
        """List every object in a bucket."""
        pass

    @abstractmethod
    async def delete(self, bucket: str, key: str) -> None:
        """Delete an object.

        Deleting a key that does not exist is not an error.

        Raises:
            CleanupError: If the store refused the deletion.
        """
        pass


class ITranscriber(PipelineComponent):
    """Interface for word-level transcription."""

    def __init__(self):
        super().__init__("Transcriber")

    @abstractmethod
    async def transcribe(self, audio_url: str) -> list[WordTiming]:
        """Transcribe audio reachable at ``audio_url``.

        Returns:
            Word timings ordered by start time.
        """
        pass


class IRenderer(PipelineComponent):
    """Interface for the video rendering service."""

    def __init__(self):
        super().__init__("Renderer")

    @abstractmethod
    async def submit(self, scene: SceneDescription) -> RenderJob:
        """Submit a scene for rendering."""
        pass

    @abstractmethod
    def poll(self, job: RenderJob) -> AsyncIterator[RenderResult]:
        """Yield status snapshots until the job reaches a terminal status.

        Raises:
            RenderTimeout: If the job is still running when the
                configured timeout elapses.
        """
        pass

    async def await_completion(
        self,
        job: RenderJob,
        on_progress: Optional[Callable[[RenderResult], Awaitable[None]]] = None,
    ) -> RenderResult:
        """Consume the status sequence and return its last snapshot.

        Args:
            job: Submitted render job.
            on_progress: Optional async callback invoked for each snapshot.

        Returns:
            The terminal snapshot.
        """
        last: Optional[RenderResult] = None
        async for snapshot in self.poll(job):
            last = snapshot
            if on_progress:
                await on_progress(snapshot)
        if last is None:
            raise ProviderError(
                "Render status stream ended without a snapshot",
                provider=self.name,
                operation="poll",
            )
        return last


class INotifier(PipelineComponent):
    """Interface for publishing links to rendered shorts."""

    def __init__(self):
        super().__init__("Notifier")

    @abstractmethod
    async def send(self, message: str) -> None:
        """Deliver a text message."""
        pass


# =============================================================================
# Exceptions
# =============================================================================


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    pass


class InvalidInput(PipelineError):
    """Data handed to a pipeline stage breaks its contract."""

    pass


class NoEligiblePosts(PipelineError):
    """Fewer posts than requested survived the length filter."""

    def __init__(self, found: int, required: int):
        super().__init__(
            f"Only {found} eligible post(s) found, {required} required"
        )
        self.found = found
        self.required = required


class AssetPoolExhausted(PipelineError):
    """No background video left for the next chunk."""

    pass


class ConfigurationError(PipelineError):
    """Required settings are missing."""

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Missing required environment variables: {', '.join(missing)}"
        )
        self.missing = missing


class ProviderError(PipelineError):
    """A call to an external service failed."""

    def __init__(
        self,
        message: str,
        provider: str,
        operation: str,
        status_code: Optional[int] = None,
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.provider = provider
        self.operation = operation
        self.status_code = status_code
        self.is_retryable = is_retryable

    def __str__(self) -> str:
        base = f"{self.provider}.{self.operation}: {self.args[0]}"
        if self.status_code is not None:
            base += f" (HTTP {self.status_code})"
        return base


class RenderTimeout(ProviderError):
    """A render did not finish within the configured time."""

    pass


class CleanupError(ProviderError):
    """An asset could not be deleted."""

    pass
