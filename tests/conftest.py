"""Shared test fixtures and configuration.

Provides settings, a quiet display and in-memory fakes for every pipeline
collaborator, so orchestration tests never touch the network.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import AsyncIterator, Optional, Union
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from reddit_shorts.config import Settings
from reddit_shorts.pipeline import (
    AudioChunk,
    CleanupError,
    IAssetStore,
    IAudioSlicer,
    INotifier,
    IPostSource,
    IRenderer,
    ISpeechSynthesizer,
    ITranscriber,
    PipelineDisplay,
    Post,
    RenderJob,
    RenderResult,
    RenderStatus,
    SceneDescription,
    StoredAsset,
    WordTiming,
)


# =============================================================================
# Fakes
# =============================================================================


class FakeAssetStore(IAssetStore):
    """In-memory asset store that records every call."""

    def __init__(self, videos: Optional[list[str]] = None):
        super().__init__()
        self.objects: dict[tuple[str, str], bytes] = {}
        self.uploads: list[StoredAsset] = []
        self.deleted: list[tuple[str, str]] = []
        self.fail_deletes = False
        for key in videos or []:
            self.objects[("video", key)] = b"video"

    def public_url(self, bucket: str, key: str) -> str:
        return f"https://cdn.test/{bucket}/{key}"

    async def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> StoredAsset:
        self.objects[(bucket, key)] = data
        asset = StoredAsset(bucket=bucket, key=key, url=self.public_url(bucket, key))
        self.uploads.append(asset)
        return asset

    async def delete(self, bucket: str, key: str) -> None:
        self.deleted.append((bucket, key))
        if self.fail_deletes:
            raise CleanupError("delete refused", provider="fake", operation="delete")
        self.objects.pop((bucket, key), None)

    async def list(self, bucket: str) -> list[StoredAsset]:
        return [
            StoredAsset(bucket=b, key=k, url=self.public_url(b, k))
            for (b, k) in self.objects
            if b == bucket
        ]


class FakeRenderer(IRenderer):
    """Renderer whose outcome per submission is scripted.

    Each script entry is a media URL (render succeeds), None (render
    fails) or an exception raised while polling.
    """

    def __init__(self, script: list[Union[str, None, Exception]]):
        super().__init__()
        self.script = list(script)
        self.submitted: list[SceneDescription] = []

    async def submit(self, scene: SceneDescription) -> RenderJob:
        self.submitted.append(scene)
        return RenderJob(project_id=f"project-{len(self.submitted)}")

    async def poll(self, job: RenderJob) -> AsyncIterator[RenderResult]:
        outcome = self.script.pop(0)
        yield RenderResult(status=RenderStatus.RUNNING)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            yield RenderResult(status=RenderStatus.FAILED, message="render error")
        else:
            yield RenderResult(status=RenderStatus.DONE, media_url=outcome)


def make_words(*spans: tuple[float, float]) -> list[WordTiming]:
    """Build word timings named w0, w1, ... from (start, end) pairs."""
    return [WordTiming(word=f"w{i}", start=s, end=e) for i, (s, e) in enumerate(spans)]


def make_chunks(count: int) -> list[AudioChunk]:
    return [
        AudioChunk(index=i, data=f"chunk-{i}".encode(), duration_seconds=59.0)
        for i in range(count)
    ]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with defaults only, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        source={"subreddit": "stories", "min_length": 10, "max_length": 1000, "post_count": 1},
    )


@pytest.fixture
def display(tmp_path: Path) -> PipelineDisplay:
    """Display writing to an in-memory console and a temporary log dir."""
    return PipelineDisplay(
        console=Console(file=io.StringIO(), width=120),
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def sample_post() -> Post:
    return Post(title="My neighbour's cat", text="It started on a Tuesday. " * 10)


@pytest.fixture
def mock_post_source(sample_post: Post) -> AsyncMock:
    """Post source returning one eligible post."""
    source = AsyncMock(spec=IPostSource)
    source.fetch.return_value = [sample_post]
    return source


@pytest.fixture
def mock_speech() -> AsyncMock:
    speech = AsyncMock(spec=ISpeechSynthesizer)
    speech.synthesize.return_value = b"narration"
    return speech


@pytest.fixture
def mock_slicer() -> AsyncMock:
    """Slicer producing three chunks."""
    slicer = AsyncMock(spec=IAudioSlicer)
    slicer.slice.return_value = make_chunks(3)
    return slicer


@pytest.fixture
def mock_transcriber() -> AsyncMock:
    transcriber = AsyncMock(spec=ITranscriber)
    transcriber.transcribe.return_value = make_words((0, 1), (1, 2), (2, 3), (3, 4))
    return transcriber


@pytest.fixture
def mock_notifier() -> AsyncMock:
    return AsyncMock(spec=INotifier)


@pytest.fixture
def word_timings():
    """Factory building word timings from (start, end) pairs."""
    return make_words


@pytest.fixture
def fake_store() -> FakeAssetStore:
    """Store holding three background videos and one non-video object."""
    store = FakeAssetStore(videos=["forest.mp4", "city.mp4", "beach.mp4"])
    store.objects[("video", "notes.txt")] = b"not a video"
    return store


@pytest.fixture
def fake_renderer():
    """Factory building a renderer from a script of outcomes."""
    return FakeRenderer
