"""Unit tests for PipelineOrchestrator.

Tests the per-chunk sequencing, failure isolation and cleanup without
hitting real APIs.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from reddit_shorts.pipeline import (
    AssetPoolExhausted,
    ChunkStatus,
    NoEligiblePosts,
    PipelineOrchestrator,
    Post,
    ProviderError,
    RenderTimeout,
    format_notification,
)
from reddit_shorts.providers import DeepgramTranscriber

TITLE = "My neighbour's cat"


def _sent(notifier) -> list[str]:
    return [c.args[0] for c in notifier.send.await_args_list]


@pytest.fixture
def build(
    settings,
    display,
    mock_post_source,
    mock_speech,
    mock_slicer,
    fake_store,
    mock_transcriber,
    mock_notifier,
    fake_renderer,
):
    """Factory building an orchestrator around the shared fakes."""

    def _build(script, **overrides) -> PipelineOrchestrator:
        parts = {
            "post_source": mock_post_source,
            "speech": mock_speech,
            "slicer": mock_slicer,
            "store": fake_store,
            "transcriber": mock_transcriber,
            "renderer": fake_renderer(script),
            "notifier": mock_notifier,
        }
        parts.update(overrides)
        return PipelineOrchestrator(settings=settings, display=display, **parts)

    return _build


class TestFormatNotification:
    """Tests for the part announcement."""

    def test_numbers_parts_from_one(self):
        assert format_notification("Title", 0, "https://v/1") == "Title Pt. 1,https://v/1"


class TestHappyPath:
    """Tests for a run where every chunk succeeds."""

    @pytest.mark.asyncio
    async def test_publishes_every_chunk_in_order(self, build, mock_notifier):
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        report = await orchestrator.run()

        assert _sent(mock_notifier) == [
            f"{TITLE} Pt. 1,https://v/1",
            f"{TITLE} Pt. 2,https://v/2",
            f"{TITLE} Pt. 3,https://v/3",
        ]
        assert report.published_count == 3
        assert report.posts[0].chunk_count == 3

    @pytest.mark.asyncio
    async def test_uses_configured_tts_and_chunking(self, build, mock_speech, mock_slicer, sample_post):
        await build(["https://v/1", "https://v/2", "https://v/3"]).run()

        mock_speech.synthesize.assert_awaited_once_with("tts-1", "onyx", sample_post.text)
        mock_slicer.slice.assert_awaited_once_with(b"narration", 59.0, normalize=False)

    @pytest.mark.asyncio
    async def test_each_chunk_gets_its_own_background_video(self, build, fake_store):
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        await orchestrator.run()

        videos = [scene.video_track for scene in orchestrator.renderer.submitted]
        assert videos == [
            "https://cdn.test/video/forest.mp4",
            "https://cdn.test/video/city.mp4",
            "https://cdn.test/video/beach.mp4",
        ]

    @pytest.mark.asyncio
    async def test_chunk_audio_uploaded_under_random_mp3_keys(self, build, fake_store):
        await build(["https://v/1", "https://v/2", "https://v/3"]).run()

        keys = [asset.key for asset in fake_store.uploads]
        assert all(asset.bucket == "audio" for asset in fake_store.uploads)
        assert all(key.endswith(".mp3") for key in keys)
        assert len(set(keys)) == 3

    @pytest.mark.asyncio
    async def test_captions_built_from_transcription(self, build):
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        await orchestrator.run()

        scene = orchestrator.renderer.submitted[0]
        assert [(c.start, c.end) for c in scene.captions] == [(0, 3), (3, 4)]
        assert scene.video_duration == 4


class TestFailureIsolation:
    """Tests for failures that only affect one chunk or one post."""

    @pytest.mark.asyncio
    async def test_failed_render_skips_only_its_notification(self, build, mock_notifier):
        orchestrator = build(["https://v/1", None, "https://v/3"])

        report = await orchestrator.run()

        assert _sent(mock_notifier) == [
            f"{TITLE} Pt. 1,https://v/1",
            f"{TITLE} Pt. 3,https://v/3",
        ]
        statuses = [o.status for o in report.posts[0].outcomes]
        assert statuses == [ChunkStatus.PUBLISHED, ChunkStatus.RENDER_FAILED, ChunkStatus.PUBLISHED]
        assert len(orchestrator.renderer.submitted) == 3

    @pytest.mark.asyncio
    async def test_render_timeout_is_chunk_local(self, build, mock_notifier):
        timeout = RenderTimeout("too slow", provider="json2video", operation="poll")
        orchestrator = build([timeout, "https://v/2", "https://v/3"])

        report = await orchestrator.run()

        assert report.posts[0].outcomes[0].status == ChunkStatus.RENDER_FAILED
        assert len(_sent(mock_notifier)) == 2

    @pytest.mark.asyncio
    async def test_transcription_failure_aborts_only_that_chunk(
        self, build, mock_transcriber, word_timings, mock_notifier
    ):
        words = word_timings((0, 1), (1, 2))
        mock_transcriber.transcribe.side_effect = [
            words,
            ProviderError("boom", provider="deepgram", operation="transcribe", status_code=500),
            words,
        ]
        orchestrator = build(["https://v/1", "https://v/3"])

        report = await orchestrator.run()

        outcomes = report.posts[0].outcomes
        assert [o.status for o in outcomes] == [
            ChunkStatus.PUBLISHED,
            ChunkStatus.ABORTED,
            ChunkStatus.PUBLISHED,
        ]
        assert "deepgram" in outcomes[1].error
        assert _sent(mock_notifier) == [
            f"{TITLE} Pt. 1,https://v/1",
            f"{TITLE} Pt. 3,https://v/3",
        ]

    @pytest.mark.asyncio
    async def test_malformed_transcription_aborts_only_that_chunk(self, build, mock_notifier):
        bodies = [
            {"word": "one", "start": 0.0, "end": 1.0},
            {"word": "two", "start": None, "end": 1.0},
            {"word": "three", "start": 0.0, "end": 1.0},
        ]

        def handler(request):
            word = bodies.pop(0)
            return httpx.Response(200, json={
                "results": {"channels": [{"alternatives": [{"words": [word]}]}]},
            })

        transcriber = DeepgramTranscriber(api_key="k", transport=httpx.MockTransport(handler))
        orchestrator = build(["https://v/1", "https://v/3"], transcriber=transcriber)

        report = await orchestrator.run()

        assert [o.status for o in report.posts[0].outcomes] == [
            ChunkStatus.PUBLISHED,
            ChunkStatus.ABORTED,
            ChunkStatus.PUBLISHED,
        ]
        assert _sent(mock_notifier) == [
            f"{TITLE} Pt. 1,https://v/1",
            f"{TITLE} Pt. 3,https://v/3",
        ]

    @pytest.mark.asyncio
    async def test_empty_transcription_aborts_chunk(self, build, mock_transcriber):
        mock_transcriber.transcribe.return_value = []
        orchestrator = build([])

        report = await orchestrator.run()

        assert all(o.status == ChunkStatus.ABORTED for o in report.posts[0].outcomes)
        assert orchestrator.renderer.submitted == []

    @pytest.mark.asyncio
    async def test_synthesis_failure_skips_post(
        self, build, settings, mock_post_source, mock_speech, mock_slicer, mock_notifier
    ):
        second = Post(title="Second story", text="Something odd happened. " * 5)
        mock_post_source.fetch.return_value = [
            Post(title=TITLE, text="It started on a Tuesday. " * 10),
            second,
        ]
        settings.source.post_count = 2
        mock_speech.synthesize.side_effect = [
            ProviderError("quota", provider="openai", operation="synthesize", status_code=429),
            b"narration",
        ]
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        report = await orchestrator.run()

        assert report.posts[0].error is not None
        assert report.posts[0].outcomes == []
        assert mock_slicer.slice.await_count == 1
        assert _sent(mock_notifier)[0] == "Second story Pt. 1,https://v/1"

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_publish(self, build, mock_notifier):
        mock_notifier.send.side_effect = ProviderError(
            "webhook gone", provider="discord", operation="send", status_code=404
        )
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        report = await orchestrator.run()

        outcomes = report.posts[0].outcomes
        assert all(o.status == ChunkStatus.PUBLISHED for o in outcomes)
        assert all("notification failed" in o.error for o in outcomes)


class TestRunLevelFailures:
    """Tests for conditions that stop the whole run."""

    @pytest.mark.asyncio
    async def test_pool_exhaustion_stops_run(self, build, fake_store, mock_notifier):
        """Test two videos for three chunks renders two and then fails."""
        del fake_store.objects[("video", "beach.mp4")]
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        with pytest.raises(AssetPoolExhausted):
            await orchestrator.run()

        assert len(orchestrator.renderer.submitted) == 2
        videos = {scene.video_track for scene in orchestrator.renderer.submitted}
        assert len(videos) == 2
        assert len(_sent(mock_notifier)) == 2

    @pytest.mark.asyncio
    async def test_no_eligible_posts(self, build, mock_post_source, mock_speech):
        mock_post_source.fetch.return_value = [Post(title="tiny", text="hi")]
        orchestrator = build([])

        with pytest.raises(NoEligiblePosts):
            await orchestrator.run()

        mock_speech.synthesize.assert_not_awaited()


class TestCleanup:
    """Tests for asset cleanup."""

    @pytest.mark.asyncio
    async def test_audio_deleted_after_every_chunk(self, build, fake_store, mock_transcriber, word_timings):
        mock_transcriber.transcribe.side_effect = [
            word_timings((0, 1)),
            ProviderError("boom", provider="deepgram", operation="transcribe"),
            word_timings((0, 1)),
        ]
        await build(["https://v/1", None]).run()

        uploaded = {("audio", asset.key) for asset in fake_store.uploads}
        assert len(uploaded) == 3
        assert uploaded <= set(fake_store.deleted)

    @pytest.mark.asyncio
    async def test_used_videos_deleted_by_default(self, build, fake_store):
        await build(["https://v/1", "https://v/2", "https://v/3"]).run()

        deleted_videos = [key for bucket, key in fake_store.deleted if bucket == "video"]
        assert deleted_videos == ["forest.mp4", "city.mp4", "beach.mp4"]

    @pytest.mark.asyncio
    async def test_used_videos_deleted_whatever_the_outcome(
        self, build, fake_store, mock_transcriber, word_timings
    ):
        mock_transcriber.transcribe.side_effect = [
            word_timings((0, 1)),
            word_timings((0, 1)),
            ProviderError("boom", provider="deepgram", operation="transcribe"),
        ]

        report = await build(["https://v/1", None]).run()

        assert [o.status for o in report.posts[0].outcomes] == [
            ChunkStatus.PUBLISHED,
            ChunkStatus.RENDER_FAILED,
            ChunkStatus.ABORTED,
        ]
        deleted_videos = [key for bucket, key in fake_store.deleted if bucket == "video"]
        assert deleted_videos == ["forest.mp4", "city.mp4", "beach.mp4"]

    @pytest.mark.asyncio
    async def test_video_deleted_after_render_timeout(self, build, fake_store):
        timeout = RenderTimeout("too slow", provider="json2video", operation="poll")

        await build([timeout, "https://v/2", "https://v/3"]).run()

        deleted_videos = [key for bucket, key in fake_store.deleted if bucket == "video"]
        assert deleted_videos == ["forest.mp4", "city.mp4", "beach.mp4"]

    @pytest.mark.asyncio
    async def test_recycled_videos_are_kept(self, build, settings, fake_store):
        settings.storage.recycle_video_assets = True

        await build(["https://v/1", "https://v/2", "https://v/3"]).run()

        assert not [key for bucket, key in fake_store.deleted if bucket == "video"]
        assert ("video", "forest.mp4") in fake_store.objects

    @pytest.mark.asyncio
    async def test_cleanup_failure_is_not_fatal(self, build, fake_store, mock_notifier):
        fake_store.fail_deletes = True

        report = await build(["https://v/1", "https://v/2", "https://v/3"]).run()

        assert report.published_count == 3
        assert len(_sent(mock_notifier)) == 3


class TestCancellation:
    """Tests for stopping a run between chunks."""

    @pytest.mark.asyncio
    async def test_cancel_stops_before_next_chunk(self, build, mock_notifier):
        cancel_event = asyncio.Event()

        async def _send(message: str) -> None:
            cancel_event.set()

        mock_notifier.send.side_effect = _send
        orchestrator = build(["https://v/1", "https://v/2", "https://v/3"])

        report = await orchestrator.run(cancel_event=cancel_event)

        assert report.cancelled
        assert len(report.posts[0].outcomes) == 1
        assert len(orchestrator.renderer.submitted) == 1

    @pytest.mark.asyncio
    async def test_cancel_before_start(self, build, mock_speech):
        cancel_event = asyncio.Event()
        cancel_event.set()

        report = await build([]).run(cancel_event=cancel_event)

        assert report.cancelled
        assert report.posts == []
        mock_speech.synthesize.assert_not_awaited()


class TestArchive:
    """Tests for keeping a text copy of narrated posts."""

    @pytest.mark.asyncio
    async def test_post_text_written_to_archive(self, build, settings, tmp_path, sample_post):
        settings.output.archive_dir = tmp_path / "archive"

        await build(["https://v/1", "https://v/2", "https://v/3"]).run()

        archived = list((tmp_path / "archive").glob("*.txt"))
        assert len(archived) == 1
        assert archived[0].read_text(encoding="utf-8") == sample_post.text

    @pytest.mark.asyncio
    async def test_titles_with_same_stem_get_separate_files(
        self, build, settings, tmp_path, mock_post_source
    ):
        settings.output.archive_dir = tmp_path / "archive"
        settings.source.post_count = 2
        settings.storage.recycle_video_assets = True
        mock_post_source.fetch.return_value = [
            Post(title="Is it haunted?", text="The first story. " * 5),
            Post(title="Is it haunted!", text="The second story. " * 5),
        ]

        await build(["https://v/1"] * 6).run()

        archive = tmp_path / "archive"
        assert sorted(p.name for p in archive.glob("*.txt")) == [
            "Is it haunted (2).txt",
            "Is it haunted.txt",
        ]
        assert (archive / "Is it haunted.txt").read_text(encoding="utf-8").startswith("The first")
        assert (archive / "Is it haunted (2).txt").read_text(encoding="utf-8").startswith("The second")
