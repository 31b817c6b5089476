"""Shorts pipeline orchestrator.

Coordinates one run:
1. Fetch posts from the configured subreddit and pick the ones to narrate
2. Narrate each post and slice the narration into chunks
3. For every chunk, in order:
   upload audio -> transcribe -> group captions -> compose -> render -> notify
   and always clean up the chunk's audio and background video afterwards

Chunks run strictly one after another. The background video pool is drained
one video per chunk and the "Pt. N" notifications follow chunk order.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..constants import AUDIO_CONTENT_TYPE
from .asset_pool import VideoAssetPool
from .base import (
    AudioChunk,
    ChunkOutcome,
    ChunkStatus,
    CleanupError,
    IAssetStore,
    IAudioSlicer,
    INotifier,
    InvalidInput,
    IPostSource,
    IRenderer,
    ISpeechSynthesizer,
    ITranscriber,
    PipelineComponent,
    Post,
    PostReport,
    ProviderError,
    RenderResult,
    RenderStatus,
    RenderTimeout,
    RunReport,
    StoredAsset,
)
from .cli_display import PipelineDisplay
from .composer import SceneComposer
from .post_selector import select_posts
from .segmenter import TimeSegmenter

if TYPE_CHECKING:
    from ..config import Settings


def format_notification(title: str, index: int, url: str) -> str:
    """Build the message announcing one part of a post.

    Args:
        title: Post title.
        index: Zero-based chunk index.
        url: URL of the rendered short.
    """
    return f"{title} Pt. {index + 1},{url}"


class PipelineOrchestrator:
    """Runs the whole Reddit-to-shorts pipeline.

    Usage:
        orchestrator = PipelineOrchestrator.from_settings(Settings())
        try:
            report = await orchestrator.run()
        finally:
            await orchestrator.close()
    """

    def __init__(
        self,
        post_source: IPostSource,
        speech: ISpeechSynthesizer,
        slicer: IAudioSlicer,
        store: IAssetStore,
        transcriber: ITranscriber,
        renderer: IRenderer,
        notifier: INotifier,
        settings: "Settings",
        display: Optional[PipelineDisplay] = None,
    ):
        """Initialize the orchestrator.

        Args:
            post_source: Where posts come from.
            speech: Text-to-speech service.
            slicer: Splits narration into chunks.
            store: Holds chunk audio and background videos.
            transcriber: Produces word timings for a chunk.
            renderer: Renders composed scenes.
            notifier: Announces rendered shorts.
            settings: Run settings.
            display: CLI display. A quiet display is created when omitted.
        """
        self.post_source = post_source
        self.speech = speech
        self.slicer = slicer
        self.store = store
        self.transcriber = transcriber
        self.renderer = renderer
        self.notifier = notifier
        self.settings = settings
        self.display = display or PipelineDisplay(verbose=False)
        self.logger = logging.getLogger("reddit_shorts.pipeline")

        self.segmenter = TimeSegmenter(settings.captions.max_span_seconds)
        self.composer = SceneComposer(settings.captions.style)

        for component in self._components:
            component.set_display(self.display)

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        display: Optional[PipelineDisplay] = None,
    ) -> "PipelineOrchestrator":
        """Build an orchestrator wired to the real providers.

        Raises:
            ConfigurationError: If any provider credential is missing.
        """
        from ..providers import (
            CloudinaryAssetStore,
            DeepgramTranscriber,
            DiscordNotifier,
            Json2VideoRenderer,
            OpenAISpeechSynthesizer,
            PydubAudioSlicer,
            RedditPostSource,
        )

        return cls(
            post_source=RedditPostSource.from_settings(settings),
            speech=OpenAISpeechSynthesizer.from_settings(settings),
            slicer=PydubAudioSlicer.from_settings(settings),
            store=CloudinaryAssetStore.from_settings(settings),
            transcriber=DeepgramTranscriber.from_settings(settings),
            renderer=Json2VideoRenderer.from_settings(settings),
            notifier=DiscordNotifier.from_settings(settings),
            settings=settings,
            display=display,
        )

    @property
    def _components(self) -> list[PipelineComponent]:
        return [
            self.post_source,
            self.speech,
            self.slicer,
            self.store,
            self.transcriber,
            self.renderer,
            self.notifier,
        ]

    async def close(self) -> None:
        """Close every provider client."""
        for component in self._components:
            await component.close()

    # =========================================================================
    # Run
    # =========================================================================

    async def select(self) -> list[Post]:
        """Fetch posts and pick the ones this run narrates.

        Raises:
            NoEligiblePosts: If too few posts pass the length filter.
        """
        source = self.settings.source
        posts = await self.post_source.fetch(
            subreddit=source.subreddit,
            sort=source.sort,
            time_window=source.time_window,
            limit=source.limit,
        )
        self.display.info(f"Fetched {len(posts)} post(s) from r/{source.subreddit}")

        selected = select_posts(
            posts,
            min_length=source.min_length,
            max_length=source.max_length,
            count=source.post_count,
            reverse=source.reverse,
        )
        for post in selected:
            self.display.detail(f"Selected: {post.title} ({len(post.text)} chars)")
        return selected

    async def run(self, cancel_event: Optional[asyncio.Event] = None) -> RunReport:
        """Run the pipeline over the selected posts.

        Args:
            cancel_event: When set, the run stops before the next post or
                chunk starts.

        Returns:
            Report of every chunk's outcome.

        Raises:
            NoEligiblePosts: If too few posts pass the length filter.
            AssetPoolExhausted: If a chunk finds no background video left.
        """
        source = self.settings.source
        self.display.start_run(source.subreddit, source.sort, source.post_count)
        report = RunReport()

        try:
            posts = await self.select()

            for number, post in enumerate(posts, start=1):
                if self._cancelled(cancel_event):
                    report.cancelled = True
                    break

                self.display.start_post(post.title, number, len(posts))
                post_report = await self.process_post(post, cancel_event)
                report.posts.append(post_report)

                if self._cancelled(cancel_event):
                    report.cancelled = True
                    break
        except Exception:
            self.display.end_run(report, success=False)
            raise

        self.display.end_run(report, success=True)
        return report

    async def process_post(
        self,
        post: Post,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> PostReport:
        """Narrate one post and publish every chunk of it.

        A synthesis failure skips the post; chunk failures skip the chunk.

        Raises:
            AssetPoolExhausted: If a chunk finds no background video left.
        """
        post_report = PostReport(post=post)
        tts = self.settings.tts
        audio_settings = self.settings.audio

        self._archive(post)

        try:
            self.display.step("Synthesizing narration", post.title)
            audio = await self.speech.synthesize(tts.model, tts.voice, post.text)
        except (ProviderError, InvalidInput) as e:
            self.display.error(f"Synthesis failed, skipping post: {e}", post.title)
            self.logger.error("Synthesis failed for %r: %s", post.title, e)
            post_report.error = str(e)
            return post_report

        storage = self.settings.storage
        try:
            chunks = await self.slicer.slice(
                audio,
                audio_settings.max_chunk_seconds,
                normalize=audio_settings.normalize,
            )
            pool = await VideoAssetPool.from_store(
                self.store,
                storage.video_bucket,
                storage.video_extensions,
            )
        except (ProviderError, InvalidInput) as e:
            self.display.error(f"Could not prepare chunks, skipping post: {e}", post.title)
            self.logger.error("Chunk preparation failed for %r: %s", post.title, e)
            post_report.error = str(e)
            return post_report

        post_report.chunk_count = len(chunks)
        self.display.info(f"Narration sliced into {len(chunks)} chunk(s)", post.title)
        self.display.detail(f"Background pool holds {len(pool)} video(s)", post.title)

        for chunk in chunks:
            if self._cancelled(cancel_event):
                self.display.warning("Cancelled, remaining chunks skipped", post.title)
                break

            self.display.start_chunk(chunk.index, len(chunks), chunk.duration_seconds)
            # Exhaustion ends the run
            video = pool.pop()
            outcome = await self.process_chunk(post, chunk, video)
            post_report.outcomes.append(outcome)

        return post_report

    async def process_chunk(
        self,
        post: Post,
        chunk: AudioChunk,
        video: StoredAsset,
    ) -> ChunkOutcome:
        """Turn one narration chunk into a published short.

        Provider failures and invalid data only abort this chunk. The
        uploaded audio, and the background video unless videos are
        recycled, are deleted whatever happens.
        """
        storage = self.settings.storage
        label = f"{post.title} [{chunk.index + 1}]"
        audio_asset: Optional[StoredAsset] = None

        try:
            key = f"{uuid.uuid4().hex}.{chunk.format}"
            audio_asset = await self.store.upload(
                storage.audio_bucket,
                key,
                chunk.data,
                AUDIO_CONTENT_TYPE,
            )
            self.display.detail(f"Audio uploaded: {audio_asset.url}", label)

            words = await self.transcriber.transcribe(audio_asset.url)
            self.display.detail(f"Transcribed {len(words)} word(s)", label)

            captions = self.segmenter.segment(words)
            scene = self.composer.compose(audio_asset.url, video.url, captions)
            self.display.detail(
                f"Scene composed: {len(captions)} caption(s), {scene.video_duration:.1f}s",
                label,
            )

            job = await self.renderer.submit(scene)
            self.display.info(f"Render submitted: {job.project_id}", label)
            result = await self.renderer.await_completion(job, on_progress=self._render_progress(label))

            return await self._publish(post, chunk, result, label)

        except RenderTimeout as e:
            self.display.warning(f"Render timed out: {e}", label)
            self.logger.warning("Render timed out for %s: %s", label, e)
            return ChunkOutcome(index=chunk.index, status=ChunkStatus.RENDER_FAILED, error=str(e))
        except (ProviderError, InvalidInput) as e:
            self.display.error(f"Chunk aborted: {e}", label)
            self.logger.error("Chunk %s aborted: %s", label, e)
            return ChunkOutcome(index=chunk.index, status=ChunkStatus.ABORTED, error=str(e))
        finally:
            if audio_asset is not None:
                await self._cleanup(audio_asset.bucket, audio_asset.key, label)
            if not storage.recycle_video_assets:
                await self._cleanup(video.bucket, video.key, label)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _publish(
        self,
        post: Post,
        chunk: AudioChunk,
        result: RenderResult,
        label: str,
    ) -> ChunkOutcome:
        """Announce a finished render, or record why there is nothing to announce."""
        if result.status != RenderStatus.DONE or not result.media_url:
            reason = result.message or f"render ended with status {result.status.value}"
            self.display.warning(f"Render failed: {reason}", label)
            return ChunkOutcome(index=chunk.index, status=ChunkStatus.RENDER_FAILED, error=reason)

        self.display.success(f"Rendered: {result.media_url}", label)
        outcome = ChunkOutcome(
            index=chunk.index,
            status=ChunkStatus.PUBLISHED,
            media_url=result.media_url,
        )

        try:
            await self.notifier.send(format_notification(post.title, chunk.index, result.media_url))
            self.display.detail("Notification sent", label)
        except ProviderError as e:
            self.display.warning(f"Notification failed: {e}", label)
            outcome.error = f"notification failed: {e}"

        return outcome

    async def _cleanup(self, bucket: str, key: str, label: str) -> None:
        """Delete an asset, logging rather than raising on failure."""
        try:
            await self.store.delete(bucket, key)
            self.display.detail(f"Deleted {bucket}/{key}", label)
        except CleanupError as e:
            self.display.warning(f"Cleanup failed for {bucket}/{key}: {e}", label)
            self.logger.warning("Cleanup failed for %s/%s: %s", bucket, key, e)

    def _render_progress(self, label: str):
        async def _on_progress(snapshot: RenderResult) -> None:
            message = f" - {snapshot.message}" if snapshot.message else ""
            self.display.detail(f"Render {snapshot.status.value}{message}", label)

        return _on_progress

    def _archive(self, post: Post) -> None:
        """Write the post text to the archive directory, if one is set."""
        archive_dir: Optional[Path] = self.settings.output.archive_dir
        if archive_dir is None:
            return
        archive_dir.mkdir(parents=True, exist_ok=True)
        stem = re.sub(r"[^\w\- ]", "", post.title).strip()[:80] or "untitled"
        path = archive_dir / f"{stem}.txt"
        suffix = 2
        while path.exists():
            path = archive_dir / f"{stem} ({suffix}).txt"
            suffix += 1
        path.write_text(post.text, encoding="utf-8")
        self.display.detail(f"Post archived to {path}", post.title)

    @staticmethod
    def _cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
        return cancel_event is not None and cancel_event.is_set()
