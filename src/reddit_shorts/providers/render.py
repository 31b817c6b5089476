"""Video rendering with JSON2Video.

A scene is submitted as a one-scene movie, then its status is polled with
exponential backoff until it finishes, fails, or the timeout runs out.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

import httpx

from ..constants import (
    HTTP_TIMEOUT_SECONDS,
    JSON2VIDEO_BASE_URL,
    RENDER_POLL_BACKOFF,
    RENDER_POLL_INTERVAL_SECONDS,
    RENDER_POLL_MAX_INTERVAL_SECONDS,
    RENDER_QUALITY,
    RENDER_TIMEOUT_SECONDS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)
from ..pipeline.base import (
    IRenderer,
    ProviderError,
    RenderJob,
    RenderResult,
    RenderStatus,
    RenderTimeout,
    SceneDescription,
)
from .http import request_json

logger = logging.getLogger(__name__)

# JSON2Video movie status -> pipeline status
STATUS_MAP = {
    "pending": RenderStatus.PENDING,
    "queued": RenderStatus.PENDING,
    "running": RenderStatus.RUNNING,
    "preparing": RenderStatus.RUNNING,
    "rendering": RenderStatus.RUNNING,
    "done": RenderStatus.DONE,
    "error": RenderStatus.FAILED,
}


class Json2VideoRenderer(IRenderer):
    """Render scenes as vertical movies through the JSON2Video API."""

    def __init__(
        self,
        api_key: str,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        quality: str = RENDER_QUALITY,
        poll_interval: float = RENDER_POLL_INTERVAL_SECONDS,
        backoff: float = RENDER_POLL_BACKOFF,
        max_poll_interval: float = RENDER_POLL_MAX_INTERVAL_SECONDS,
        timeout: float = RENDER_TIMEOUT_SECONDS,
        base_url: str = JSON2VIDEO_BASE_URL,
        request_timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the renderer.

        Args:
            api_key: JSON2Video API key.
            width: Movie width in pixels.
            height: Movie height in pixels.
            quality: Render quality (low, medium, high).
            poll_interval: First delay between status checks.
            backoff: Multiplier applied to the delay after each check.
            max_poll_interval: Ceiling for the delay between checks.
            timeout: Seconds of waiting after which the render is abandoned.
            base_url: API base URL.
            request_timeout: Timeout for each HTTP request.
            transport: Optional transport, used to stub the network in tests.
        """
        super().__init__()
        self.api_key = api_key
        self.width = width
        self.height = height
        self.quality = quality
        self.poll_interval = poll_interval
        self.backoff = backoff
        self.max_poll_interval = max_poll_interval
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "Json2VideoRenderer":
        settings.require("json2video_api_key")
        return cls(
            api_key=settings.json2video_api_key,
            width=settings.output.width,
            height=settings.output.height,
            quality=settings.output.quality,
            poll_interval=settings.render.interval_seconds,
            backoff=settings.render.backoff,
            max_poll_interval=settings.render.max_interval_seconds,
            timeout=settings.render.timeout_seconds,
            request_timeout=settings.http_timeout_seconds,
        )

    def build_movie(self, scene: SceneDescription) -> dict:
        """Wrap a scene in a one-scene movie payload."""
        return {
            "resolution": "custom",
            "width": self.width,
            "height": self.height,
            "quality": self.quality,
            "scenes": [{"elements": scene.elements}],
        }

    async def _request(self, method: str, operation: str, **kwargs) -> dict:
        result = await request_json(
            method,
            f"{self.base_url}/movies",
            provider="json2video",
            operation=operation,
            headers={"x-api-key": self.api_key},
            timeout=self.request_timeout,
            transport=self._transport,
            **kwargs,
        )
        if result.get("success") is False:
            raise ProviderError(
                result.get("message") or "Request was not successful",
                provider="json2video",
                operation=operation,
            )
        return result

    async def submit(self, scene: SceneDescription) -> RenderJob:
        """Submit a scene for rendering.

        Raises:
            ProviderError: If the movie is rejected.
        """
        result = await self._request("POST", "submit", json=self.build_movie(scene))
        project = result.get("project")
        if not project:
            raise ProviderError(
                "Submit response has no project id",
                provider="json2video",
                operation="submit",
            )
        logger.info("Render submitted: project %s", project)
        return RenderJob(project_id=project)

    async def status(self, job: RenderJob) -> RenderResult:
        """Fetch one status snapshot."""
        result = await self._request("GET", "status", params={"project": job.project_id})
        movie = result.get("movie") or {}
        raw_status = str(movie.get("status", "pending")).lower()
        return RenderResult(
            status=STATUS_MAP.get(raw_status, RenderStatus.RUNNING),
            media_url=movie.get("url") or None,
            message=movie.get("message") or "",
        )

    async def poll(self, job: RenderJob) -> AsyncIterator[RenderResult]:
        """Yield status snapshots until the render reaches a terminal status.

        Transient status-check failures are skipped and retried after the
        next delay.

        Raises:
            RenderTimeout: If the render is still running when the timeout
                has elapsed.
            ProviderError: If a status check fails permanently.
        """
        elapsed = 0.0
        delay = self.poll_interval

        while True:
            try:
                snapshot = await self.status(job)
            except ProviderError as e:
                if not e.is_retryable:
                    raise
                logger.warning("Status check for %s failed, retrying: %s", job.project_id, e)
            else:
                yield snapshot
                if snapshot.is_terminal:
                    return

            if elapsed >= self.timeout:
                raise RenderTimeout(
                    f"Render {job.project_id} not finished after {elapsed:.0f}s",
                    provider="json2video",
                    operation="poll",
                    is_retryable=True,
                )

            wait = min(delay, self.max_poll_interval, self.timeout - elapsed)
            await asyncio.sleep(wait)
            elapsed += wait
            delay = min(delay * self.backoff, self.max_poll_interval)
