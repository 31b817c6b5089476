"""Asset storage on Cloudinary.

Buckets map to Cloudinary folders and keys to public ids inside them, so
``video/forest.mp4`` is the public id ``video/forest`` in ``mp4`` format.
Audio and video both live under Cloudinary's ``video`` resource type.
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import PurePosixPath

import cloudinary
import cloudinary.api
import cloudinary.uploader
import cloudinary.utils
from cloudinary.exceptions import Error as CloudinaryError

from ..pipeline.base import CleanupError, IAssetStore, ProviderError, StoredAsset

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "video"
LIST_PAGE_SIZE = 500


class CloudinaryAssetStore(IAssetStore):
    """Name-addressed asset store backed by Cloudinary.

    Cloudinary provides a generous free tier and serves every upload at a
    public URL, which the transcription and rendering services fetch from.
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        """Initialize the store.

        Args:
            cloud_name: Cloudinary cloud name.
            api_key: Cloudinary API key.
            api_secret: Cloudinary API secret.
        """
        super().__init__()
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    @classmethod
    def from_settings(cls, settings) -> "CloudinaryAssetStore":
        from ..config import CLOUDINARY_FIELDS

        settings.require(*CLOUDINARY_FIELDS)
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )

    @staticmethod
    def _public_id(bucket: str, key: str) -> str:
        return f"{bucket}/{PurePosixPath(key).stem}"

    @staticmethod
    def _key(bucket: str, resource: dict) -> str:
        name = resource["public_id"][len(bucket) + 1:]
        fmt = resource.get("format")
        return f"{name}.{fmt}" if fmt else name

    async def _run(self, func, *args, **kwargs):
        """Run a blocking SDK call in the default executor."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, lambda: func(*args, **kwargs))

    def public_url(self, bucket: str, key: str) -> str:
        suffix = PurePosixPath(key).suffix.lstrip(".")
        url, _options = cloudinary.utils.cloudinary_url(
            self._public_id(bucket, key),
            resource_type=RESOURCE_TYPE,
            format=suffix or None,
            secure=True,
        )
        return url

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> StoredAsset:
        """Upload bytes under ``bucket/key``.

        Raises:
            ProviderError: If Cloudinary rejects the upload.
        """
        public_id = self._public_id(bucket, key)
        try:
            result = await self._run(
                cloudinary.uploader.upload,
                io.BytesIO(data),
                public_id=public_id,
                resource_type=RESOURCE_TYPE,
                overwrite=True,
            )
        except CloudinaryError as e:
            raise ProviderError(str(e), provider="cloudinary", operation="upload") from e

        logger.debug("Uploaded %s (%s, %d bytes)", public_id, content_type, len(data))
        return StoredAsset(bucket=bucket, key=key, url=result["secure_url"])

    async def delete(self, bucket: str, key: str) -> None:
        """Delete ``bucket/key``. A missing object counts as deleted.

        Raises:
            CleanupError: If Cloudinary refuses the deletion.
        """
        public_id = self._public_id(bucket, key)
        try:
            result = await self._run(
                cloudinary.uploader.destroy,
                public_id,
                resource_type=RESOURCE_TYPE,
                invalidate=True,
            )
        except CloudinaryError as e:
            raise CleanupError(str(e), provider="cloudinary", operation="delete") from e

        status = result.get("result")
        if status not in ("ok", "not found"):
            raise CleanupError(
                f"Unexpected destroy result for {public_id}: {status}",
                provider="cloudinary",
                operation="delete",
            )
        logger.debug("Deleted %s (%s)", public_id, status)

    async def list(self, bucket: str) -> list[StoredAsset]:
        """List every object in a bucket, following pagination.

        Raises:
            ProviderError: If the listing fails.
        """
        assets: list[StoredAsset] = []
        next_cursor = None
        while True:
            options = {
                "type": "upload",
                "resource_type": RESOURCE_TYPE,
                "prefix": f"{bucket}/",
                "max_results": LIST_PAGE_SIZE,
            }
            if next_cursor:
                options["next_cursor"] = next_cursor
            try:
                page = await self._run(cloudinary.api.resources, **options)
            except CloudinaryError as e:
                raise ProviderError(str(e), provider="cloudinary", operation="list") from e

            for resource in page.get("resources", []):
                assets.append(StoredAsset(
                    bucket=bucket,
                    key=self._key(bucket, resource),
                    url=resource["secure_url"],
                ))

            next_cursor = page.get("next_cursor")
            if not next_cursor:
                break

        self.log_detail(f"{bucket}: {len(assets)} object(s)")
        return assets
