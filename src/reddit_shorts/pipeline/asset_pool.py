"""Background video pool.

The pool is filled once from the asset store and then drained one video per
chunk. It is never refilled during a run, so running out is a hard stop.
"""

from collections import deque
from typing import Iterable, Iterator, Optional

from .base import AssetPoolExhausted, IAssetStore, StoredAsset


def has_extension(key: str, extensions: Iterable[str]) -> bool:
    """Check a storage key against a set of lowercase dotted extensions."""
    lowered = key.lower()
    return any(lowered.endswith(ext) for ext in extensions)


class VideoAssetPool:
    """Ordered, single-consumer queue of background videos."""

    def __init__(self, assets: Iterable[StoredAsset]):
        self._assets: deque[StoredAsset] = deque(assets)

    @classmethod
    async def from_store(
        cls,
        store: IAssetStore,
        bucket: str,
        extensions: Optional[Iterable[str]] = None,
    ) -> "VideoAssetPool":
        """Build a pool from every video currently in a bucket.

        Args:
            store: Asset store to list.
            bucket: Bucket holding background footage.
            extensions: Accepted file extensions. All objects when None.

        Returns:
            Pool in listing order.
        """
        assets = await store.list(bucket)
        if extensions is not None:
            allowed = tuple(ext.lower() for ext in extensions)
            assets = [asset for asset in assets if has_extension(asset.key, allowed)]
        return cls(assets)

    def pop(self) -> StoredAsset:
        """Take the next video out of the pool.

        Raises:
            AssetPoolExhausted: If no video is left.
        """
        if not self._assets:
            raise AssetPoolExhausted("No background videos left in the pool")
        return self._assets.popleft()

    def __iter__(self) -> Iterator[StoredAsset]:
        """Iterate over the remaining videos without consuming them."""
        return iter(list(self._assets))

    def __len__(self) -> int:
        return len(self._assets)

    def __bool__(self) -> bool:
        return bool(self._assets)
