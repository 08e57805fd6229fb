"""Local filesystem implementation of BlobStorePort."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from processor.src.core.exceptions import BlobNotFoundError, StorageError

logger = logging.getLogger(__name__)


def _write_stream(body: BinaryIO, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "wb") as out:
        shutil.copyfileobj(body, out)


class LocalBlobStore:
    """Implements :class:`BlobStorePort` using the local filesystem.

    Each bucket is a directory under *base_dir*; keys may contain slashes.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self._base = Path(base_dir).resolve()
        self._base.mkdir(parents=True, exist_ok=True)
        logger.info("LocalBlobStore initialised at %s", self._base)

    # -- helpers ---------------------------------------------------------------

    def _resolve(self, bucket: str, key: str) -> Path:
        """Return an absolute path inside the bucket's directory."""
        bucket_dir = (self._base / bucket).resolve()
        if self._base not in bucket_dir.parents:
            raise StorageError(f"bucket path escapes storage root: {bucket}")
        target = (bucket_dir / key).resolve()
        if bucket_dir not in target.parents:
            raise StorageError(f"object path escapes bucket: {bucket}/{key}")
        return target

    # -- BlobStorePort implementation ------------------------------------------

    async def get_object(self, bucket: str, key: str) -> BinaryIO:
        target = self._resolve(bucket, key)
        if not target.is_file():
            raise BlobNotFoundError(bucket, key)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, open, target, "rb")
        except OSError as exc:
            raise StorageError(f"failed to open {target}: {exc}") from exc

    async def put_object(self, bucket: str, key: str, body: BinaryIO) -> str:
        """Write *body* to disk and return the absolute path as a string."""
        target = self._resolve(bucket, key)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _write_stream, body, target)
        except OSError as exc:
            raise StorageError(f"failed to write {target}: {exc}") from exc
        logger.debug("Saved object %s", target)
        return str(target)

    async def delete_object(self, bucket: str, key: str) -> None:
        target = self._resolve(bucket, key)
        if not target.exists():
            logger.warning("Object to delete does not exist: %s", target)
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, target.unlink)
        except OSError as exc:
            raise StorageError(f"failed to delete {target}: {exc}") from exc
        logger.debug("Deleted object %s", target)

    def list_objects(self, bucket: str) -> list[str]:
        """Return every key stored in *bucket*, sorted."""
        bucket_dir = self._base / bucket
        if not bucket_dir.exists():
            return []
        return sorted(
            p.relative_to(bucket_dir).as_posix() for p in bucket_dir.rglob("*") if p.is_file()
        )
