"""Google Cloud Storage implementation of BlobStorePort."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, BinaryIO

from google.api_core import exceptions as google_exceptions

from processor.src.core.exceptions import BlobNotFoundError, StorageError

logger = logging.getLogger(__name__)


class GCSBlobStore:
    """BlobStorePort backed by Google Cloud Storage.

    Buckets are addressed per call, so one instance serves both the source
    and the output bucket.
    """

    def __init__(self, credentials_path: str = "", client: Any = None) -> None:
        if client is None:
            from google.cloud import storage as gcs_storage
            from google.oauth2 import service_account

            if credentials_path:
                creds = service_account.Credentials.from_service_account_file(
                    credentials_path,
                    scopes=["https://www.googleapis.com/auth/devstorage.read_write"],
                )
                client = gcs_storage.Client(credentials=creds)
            else:
                client = gcs_storage.Client()
        self._client = client
        logger.info("GCSBlobStore initialised")

    def _blob(self, bucket: str, key: str):
        return self._client.bucket(bucket).blob(key)

    # ── BlobStorePort implementation ──────────────────────────────

    async def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Open gs://bucket/key for streaming reads."""
        blob = self._blob(bucket, key)
        loop = asyncio.get_running_loop()
        try:
            exists = await loop.run_in_executor(None, blob.exists)
            if not exists:
                raise BlobNotFoundError(bucket, key)
            return await loop.run_in_executor(None, blob.open, "rb")
        except google_exceptions.NotFound as exc:
            raise BlobNotFoundError(bucket, key) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise StorageError(f"failed to get gs://{bucket}/{key}: {exc}") from exc

    async def put_object(self, bucket: str, key: str, body: BinaryIO) -> str:
        """Upload *body* and return the gs:// location."""
        blob = self._blob(bucket, key)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, blob.upload_from_file, body)
        except google_exceptions.GoogleAPIError as exc:
            raise StorageError(f"failed to put gs://{bucket}/{key}: {exc}") from exc
        location = f"gs://{bucket}/{key}"
        logger.info("Uploaded %s", location)
        return location

    async def delete_object(self, bucket: str, key: str) -> None:
        blob = self._blob(bucket, key)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, blob.delete)
        except google_exceptions.GoogleAPIError as exc:
            raise StorageError(f"failed to delete gs://{bucket}/{key}: {exc}") from exc
        logger.info("Deleted gs://%s/%s", bucket, key)
