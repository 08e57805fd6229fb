"""Amazon S3 implementation of BlobStorePort."""
from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, BinaryIO

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

from processor.src.core.exceptions import BlobNotFoundError, StorageError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "404", "NotFound"}


class S3BlobStore:
    """BlobStorePort backed by S3 through a boto3 client.

    boto3 calls are blocking, so each one runs in the default executor.
    """

    def __init__(
        self,
        region_name: str = "us-east-1",
        endpoint_url: str = "",
        client: Any = None,
    ) -> None:
        if client is None:
            import boto3

            client = boto3.client(
                "s3", region_name=region_name, endpoint_url=endpoint_url or None
            )
        self._client = client
        logger.info("S3BlobStore initialised (region=%s)", region_name)

    async def _call(self, fn, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, **kwargs))

    # ── BlobStorePort implementation ──────────────────────────────

    async def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Return the streaming body of s3://bucket/key."""
        try:
            response = await self._call(self._client.get_object, Bucket=bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                raise BlobNotFoundError(bucket, key) from exc
            raise StorageError(f"failed to get s3://{bucket}/{key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"failed to get s3://{bucket}/{key}: {exc}") from exc
        logger.debug("Opened s3://%s/%s", bucket, key)
        return response["Body"]

    async def put_object(self, bucket: str, key: str, body: BinaryIO) -> str:
        """Upload *body* (multipart when large) and return the s3:// location."""
        try:
            await self._call(self._client.upload_fileobj, Fileobj=body, Bucket=bucket, Key=key)
        except (Boto3Error, BotoCoreError, ClientError) as exc:
            raise StorageError(f"failed to put s3://{bucket}/{key}: {exc}") from exc
        location = f"s3://{bucket}/{key}"
        logger.info("Uploaded %s", location)
        return location

    async def delete_object(self, bucket: str, key: str) -> None:
        try:
            await self._call(self._client.delete_object, Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"failed to delete s3://{bucket}/{key}: {exc}") from exc
        logger.info("Deleted s3://%s/%s", bucket, key)
