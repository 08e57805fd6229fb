"""Port for object storage (get/put/delete by bucket and key)."""
from __future__ import annotations
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class BlobStorePort(Protocol):
    async def get_object(self, bucket: str, key: str) -> BinaryIO: ...
    async def put_object(self, bucket: str, key: str, body: BinaryIO) -> str: ...
    async def delete_object(self, bucket: str, key: str) -> None: ...
