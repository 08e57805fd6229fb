"""Port for consuming work messages from a queue."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable
if TYPE_CHECKING:
    from processor.src.core.value_objects.queue_message import QueueMessage


@runtime_checkable
class MessageQueuePort(Protocol):
    async def receive_messages(self, max_messages: int = 1, wait_time_seconds: int = 10, visibility_timeout: int = 300) -> list[QueueMessage]: ...
    async def delete_message(self, receipt_handle: str) -> None: ...
