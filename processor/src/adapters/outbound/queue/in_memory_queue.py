"""In-process implementation of MessageQueuePort and NotificationPort.

Keeps messages in the current event loop so the worker can run without a
broker. Visibility timeouts are not simulated: a received message stays in
flight until it is deleted.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import deque
from typing import Optional

from processor.src.core.exceptions import QueueError
from processor.src.core.value_objects.queue_message import QueueMessage

logger = logging.getLogger(__name__)


class InMemoryMessageQueue:
    """Implements :class:`MessageQueuePort` and :class:`NotificationPort`.

    Messages sent through :meth:`send_message` are recorded per destination
    and can be read back with :meth:`sent_messages`.
    """

    def __init__(self) -> None:
        self._pending: deque[QueueMessage] = deque()
        self._in_flight: dict[str, QueueMessage] = {}
        self._sent: list[tuple[str, str]] = []
        self._arrived = asyncio.Event()

    # -- producer side ---------------------------------------------------------

    def enqueue(self, body: str) -> str:
        """Add a work message and return its id."""
        message = QueueMessage(
            message_id=str(uuid.uuid4()),
            receipt_handle=str(uuid.uuid4()),
            body=body,
        )
        self._pending.append(message)
        self._arrived.set()
        logger.debug("Enqueued in-memory message %s", message.message_id)
        return message.message_id

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def sent_messages(self, destination: Optional[str] = None) -> list[str]:
        return [body for dest, body in self._sent if destination is None or dest == destination]

    # -- MessageQueuePort implementation ---------------------------------------

    async def receive_messages(
        self,
        max_messages: int = 1,
        wait_time_seconds: int = 10,
        visibility_timeout: int = 300,
    ) -> list[QueueMessage]:
        if not self._pending:
            self._arrived.clear()
            if wait_time_seconds > 0:
                try:
                    await asyncio.wait_for(self._arrived.wait(), timeout=wait_time_seconds)
                except asyncio.TimeoutError:
                    return []
            else:
                await asyncio.sleep(0)

        received: list[QueueMessage] = []
        while self._pending and len(received) < max_messages:
            message = self._pending.popleft()
            self._in_flight[message.receipt_handle] = message
            received.append(message)
        return received

    async def delete_message(self, receipt_handle: str) -> None:
        if self._in_flight.pop(receipt_handle, None) is None:
            raise QueueError(f"unknown receipt handle: {receipt_handle}")

    # -- NotificationPort implementation ---------------------------------------

    async def send_message(self, destination: str, body: str) -> str:
        self._sent.append((destination, body))
        message_id = str(uuid.uuid4())
        logger.debug("Recorded in-memory message %s for %s", message_id, destination)
        return message_id
