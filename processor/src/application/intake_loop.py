"""
Queue intake loop.
Polls for work messages, decodes them, dispatches them to the processing use
case and acknowledges every message once its job has returned.
"""
from __future__ import annotations

import asyncio
import functools
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from processor.src.application.dispatchers import Dispatcher, SequentialDispatcher
from processor.src.application.dto.video_process_message import decode_work_request
from processor.src.core.exceptions import MessageDecodeError
from processor.src.core.value_objects.queue_message import QueueMessage
from processor.src.infrastructure.observability import WorkerObservability


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntakeLoop:
    """POLLING -> DECODING -> DISPATCHING -> ACK, until :meth:`stop` is called.

    A malformed message is acknowledged without dispatch. A dispatched message
    is acknowledged after ``execute`` returns or raises, because the use case
    has already tried to publish the outcome. A receive error acknowledges
    nothing and is retried after ``poll_backoff_seconds``.
    """

    def __init__(
        self,
        queue,          # MessageQueuePort
        use_case,       # ProcessVideoUseCase
        dispatcher: Optional[Dispatcher] = None,
        *,
        max_messages: int = 1,
        wait_time_seconds: int = 10,
        visibility_timeout: int = 300,
        poll_backoff_seconds: float = 5.0,
        idle_backoff_seconds: float = 0.0,
        observability: Optional[WorkerObservability] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._queue = queue
        self._use_case = use_case
        self._dispatcher = dispatcher or SequentialDispatcher()
        self._max_messages = max_messages
        self._wait_time_seconds = wait_time_seconds
        self._visibility_timeout = visibility_timeout
        self._poll_backoff_seconds = poll_backoff_seconds
        self._idle_backoff_seconds = idle_backoff_seconds
        self._clock = clock
        obs = observability or WorkerObservability.create(__name__)
        self._log = obs.logger
        self._metrics = obs.metrics
        self._stop_event = asyncio.Event()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Stop issuing receives. In-flight jobs are allowed to finish."""
        if not self._stop_event.is_set():
            self._log.info("Shutdown signal received, stopping worker...")
        self._stop_event.set()

    async def run(self) -> None:
        self._log.info("Waiting for messages...")
        try:
            while not self._stop_event.is_set():
                await self.run_once()
        finally:
            await self._dispatcher.drain()
        self._log.info("Worker stopped gracefully")

    async def run_once(self) -> int:
        """Perform one receive and dispatch what arrived. Returns the message count."""
        try:
            messages = await self._queue.receive_messages(
                max_messages=self._max_messages,
                wait_time_seconds=self._wait_time_seconds,
                visibility_timeout=self._visibility_timeout,
            )
        except Exception as exc:
            self._metrics.record_queue_operation("receive", False)
            self._log.error("Error receiving message: %s", exc)
            await self._backoff(self._poll_backoff_seconds)
            return 0

        self._metrics.record_queue_operation("receive", True)
        if not messages:
            await self._backoff(self._idle_backoff_seconds)
            return 0

        for message in messages:
            await self._dispatcher.submit(functools.partial(self.handle_message, message))
        return len(messages)

    async def handle_message(self, message: QueueMessage) -> None:
        self._log.info("Received message: ID=%s", message.message_id)
        self._metrics.message_started()
        acknowledge = True
        try:
            await self._process(message)
        except asyncio.CancelledError:
            # Aborted mid-job: leave the message for redelivery after the lease.
            acknowledge = False
            raise
        finally:
            self._metrics.message_finished()
            if acknowledge:
                await self._acknowledge(message)

    async def _process(self, message: QueueMessage) -> None:
        try:
            request = decode_work_request(message.body, received_at=self._clock())
        except MessageDecodeError as exc:
            self._metrics.record_message_processed(False)
            self._metrics.record_error("decode")
            self._log.error("Failed to parse message ID=%s: %s", message.message_id, exc)
            return

        self._log.info(
            "Processing video: process_id=%s, bucket=%s, key=%s",
            request.process_id, request.source_bucket, request.source_key,
        )
        started = time.monotonic()
        try:
            outcome = await self._use_case.execute(request)
        except Exception as exc:
            self._metrics.record_message_processed(False)
            self._log.error(
                "Processing failed for process_id=%s: %s (duration: %.2fs)",
                request.process_id, exc, time.monotonic() - started,
            )
            return

        self._metrics.record_message_processed(outcome.succeeded)
        if outcome.succeeded:
            self._log.info(
                "Processing completed for process_id=%s (duration: %.2fs)",
                request.process_id, time.monotonic() - started,
            )
        else:
            self._log.error(
                "Processing failed for process_id=%s: %s (duration: %.2fs)",
                request.process_id, outcome.error_message, time.monotonic() - started,
            )

    async def _acknowledge(self, message: QueueMessage) -> None:
        try:
            await self._queue.delete_message(message.receipt_handle)
        except Exception as exc:
            self._metrics.record_queue_operation("delete", False)
            self._log.warning("Failed to delete message from queue: %s", exc)
            return
        self._metrics.record_queue_operation("delete", True)
        self._log.info("Message deleted from queue: ID=%s", message.message_id)

    async def _backoff(self, delay: float) -> None:
        """Sleep for *delay* seconds, waking early on shutdown."""
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
