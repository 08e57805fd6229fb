"""Amazon SQS implementation of MessageQueuePort and NotificationPort."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from processor.src.core.exceptions import QueueError
from processor.src.core.value_objects.queue_message import QueueMessage

logger = logging.getLogger(__name__)


class SQSMessageQueue:
    """Consumes work from *queue_url* and sends notifications to any queue URL.

    One instance can serve as the intake queue, the notification channel,
    or both.
    """

    def __init__(
        self,
        queue_url: str = "",
        region_name: str = "us-east-1",
        endpoint_url: str = "",
        client: Any = None,
    ) -> None:
        if client is None:
            import boto3

            client = boto3.client(
                "sqs", region_name=region_name, endpoint_url=endpoint_url or None
            )
        self._client = client
        self._queue_url = queue_url
        logger.info("SQSMessageQueue initialised (queue=%s)", queue_url or "<send only>")

    async def _call(self, fn, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, **kwargs))

    # -- MessageQueuePort implementation ---------------------------------------

    async def receive_messages(
        self,
        max_messages: int = 1,
        wait_time_seconds: int = 10,
        visibility_timeout: int = 300,
    ) -> list[QueueMessage]:
        """Long-poll the intake queue for up to *max_messages* messages."""
        try:
            response = await self._call(
                self._client.receive_message,
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=wait_time_seconds,
                VisibilityTimeout=visibility_timeout,
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueueError(f"failed to receive messages: {exc}") from exc

        return [
            QueueMessage(
                message_id=raw.get("MessageId", ""),
                receipt_handle=raw["ReceiptHandle"],
                body=raw.get("Body", ""),
            )
            for raw in response.get("Messages", [])
        ]

    async def delete_message(self, receipt_handle: str) -> None:
        try:
            await self._call(
                self._client.delete_message,
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueueError(f"failed to delete message: {exc}") from exc

    # -- NotificationPort implementation ---------------------------------------

    async def send_message(self, destination: str, body: str) -> str:
        """Send *body* to the queue at *destination* and return its MessageId."""
        try:
            response = await self._call(
                self._client.send_message, QueueUrl=destination, MessageBody=body
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueueError(f"failed to send message: {exc}") from exc
        message_id = response.get("MessageId", "")
        logger.debug("Sent message %s to %s", message_id, destination)
        return message_id
