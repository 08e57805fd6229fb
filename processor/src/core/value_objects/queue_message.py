"""QueueMessage value object as delivered by a message queue adapter."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QueueMessage:
    """A received message plus the handle needed to acknowledge it."""

    message_id: str
    receipt_handle: str
    body: str
