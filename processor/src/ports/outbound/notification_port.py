"""Port for outbound outcome notifications."""
from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class NotificationPort(Protocol):
    async def send_message(self, destination: str, body: str) -> str: ...
