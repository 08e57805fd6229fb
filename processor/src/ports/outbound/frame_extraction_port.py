"""Port for turning a video file into an archive of frame images."""
from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class FrameExtractionPort(Protocol):
    async def extract(self, video_path: str) -> tuple[str, int]: ...
