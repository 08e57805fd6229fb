"""Inbound port for video processing."""
from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable
if TYPE_CHECKING:
    from processor.src.core.entities.processing_outcome import ProcessingOutcome
    from processor.src.core.entities.work_request import WorkRequest


@runtime_checkable
class ProcessVideoUseCase(Protocol):
    async def execute(self, request: WorkRequest) -> ProcessingOutcome: ...
