"""
Injected observability context for the worker.
Holds the logger and the in-process counters that the orchestrator and the
intake loop report to.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Optional


def _status(success: bool) -> str:
    return "success" if success else "error"


@dataclass
class _Histogram:
    count: int = 0
    total: float = 0.0
    maximum: float = 0.0

    def observe(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.maximum = max(self.maximum, value)

    def to_dict(self) -> dict[str, float]:
        return {"count": self.count, "sum": self.total, "max": self.maximum}


@dataclass
class WorkerMetrics:
    """Process-wide counters for one worker instance."""

    messages_processed: Counter = field(default_factory=Counter)
    videos_processed: Counter = field(default_factory=Counter)
    processing_seconds: dict[str, _Histogram] = field(default_factory=dict)
    frames_extracted_last: int = 0
    errors: Counter = field(default_factory=Counter)
    active_messages: int = 0
    storage_operations: Counter = field(default_factory=Counter)
    queue_operations: Counter = field(default_factory=Counter)
    file_size_bytes: dict[str, _Histogram] = field(default_factory=dict)

    def record_message_processed(self, success: bool) -> None:
        self.messages_processed[_status(success)] += 1

    def record_video_processed(self, success: bool, duration: float, frames: int) -> None:
        status = _status(success)
        self.videos_processed[status] += 1
        self.processing_seconds.setdefault(status, _Histogram()).observe(duration)
        if success and frames > 0:
            self.frames_extracted_last = frames

    def record_error(self, error_type: str) -> None:
        self.errors[error_type] += 1

    def record_storage_operation(self, operation: str, success: bool) -> None:
        self.storage_operations[f"{operation}:{_status(success)}"] += 1

    def record_queue_operation(self, operation: str, success: bool) -> None:
        self.queue_operations[f"{operation}:{_status(success)}"] += 1

    def record_file_size(self, file_type: str, size: int) -> None:
        self.file_size_bytes.setdefault(file_type, _Histogram()).observe(float(size))

    def message_started(self) -> None:
        self.active_messages += 1

    def message_finished(self) -> None:
        self.active_messages = max(0, self.active_messages - 1)

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-serialisable view of every counter."""
        return {
            "messages_processed": dict(self.messages_processed),
            "videos_processed": dict(self.videos_processed),
            "processing_seconds": {k: v.to_dict() for k, v in self.processing_seconds.items()},
            "frames_extracted_last": self.frames_extracted_last,
            "errors": dict(self.errors),
            "active_messages": self.active_messages,
            "storage_operations": dict(self.storage_operations),
            "queue_operations": dict(self.queue_operations),
            "file_size_bytes": {k: v.to_dict() for k, v in self.file_size_bytes.items()},
        }


@dataclass
class WorkerObservability:
    """Logger plus metrics, passed explicitly to the components that report."""

    logger: logging.Logger
    metrics: WorkerMetrics = field(default_factory=WorkerMetrics)

    @classmethod
    def create(cls, name: str = "processor", metrics: Optional[WorkerMetrics] = None) -> WorkerObservability:
        return cls(logger=logging.getLogger(name), metrics=metrics or WorkerMetrics())
