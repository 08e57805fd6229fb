"""Custom exception hierarchy for the frame processor worker.

Pipeline failures are tagged with an :class:`ErrorKind` so callers can branch
on the stage that failed without matching on message text.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    ACQUISITION = "acquisition"
    EXTRACTION = "extraction"
    PUBLISH = "publish"
    NOTIFICATION = "notification"
    CLEANUP = "cleanup"


class FrameProcessorError(Exception):
    """Base exception for all frame processor errors."""


class WorkerError(FrameProcessorError):
    """A pipeline failure tagged with the stage that produced it."""

    kind: ErrorKind


class ValidationError(WorkerError):
    """Raised when a work request is malformed or incomplete."""

    kind = ErrorKind.VALIDATION


class AcquisitionError(WorkerError):
    """Raised when the source video cannot be read or stored locally."""

    kind = ErrorKind.ACQUISITION


class ExtractionError(WorkerError):
    """Raised when frame extraction fails or yields no frames.

    ``output`` carries the extraction command's combined output verbatim.
    """

    kind = ErrorKind.EXTRACTION

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)


class PublishError(WorkerError):
    """Raised when the frame archive cannot be uploaded."""

    kind = ErrorKind.PUBLISH


class NotificationError(WorkerError):
    """Raised when the outcome message cannot be delivered."""

    kind = ErrorKind.NOTIFICATION


class CleanupWarning(WorkerError):
    """Source object could not be deleted. Logged, never raised."""

    kind = ErrorKind.CLEANUP


class StorageError(FrameProcessorError):
    """Raised by blob store adapters on read, write or delete failure."""


class BlobNotFoundError(StorageError):
    """Raised when the requested object does not exist."""

    def __init__(self, bucket: str, key: str) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(f"object not found: {bucket}/{key}")


class QueueError(FrameProcessorError):
    """Raised by queue adapters when receive, delete or send fails."""


class MessageDecodeError(FrameProcessorError):
    """Raised when a queue message body is not a valid work request."""


class FFmpegError(FrameProcessorError):
    """Raised when an FFmpeg invocation cannot complete."""

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)


class ConfigurationError(FrameProcessorError):
    """Raised when required settings are missing."""
