"""ProcessingOutcome entity - the result of executing one WorkRequest."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from processor.src.core.exceptions import ErrorKind, WorkerError

UNKNOWN_ERROR_MESSAGE = "unknown error"


@dataclass(frozen=True)
class ProcessingOutcome:
    """Success carries the archive location, failure carries the error. Never both."""

    process_id: str
    succeeded: bool
    output_bucket: Optional[str] = None
    output_key: Optional[str] = None
    error: Optional[WorkerError] = None

    def __post_init__(self) -> None:
        has_location = self.output_bucket is not None or self.output_key is not None
        if self.succeeded:
            if self.error is not None or self.output_bucket is None or self.output_key is None:
                raise ValueError("a successful outcome needs output_bucket and output_key and no error")
        elif has_location or self.error is None:
            raise ValueError("a failed outcome needs an error and no output location")

    @classmethod
    def success(cls, process_id: str, output_bucket: str, output_key: str) -> ProcessingOutcome:
        return cls(
            process_id=process_id,
            succeeded=True,
            output_bucket=output_bucket,
            output_key=output_key,
        )

    @classmethod
    def failure(cls, process_id: str, error: WorkerError) -> ProcessingOutcome:
        return cls(process_id=process_id, succeeded=False, error=error)

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    @property
    def error_message(self) -> str:
        if self.error is None or not str(self.error):
            return UNKNOWN_ERROR_MESSAGE
        return str(self.error)

    def to_message(self) -> dict[str, str]:
        """Build the outbound notification payload."""
        if self.succeeded:
            return {
                "process_id": self.process_id,
                "file_bucket": self.output_bucket or "",
                "file_key": self.output_key or "",
            }
        return {
            "process_id": self.process_id,
            "error_message": self.error_message,
        }
