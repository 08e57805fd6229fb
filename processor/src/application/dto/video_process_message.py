"""DTO for inbound video processing queue messages."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from processor.src.core.entities.work_request import WorkRequest
from processor.src.core.exceptions import MessageDecodeError


class VideoProcessMessage(BaseModel):
    """Wire shape of a work message. Absent fields decode as empty strings."""

    model_config = ConfigDict(extra="ignore")

    process_id: str = ""
    video_bucket: str = ""
    video_key: str = ""

    def to_work_request(self, received_at: Optional[datetime] = None) -> WorkRequest:
        if received_at is None:
            return WorkRequest(self.process_id, self.video_bucket, self.video_key)
        return WorkRequest(self.process_id, self.video_bucket, self.video_key, received_at)


def decode_work_request(body: str, received_at: Optional[datetime] = None) -> WorkRequest:
    """Parse a queue message body into a WorkRequest or raise MessageDecodeError."""
    try:
        message = VideoProcessMessage.model_validate_json(body)
    except PydanticValidationError as exc:
        raise MessageDecodeError(f"failed to parse message: {exc}") from exc
    return message.to_work_request(received_at)
