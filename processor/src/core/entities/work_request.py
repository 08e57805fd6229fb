"""WorkRequest entity identifying one frame extraction job."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from processor.src.core.value_objects.video_format import video_extension

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_READABLE_PREFIX_LENGTH = 64
_DIGEST_LENGTH = 16


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkRequest:
    """One decoded unit of processing work.

    ``received_at`` is stamped by the intake loop on receipt, never by the sender.
    """

    process_id: str
    source_bucket: str
    source_key: str
    received_at: datetime = field(default_factory=_utcnow)

    @property
    def source_extension(self) -> str:
        return video_extension(self.source_key)

    @property
    def local_name(self) -> str:
        """File-system safe form of ``process_id`` used for temporary paths.

        The readable prefix is lossy, so a digest of the full id is appended
        to keep distinct ids on distinct paths.
        """
        readable = _UNSAFE_PATH_CHARS.sub("_", self.process_id)[:_READABLE_PREFIX_LENGTH]
        digest = hashlib.sha256(self.process_id.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
        return f"{readable}_{digest}"
