from processor.src.core.value_objects.queue_message import QueueMessage
from processor.src.core.value_objects.video_format import (
    SUPPORTED_VIDEO_EXTENSIONS,
    is_supported_video,
    video_extension,
)

__all__ = [
    "QueueMessage",
    "SUPPORTED_VIDEO_EXTENSIONS",
    "is_supported_video",
    "video_extension",
]
