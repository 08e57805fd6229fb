from processor.src.ports.outbound.blob_store_port import BlobStorePort
from processor.src.ports.outbound.frame_extraction_port import FrameExtractionPort
from processor.src.ports.outbound.message_queue_port import MessageQueuePort
from processor.src.ports.outbound.notification_port import NotificationPort

__all__ = [
    "BlobStorePort",
    "FrameExtractionPort",
    "MessageQueuePort",
    "NotificationPort",
]
