from processor.src.application.dispatchers import BoundedDispatcher, Dispatcher, SequentialDispatcher
from processor.src.application.intake_loop import IntakeLoop
from processor.src.application.process_video_service import ProcessVideoService

__all__ = [
    "ProcessVideoService",
    "IntakeLoop",
    "Dispatcher",
    "SequentialDispatcher",
    "BoundedDispatcher",
]
