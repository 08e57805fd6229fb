from processor.src.core.entities.processing_outcome import ProcessingOutcome
from processor.src.core.entities.work_request import WorkRequest

__all__ = ["ProcessingOutcome", "WorkRequest"]
