from processor.src.ports.inbound.process_video_use_case import ProcessVideoUseCase

__all__ = ["ProcessVideoUseCase"]
