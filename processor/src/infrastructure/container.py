"""
Dependency container.
Wires ports to adapters based on configuration.
"""
from __future__ import annotations

import logging
from typing import Optional

from processor.src.infrastructure.config import Settings
from processor.src.infrastructure.observability import WorkerObservability

logger = logging.getLogger(__name__)


class ApplicationContainer:
    """Simplified container that builds concrete instances from settings.

    Usage::

        container = ApplicationContainer(settings)
        intake = container.intake_loop()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        observability: Optional[WorkerObservability] = None,
    ):
        self.settings = settings or Settings()
        self._observability = observability or WorkerObservability.create("processor.worker")
        self._cache: dict[str, object] = {}

    def _get_or_create(self, key: str, factory):
        if key not in self._cache:
            self._cache[key] = factory(self.settings)
        return self._cache[key]

    # ── Lazy factory helpers ──────────────────────────────────────

    @staticmethod
    def _build_blob_store(settings: Settings):
        backend = settings.storage.backend
        if backend == "s3":
            from processor.src.adapters.outbound.storage.s3_blob_store import S3BlobStore
            return S3BlobStore(
                region_name=settings.aws.region,
                endpoint_url=settings.aws.endpoint_url,
            )
        if backend == "gcs":
            from processor.src.adapters.outbound.storage.gcs_blob_store import GCSBlobStore
            return GCSBlobStore(credentials_path=settings.storage.gcs_credentials_path)
        if backend == "local":
            from processor.src.adapters.outbound.storage.local_blob_store import LocalBlobStore
            return LocalBlobStore(base_dir=settings.storage.local_root)
        raise ValueError(f"Unknown storage backend: {backend}")

    @staticmethod
    def _build_message_queue(settings: Settings):
        backend = settings.queue.backend
        if backend == "sqs":
            from processor.src.adapters.outbound.queue.sqs_message_queue import SQSMessageQueue
            return SQSMessageQueue(
                queue_url=settings.queue.input,
                region_name=settings.aws.region,
                endpoint_url=settings.aws.endpoint_url,
            )
        if backend == "memory":
            from processor.src.adapters.outbound.queue.in_memory_queue import InMemoryMessageQueue
            return InMemoryMessageQueue()
        raise ValueError(f"Unknown queue backend: {backend}")

    @staticmethod
    def _build_notification(settings: Settings):
        from processor.src.adapters.outbound.queue.sqs_message_queue import SQSMessageQueue
        return SQSMessageQueue(
            region_name=settings.aws.region,
            endpoint_url=settings.aws.endpoint_url,
        )

    @staticmethod
    def _build_frame_extractor(settings: Settings):
        from processor.src.adapters.outbound.ffmpeg.ffmpeg_frame_extractor import FFmpegFrameExtractor
        return FFmpegFrameExtractor(
            temp_dir=settings.worker.temp_dir,
            fps=settings.ffmpeg.fps,
            frame_format=settings.ffmpeg.frame_format,
            timeout_seconds=settings.ffmpeg.timeout_seconds,
            binary=settings.ffmpeg.binary or None,
        )

    @staticmethod
    def _build_readiness(settings: Settings):
        from processor.src.adapters.inbound.health_app import ReadinessState
        return ReadinessState()

    @staticmethod
    def _build_dispatcher(settings: Settings):
        from processor.src.application.dispatchers import BoundedDispatcher, SequentialDispatcher
        if settings.worker.concurrency > 1:
            return BoundedDispatcher(settings.worker.concurrency)
        return SequentialDispatcher()

    # ── Port accessors ─────────────────────────────────────────────

    def observability(self) -> WorkerObservability:
        return self._observability

    def blob_store(self):
        return self._get_or_create("blob_store", self._build_blob_store)

    def message_queue(self):
        return self._get_or_create("message_queue", self._build_message_queue)

    def notification(self):
        # The in-memory queue also carries outcome notifications.
        if self.settings.queue.backend == "memory":
            return self.message_queue()
        return self._get_or_create("notification", self._build_notification)

    def frame_extractor(self):
        return self._get_or_create("frame_extractor", self._build_frame_extractor)

    def readiness(self):
        return self._get_or_create("readiness", self._build_readiness)

    def dispatcher(self):
        return self._get_or_create("dispatcher", self._build_dispatcher)

    # ── Application services ───────────────────────────────────────

    def process_video_service(self):
        from processor.src.application.process_video_service import ProcessVideoService
        return self._get_or_create(
            "process_video_service",
            lambda settings: ProcessVideoService(
                storage=self.blob_store(),
                notifier=self.notification(),
                frame_extractor=self.frame_extractor(),
                output_bucket=settings.storage.output,
                output_destination=settings.notification_destination,
                temp_dir=settings.worker.temp_dir,
                observability=self._observability,
            ),
        )

    def intake_loop(self):
        from processor.src.application.intake_loop import IntakeLoop
        return self._get_or_create(
            "intake_loop",
            lambda settings: IntakeLoop(
                queue=self.message_queue(),
                use_case=self.process_video_service(),
                dispatcher=self.dispatcher(),
                max_messages=settings.queue.max_messages,
                wait_time_seconds=settings.queue.wait_time_seconds,
                visibility_timeout=settings.queue.visibility_timeout,
                poll_backoff_seconds=settings.queue.poll_backoff_seconds,
                idle_backoff_seconds=settings.queue.idle_backoff_seconds,
                observability=self._observability,
            ),
        )

    def health_app(self):
        from processor.src.adapters.inbound.health_app import create_health_app
        return self._get_or_create(
            "health_app",
            lambda settings: create_health_app(self.readiness(), self._observability.metrics),
        )
