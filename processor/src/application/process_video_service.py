"""
Frame extraction use case.
Drives one WorkRequest through validate, acquire, extract, publish, retire
source and notify. Stage failures become a failed ProcessingOutcome; only a
failed notification escapes ``execute``.
"""
from __future__ import annotations

import asyncio
import json
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

from processor.src.core.entities.processing_outcome import ProcessingOutcome
from processor.src.core.entities.work_request import WorkRequest
from processor.src.core.exceptions import (
    AcquisitionError,
    CleanupWarning,
    ExtractionError,
    NotificationError,
    PublishError,
    ValidationError,
    WorkerError,
)
from processor.src.core.value_objects.video_format import (
    is_supported_video,
    supported_formats_label,
)
from processor.src.infrastructure.observability import WorkerObservability

DEFAULT_TEMP_DIR = "/tmp/video-processor"
OUTPUT_KEY_TEMPLATE = "processed/frames_{process_id}.zip"

_COPY_CHUNK_SIZE = 1024 * 1024


def build_output_key(process_id: str) -> str:
    return OUTPUT_KEY_TEMPLATE.format(process_id=process_id)


def _copy_stream_to_file(body: BinaryIO, target: Path) -> int:
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "wb") as out:
        shutil.copyfileobj(body, out, _COPY_CHUNK_SIZE)
    return target.stat().st_size


def _remove_quietly(path: Optional[Path]) -> None:
    if path is not None:
        path.unlink(missing_ok=True)


class ProcessVideoService:
    """Orchestrates the frame extraction pipeline for a single request."""

    def __init__(
        self,
        storage,            # BlobStorePort
        notifier,           # NotificationPort
        frame_extractor,    # FrameExtractionPort
        output_bucket: str,
        output_destination: str,
        temp_dir: str | Path = DEFAULT_TEMP_DIR,
        observability: Optional[WorkerObservability] = None,
    ):
        self._storage = storage
        self._notifier = notifier
        self._frame_extractor = frame_extractor
        self._output_bucket = output_bucket
        self._output_destination = output_destination
        self._temp_dir = Path(temp_dir)
        obs = observability or WorkerObservability.create(__name__)
        self._log = obs.logger
        self._metrics = obs.metrics

    async def execute(self, request: WorkRequest) -> ProcessingOutcome:
        """Run the pipeline and publish its outcome.

        Raises:
            NotificationError: the outcome message could not be sent.
        """
        self._log.info("Starting video processing for process_id: %s", request.process_id)
        started = time.monotonic()
        video_path: Optional[Path] = None
        archive_path: Optional[Path] = None
        frame_count = 0

        try:
            try:
                self._validate(request)

                video_path = self._local_video_path(request)
                await self._download_video(request, video_path)

                archive_path, frame_count = await self._extract_frames(video_path)
                self._log.info(
                    "Video processed successfully. Frames extracted: %d", frame_count
                )

                output_key = build_output_key(request.process_id)
                await self._upload_archive(archive_path, output_key)

                await self._retire_source(request)

                outcome = ProcessingOutcome.success(
                    request.process_id, self._output_bucket, output_key
                )
            except WorkerError as exc:
                self._metrics.record_error(exc.kind.value)
                outcome = ProcessingOutcome.failure(request.process_id, exc)

            self._metrics.record_video_processed(
                outcome.succeeded, time.monotonic() - started, frame_count
            )
            await self._notify(outcome)
            return outcome
        finally:
            _remove_quietly(video_path)
            _remove_quietly(archive_path)

    # ── Stages ────────────────────────────────────────────────────

    def _validate(self, request: WorkRequest) -> None:
        if not request.process_id:
            raise ValidationError("process_id is required")
        if not request.source_bucket:
            raise ValidationError("video_bucket is required")
        if not request.source_key:
            raise ValidationError("video_key is required")
        if not is_supported_video(request.source_key):
            raise ValidationError(
                f"invalid video file format. Supported: {supported_formats_label()}"
            )

    def _local_video_path(self, request: WorkRequest) -> Path:
        return self._temp_dir / f"video_{request.local_name}{request.source_extension}"

    async def _download_video(self, request: WorkRequest, target: Path) -> None:
        self._log.info(
            "Downloading video from %s/%s", request.source_bucket, request.source_key
        )
        try:
            body = await self._storage.get_object(request.source_bucket, request.source_key)
        except Exception as exc:
            self._metrics.record_storage_operation("get", False)
            raise AcquisitionError(
                f"failed to download video: failed to get object from storage: {exc}"
            ) from exc
        self._metrics.record_storage_operation("get", True)

        loop = asyncio.get_running_loop()
        try:
            size = await loop.run_in_executor(None, _copy_stream_to_file, body, target)
        except Exception as exc:
            _remove_quietly(target)
            raise AcquisitionError(f"failed to download video: failed to save video: {exc}") from exc
        finally:
            body.close()

        self._metrics.record_file_size("video", size)
        self._log.info("Video downloaded to: %s (%d bytes)", target, size)

    async def _extract_frames(self, video_path: Path) -> tuple[Path, int]:
        try:
            archive, frame_count = await self._frame_extractor.extract(str(video_path))
        except ExtractionError as exc:
            raise ExtractionError(f"failed to process video: {exc}", output=exc.output) from exc
        except Exception as exc:
            raise ExtractionError(f"failed to process video: {exc}") from exc

        archive_path = Path(archive)
        if frame_count <= 0:
            _remove_quietly(archive_path)
            raise ExtractionError("failed to process video: no frames extracted from video")
        return archive_path, frame_count

    async def _upload_archive(self, archive_path: Path, output_key: str) -> None:
        self._log.info("Uploading ZIP to %s/%s", self._output_bucket, output_key)
        try:
            size = archive_path.stat().st_size
            with open(archive_path, "rb") as archive:
                location = await self._storage.put_object(self._output_bucket, output_key, archive)
        except Exception as exc:
            self._metrics.record_storage_operation("put", False)
            raise PublishError(f"failed to upload zip: {exc}") from exc

        self._metrics.record_storage_operation("put", True)
        self._metrics.record_file_size("zip", size)
        self._log.info("ZIP uploaded successfully to %s", location)

    async def _retire_source(self, request: WorkRequest) -> None:
        self._log.info(
            "Deleting original video from %s/%s", request.source_bucket, request.source_key
        )
        try:
            await self._storage.delete_object(request.source_bucket, request.source_key)
        except Exception as exc:
            warning = CleanupWarning(f"failed to delete original video: {exc}")
            self._metrics.record_storage_operation("delete", False)
            self._metrics.record_error(warning.kind.value)
            self._log.warning("Warning: %s", warning)
            return

        self._metrics.record_storage_operation("delete", True)
        self._log.info("Original video deleted successfully")

    async def _notify(self, outcome: ProcessingOutcome) -> None:
        label = "success" if outcome.succeeded else "error"
        if outcome.succeeded:
            self._log.info("Sending success message for process_id: %s", outcome.process_id)
        else:
            self._log.info(
                "Sending error message for process_id: %s. Error: %s",
                outcome.process_id, outcome.error_message,
            )

        body = json.dumps(outcome.to_message())
        try:
            message_id = await self._notifier.send_message(self._output_destination, body)
        except Exception as exc:
            self._metrics.record_queue_operation("send", False)
            self._metrics.record_error(NotificationError.kind.value)
            self._log.error("Failed to send %s message: %s", label, exc)
            raise NotificationError(f"failed to send {label} message: {exc}") from exc

        self._metrics.record_queue_operation("send", True)
        self._log.info("%s message sent. MessageID: %s", label.capitalize(), message_id)
