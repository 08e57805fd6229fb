"""Unit tests for worker metrics."""
from __future__ import annotations

import json

from processor.src.infrastructure.observability import WorkerMetrics, WorkerObservability


class TestWorkerMetrics:
    """Tests for WorkerMetrics."""

    def test_records_processing_results(self):
        metrics = WorkerMetrics()

        metrics.record_video_processed(True, 2.0, 12)
        metrics.record_video_processed(True, 4.0, 8)
        metrics.record_video_processed(False, 1.0, 0)

        assert metrics.videos_processed == {"success": 2, "error": 1}
        assert metrics.frames_extracted_last == 8
        assert metrics.processing_seconds["success"].to_dict() == {"count": 2, "sum": 6.0, "max": 4.0}

    def test_operation_counters(self):
        metrics = WorkerMetrics()

        metrics.record_storage_operation("get", True)
        metrics.record_storage_operation("get", False)
        metrics.record_queue_operation("receive", True)
        metrics.record_error("acquisition")

        assert metrics.storage_operations == {"get:success": 1, "get:error": 1}
        assert metrics.queue_operations == {"receive:success": 1}
        assert metrics.errors == {"acquisition": 1}

    def test_active_messages_never_negative(self):
        metrics = WorkerMetrics()

        metrics.message_started()
        metrics.message_finished()
        metrics.message_finished()

        assert metrics.active_messages == 0

    def test_snapshot_is_json_serialisable(self):
        metrics = WorkerMetrics()
        metrics.record_message_processed(True)
        metrics.record_file_size("zip", 2048)

        snapshot = json.loads(json.dumps(metrics.snapshot()))

        assert snapshot["messages_processed"] == {"success": 1}
        assert snapshot["file_size_bytes"]["zip"]["max"] == 2048.0


class TestWorkerObservability:

    def test_create_shares_given_metrics(self):
        metrics = WorkerMetrics()

        obs = WorkerObservability.create("tests.obs", metrics)

        assert obs.metrics is metrics
        assert obs.logger.name == "tests.obs"
