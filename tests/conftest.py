"""Shared test fixtures for all tests."""
from __future__ import annotations

import io
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from processor.src.core.entities.work_request import WorkRequest
from processor.src.infrastructure.observability import WorkerObservability


class StubFrameExtractor:
    """FrameExtractionPort double that writes a real archive of fake frames."""

    def __init__(self, work_dir: Path, frame_count: int = 10) -> None:
        self.work_dir = work_dir
        self.frame_count = frame_count
        self.calls: list[str] = []

    async def extract(self, video_path: str) -> tuple[str, int]:
        self.calls.append(video_path)
        self.work_dir.mkdir(parents=True, exist_ok=True)
        archive = self.work_dir / f"{Path(video_path).stem}_frames.zip"
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for index in range(self.frame_count):
                zf.writestr(f"frame_{index + 1:04d}.png", b"\x89PNG fake frame")
        return str(archive), self.frame_count


def leftover_files(directory: Path) -> list[Path]:
    if not directory.exists():
        return []
    return [p for p in directory.rglob("*") if p.is_file()]


# ── Request Fixtures ───────────────────────────────────────────────────────

@pytest.fixture
def sample_request() -> WorkRequest:
    return WorkRequest(
        process_id="p1",
        source_bucket="in",
        source_key="v.mp4",
        received_at=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


# ── Observability Fixtures ─────────────────────────────────────────────────

@pytest.fixture
def observability() -> WorkerObservability:
    return WorkerObservability.create("tests.processor")


# ── Mock Port Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def mock_blob_store():
    mock = AsyncMock()
    mock.get_object.return_value = io.BytesIO(b"fake video bytes")
    mock.put_object.return_value = "s3://out/processed/frames_p1.zip"
    mock.delete_object.return_value = None
    return mock


@pytest.fixture
def mock_notifier():
    mock = AsyncMock()
    mock.send_message.return_value = "msg-123"
    return mock


@pytest.fixture
def mock_message_queue():
    mock = AsyncMock()
    mock.receive_messages.return_value = []
    mock.delete_message.return_value = None
    return mock


@pytest.fixture
def extractor_dir(tmp_path) -> Path:
    return tmp_path / "extractor"


@pytest.fixture
def work_dir(tmp_path) -> Path:
    return tmp_path / "work"


@pytest.fixture
def make_frame_extractor(extractor_dir):
    def _make(frame_count: int = 10) -> StubFrameExtractor:
        return StubFrameExtractor(extractor_dir, frame_count=frame_count)
    return _make


@pytest.fixture
def stub_frame_extractor(make_frame_extractor) -> StubFrameExtractor:
    return make_frame_extractor(10)


@pytest.fixture
def find_leftovers():
    return leftover_files
