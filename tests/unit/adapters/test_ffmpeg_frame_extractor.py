"""Unit tests for FFmpegFrameExtractor."""
from __future__ import annotations

import asyncio
import threading
import zipfile
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from processor.src.adapters.outbound.ffmpeg.ffmpeg_frame_extractor import (
    FFmpegFrameExtractor,
    create_zip,
)
from processor.src.core.exceptions import ExtractionError, FFmpegError

RUN_FFMPEG = "processor.src.adapters.outbound.ffmpeg.ffmpeg_frame_extractor.run_ffmpeg"
CREATE_ZIP = "processor.src.adapters.outbound.ffmpeg.ffmpeg_frame_extractor.create_zip"


def _writes_frames(count: int, returncode: int = 0, output: str = ""):
    """run_ffmpeg double that drops *count* frames at the output pattern."""

    async def fake_run(args, *, binary=None, timeout=None):
        pattern = args[-1]
        for index in range(1, count + 1):
            Path(pattern % index).write_bytes(b"frame")
        return returncode, output

    return AsyncMock(side_effect=fake_run)


class TestFFmpegFrameExtractor:
    """Tests for FFmpegFrameExtractor."""

    @pytest.fixture
    def extractor(self, tmp_path):
        return FFmpegFrameExtractor(temp_dir=tmp_path, fps=1, timeout_seconds=30, binary="ffmpeg")

    @pytest.mark.asyncio
    async def test_extract_packages_frames(self, extractor, tmp_path):
        run = _writes_frames(3)

        with patch(RUN_FFMPEG, run):
            archive, count = await extractor.extract(str(tmp_path / "video_p1.mp4"))

        assert count == 3
        assert archive == str(tmp_path / "video_p1_frames.zip")
        with zipfile.ZipFile(archive) as zf:
            assert zf.namelist() == ["frame_0001.png", "frame_0002.png", "frame_0003.png"]
        assert not (tmp_path / "video_p1_frames").exists()

    @pytest.mark.asyncio
    async def test_extract_builds_fps_filter(self, tmp_path):
        extractor = FFmpegFrameExtractor(temp_dir=tmp_path, fps=0.5, frame_format="jpg", binary="ff")
        run = _writes_frames(1)

        with patch(RUN_FFMPEG, run):
            await extractor.extract("/videos/video_p1.mp4")

        args = run.await_args.args[0]
        assert args[:4] == ["-i", "/videos/video_p1.mp4", "-vf", "fps=0.5"]
        assert args[4].endswith("frame_%04d.jpg")
        assert run.await_args.kwargs == {"binary": "ff", "timeout": 600}

    @pytest.mark.asyncio
    async def test_extract_nonzero_exit(self, extractor, tmp_path):
        run = _writes_frames(0, returncode=1, output="Invalid data found when processing input")

        with patch(RUN_FFMPEG, run):
            with pytest.raises(ExtractionError) as exc_info:
                await extractor.extract(str(tmp_path / "video_p1.mp4"))

        assert str(exc_info.value) == (
            "ffmpeg error: exit status 1, output: Invalid data found when processing input"
        )
        assert exc_info.value.output == "Invalid data found when processing input"
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_extract_no_frames(self, extractor, tmp_path):
        with patch(RUN_FFMPEG, _writes_frames(0)):
            with pytest.raises(ExtractionError, match="no frames extracted from video"):
                await extractor.extract(str(tmp_path / "video_p1.mp4"))

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_extract_ffmpeg_unavailable(self, extractor, tmp_path):
        run = AsyncMock(side_effect=FFmpegError("failed to start ffmpeg: not found"))

        with patch(RUN_FFMPEG, run):
            with pytest.raises(ExtractionError, match="ffmpeg error: failed to start ffmpeg"):
                await extractor.extract(str(tmp_path / "video_p1.mp4"))

    @pytest.mark.asyncio
    async def test_extract_cancelled_cleans_work_dir(self, extractor, tmp_path):
        started = asyncio.Event()

        async def hang(args, *, binary=None, timeout=None):
            started.set()
            await asyncio.Event().wait()

        with patch(RUN_FFMPEG, AsyncMock(side_effect=hang)):
            task = asyncio.create_task(extractor.extract(str(tmp_path / "video_p1.mp4")))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_extract_cancelled_while_zipping_waits_for_zip_thread(self, extractor, tmp_path):
        zip_started = threading.Event()
        release_zip = threading.Event()
        written = []

        def slow_zip(files, zip_path):
            zip_started.set()
            release_zip.wait(timeout=5)
            create_zip(files, zip_path)
            written.append(zip_path)

        with patch(RUN_FFMPEG, _writes_frames(3)), patch(CREATE_ZIP, slow_zip):
            task = asyncio.create_task(extractor.extract(str(tmp_path / "video_p1.mp4")))
            assert await asyncio.to_thread(zip_started.wait, 5)
            task.cancel()
            asyncio.get_running_loop().call_later(0.05, release_zip.set)
            with pytest.raises(asyncio.CancelledError):
                await task

        assert len(written) == 1
        assert list(tmp_path.iterdir()) == []


def test_create_zip_uses_base_names(tmp_path):
    nested = tmp_path / "deep" / "dir"
    nested.mkdir(parents=True)
    frame = nested / "frame_0001.png"
    frame.write_bytes(b"png")

    create_zip([frame], tmp_path / "out.zip")

    with zipfile.ZipFile(tmp_path / "out.zip") as zf:
        assert zf.namelist() == ["frame_0001.png"]
        assert zf.getinfo("frame_0001.png").compress_type == zipfile.ZIP_DEFLATED
