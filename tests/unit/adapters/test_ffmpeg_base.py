"""Unit tests for the FFmpeg command runner."""
from __future__ import annotations

import asyncio
import shutil
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from processor.src.adapters.outbound.ffmpeg.ffmpeg_base import get_ffmpeg_path, run_ffmpeg
from processor.src.core.exceptions import FFmpegError

MODULE = "processor.src.adapters.outbound.ffmpeg.ffmpeg_base"


def _hanging_process() -> MagicMock:
    process = MagicMock()
    process.returncode = None

    async def communicate():
        await asyncio.Event().wait()

    process.communicate = communicate
    process.wait = AsyncMock(return_value=-9)
    return process


class TestRunFFmpeg:
    """Tests for run_ffmpeg."""

    def test_get_ffmpeg_path_falls_back_to_name(self):
        with patch(f"{MODULE}.shutil.which", return_value=None):
            assert get_ffmpeg_path() == "ffmpeg"

    @pytest.mark.asyncio
    async def test_missing_binary_raises(self):
        with pytest.raises(FFmpegError, match="failed to start"):
            await run_ffmpeg(["-i", "x.mp4"], binary="/nonexistent/ffmpeg-binary")

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("true") is None, reason="requires the true utility")
    async def test_successful_command(self):
        returncode, output = await run_ffmpeg([], binary=shutil.which("true"))

        assert returncode == 0
        assert output == ""

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("false") is None, reason="requires the false utility")
    async def test_failing_command_returns_exit_status(self):
        returncode, _ = await run_ffmpeg([], binary=shutil.which("false"))

        assert returncode != 0

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        process = _hanging_process()

        with patch(f"{MODULE}.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with pytest.raises(FFmpegError, match="timed out"):
                await run_ffmpeg(["-i", "x.mp4"], binary="ffmpeg", timeout=0.01)

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancellation_kills_process(self):
        process = _hanging_process()

        with patch(f"{MODULE}.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            task = asyncio.create_task(run_ffmpeg(["-i", "x.mp4"], binary="ffmpeg"))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        process.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_command_line(self):
        process = MagicMock()
        process.returncode = 0
        process.communicate = AsyncMock(return_value=(b"done", None))
        spawn = AsyncMock(return_value=process)

        with patch(f"{MODULE}.asyncio.create_subprocess_exec", spawn):
            returncode, output = await run_ffmpeg(["-i", "in.mp4", "out.png"], binary="ff")

        assert (returncode, output) == (0, "done")
        assert spawn.await_args.args == ("ff", "-y", "-i", "in.mp4", "out.png")
