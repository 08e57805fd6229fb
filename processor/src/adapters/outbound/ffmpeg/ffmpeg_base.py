"""
Shared FFmpeg path resolution and command execution utilities.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Optional

from processor.src.core.exceptions import FFmpegError

logger = logging.getLogger(__name__)


def get_ffmpeg_path() -> str:
    """Resolve ffmpeg executable path from PATH, falling back to the bare name."""
    return shutil.which("ffmpeg") or "ffmpeg"


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
        await process.wait()


async def run_ffmpeg(
    args: list[str],
    *,
    binary: Optional[str] = None,
    timeout: Optional[float] = None,
) -> tuple[int, str]:
    """Run an FFmpeg command and return ``(returncode, combined_output)``.

    Args:
        args: Command arguments *without* the ffmpeg binary itself.
        binary: Executable to run instead of the resolved ffmpeg path.
        timeout: Optional timeout in seconds.

    Raises:
        FFmpegError: the binary could not be started or the timeout expired.
            The process is killed before the error is raised, and also when
            the awaiting task is cancelled.
    """
    cmd = [binary or get_ffmpeg_path(), "-y", *args]
    logger.debug("Running: %s", " ".join(cmd))
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as exc:
        raise FFmpegError(f"failed to start {cmd[0]}: {exc}") from exc

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        await _kill(process)
        raise FFmpegError(f"FFmpeg timed out after {timeout}s") from exc
    except asyncio.CancelledError:
        await _kill(process)
        raise

    output = stdout.decode("utf-8", errors="replace") if stdout else ""
    if process.returncode != 0:
        logger.error("FFmpeg error (rc=%s): %s", process.returncode, output[-500:])
    return process.returncode, output
