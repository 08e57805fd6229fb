"""FFmpeg-based frame extraction adapter.

Samples frames with the ``fps`` video filter and packages them into a ZIP
archive. Implements :class:`FrameExtractionPort`.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
import zipfile
from pathlib import Path
from typing import Optional

from processor.src.adapters.outbound.ffmpeg.ffmpeg_base import run_ffmpeg
from processor.src.core.exceptions import ExtractionError, FFmpegError

logger = logging.getLogger(__name__)

_DEFAULT_TEMP_DIR = "/tmp/video-processor"


def create_zip(files: list[Path], zip_path: Path) -> None:
    """Write *files* into a deflated archive under their base names."""
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for file in files:
            archive.write(file, arcname=file.name)


class FFmpegFrameExtractor:
    """Extracts frames from a video with the ffmpeg command line.

    Work files are named after the video's stem, which the orchestrator keys
    by process id, so concurrent extractions never share a path.
    """

    def __init__(
        self,
        temp_dir: str | Path = _DEFAULT_TEMP_DIR,
        fps: float = 1.0,
        frame_format: str = "png",
        timeout_seconds: Optional[float] = 600,
        binary: Optional[str] = None,
    ) -> None:
        self._temp_dir = Path(temp_dir)
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        self._fps = fps
        self._frame_format = frame_format
        self._timeout = timeout_seconds
        self._binary = binary

    # -- Port interface --------------------------------------------------------

    async def extract(self, video_path: str) -> tuple[str, int]:
        """Return ``(archive_path, frame_count)`` for *video_path*.

        The frame directory is always removed; the archive is removed too
        unless it is returned to the caller.
        """
        stem = Path(video_path).stem
        work_dir = self._temp_dir / f"{stem}_frames"
        zip_path = self._temp_dir / f"{stem}_frames.zip"
        work_dir.mkdir(parents=True, exist_ok=True)

        try:
            frames = await self._extract_frames(video_path, work_dir)
            logger.info("Extracted %d frames from %s", len(frames), video_path)

            loop = asyncio.get_running_loop()
            zipping = loop.run_in_executor(None, create_zip, frames, zip_path)
            try:
                await asyncio.shield(zipping)
            except OSError as exc:
                zip_path.unlink(missing_ok=True)
                raise ExtractionError(f"failed to create zip: {exc}") from exc
            except asyncio.CancelledError:
                # The zip thread cannot be interrupted; clean up once it has let go of the files.
                await asyncio.wait({zipping})
                if not zipping.cancelled():
                    zipping.exception()
                zip_path.unlink(missing_ok=True)
                raise
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

        return str(zip_path), len(frames)

    # -- helpers ---------------------------------------------------------------

    async def _extract_frames(self, video_path: str, work_dir: Path) -> list[Path]:
        pattern = work_dir / f"frame_%04d.{self._frame_format}"
        try:
            returncode, output = await run_ffmpeg(
                ["-i", video_path, "-vf", f"fps={self._fps:g}", str(pattern)],
                binary=self._binary,
                timeout=self._timeout,
            )
        except FFmpegError as exc:
            raise ExtractionError(f"ffmpeg error: {exc}", output=exc.output) from exc

        if returncode != 0:
            raise ExtractionError(
                f"ffmpeg error: exit status {returncode}, output: {output}",
                output=output,
            )

        frames = sorted(work_dir.glob(f"*.{self._frame_format}"))
        if not frames:
            raise ExtractionError("no frames extracted from video", output=output)
        return frames
