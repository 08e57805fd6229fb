"""Supported video container formats."""

from __future__ import annotations

SUPPORTED_VIDEO_EXTENSIONS: tuple[str, ...] = (
    ".mp4", ".avi", ".mov", ".mkv", ".wmv", ".flv", ".webm",
)


def video_extension(key: str) -> str:
    """Return the lower-cased extension of an object key, including the dot.

    The extension is everything from the last dot of the final path segment,
    so a bare ``videos/.mp4`` still counts as ``.mp4``.
    """
    name = key.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def is_supported_video(key: str) -> bool:
    return video_extension(key) in SUPPORTED_VIDEO_EXTENSIONS


def supported_formats_label() -> str:
    return ", ".join(ext.lstrip(".") for ext in SUPPORTED_VIDEO_EXTENSIONS)
