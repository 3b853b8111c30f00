"""Formatting utilities for domain logic."""

from __future__ import annotations

from edufs.core.models import UploadStatus


def status_to_color(status: UploadStatus) -> str:
    """Map an upload status to a color name.

    Args:
        status: Outcome of one file's upload.

    Returns:
        Color name string:
        - PUBLISHED -> "green"
        - PIN_FAILED -> "yellow"
        - UPLOAD_FAILED -> "red"
    """
    color_map = {
        UploadStatus.PUBLISHED: "green",
        UploadStatus.PIN_FAILED: "yellow",
        UploadStatus.UPLOAD_FAILED: "red",
    }
    return color_map.get(status, "")


def format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
