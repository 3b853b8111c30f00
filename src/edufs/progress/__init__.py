"""Progress display adapters."""

from edufs.progress.rich_progress import RichProgressReporter


__all__ = ["RichProgressReporter"]
