"""Core domain module for edufs.

This module contains the publishing pipeline, domain models and port
definitions. It talks to a node only through NodePort and can be tested
with an in-memory fake.
"""

from edufs.core.models import (
    ContentID,
    FileEntry,
    PublishResult,
    RootKind,
    UploadResult,
    UploadStatus,
)
from edufs.core.ports import NodePort, ProgressCallback, ProgressReporter


__all__ = [
    "ContentID",
    "FileEntry",
    "NodePort",
    "ProgressCallback",
    "ProgressReporter",
    "PublishResult",
    "RootKind",
    "UploadResult",
    "UploadStatus",
]
