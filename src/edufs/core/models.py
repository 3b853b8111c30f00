"""Core domain models for edufs.

These models are pure Python dataclasses with no I/O dependencies.
They represent the values flowing through the publishing pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from edufs.core.exceptions import EdufsError


class ContentID(str):
    """Opaque content identifier returned by a CAS node.

    Only equality and the string form are meaningful. The value is kept
    exactly as the node returned it.

    Example:
        >>> cid = ContentID("bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi")
        >>> cid == "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"
        True
    """

    __slots__ = ()

    def __new__(cls, value: str) -> ContentID:
        if not value:
            raise ValueError("ContentID cannot be empty")
        if value != value.strip():
            raise ValueError(f"ContentID has surrounding whitespace: {value!r}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"ContentID({str.__repr__(self)})"


@dataclass(frozen=True, slots=True)
class FileEntry:
    """One regular file found by the walker.

    Attributes:
        relative_path: Path relative to the publish root, always with
            forward slashes. For a single-file root this is the file name.
        absolute_path: Location of the file on the local filesystem.
        size_bytes: File size at walk time.
    """

    relative_path: str
    absolute_path: Path
    size_bytes: int

    def __post_init__(self) -> None:
        """Validate entry fields after initialization."""
        if not self.relative_path:
            raise ValueError("FileEntry relative_path cannot be empty")
        if self.relative_path.startswith("/"):
            raise ValueError(
                f"FileEntry relative_path must be relative: {self.relative_path}"
            )
        if self.size_bytes < 0:
            raise ValueError("FileEntry size_bytes cannot be negative")


class UploadStatus(Enum):
    """Outcome of uploading and pinning one file."""

    PUBLISHED = "published"
    UPLOAD_FAILED = "upload_failed"
    PIN_FAILED = "pin_failed"


@dataclass(frozen=True, slots=True)
class UploadResult:
    """Per-file outcome of a publish.

    The cid is present exactly when the upload itself succeeded, which
    includes the PIN_FAILED case: the content reached the node but is not
    protected from garbage collection.

    Attributes:
        entry: The walked file.
        status: What happened to it.
        cid: Content identifier returned by the node, if uploaded.
        error: The failure, if status is not PUBLISHED.
    """

    entry: FileEntry
    status: UploadStatus
    cid: ContentID | None = None
    error: EdufsError | None = None

    def __post_init__(self) -> None:
        """Enforce the cid/error pairing for each status."""
        if self.status is UploadStatus.UPLOAD_FAILED:
            if self.cid is not None:
                raise ValueError("A failed upload cannot carry a cid")
        elif self.cid is None:
            raise ValueError(f"{self.status.value} result requires a cid")
        if (self.status is UploadStatus.PUBLISHED) != (self.error is None):
            raise ValueError("error must be set exactly when the file was not published")

    @classmethod
    def published(cls, entry: FileEntry, cid: ContentID) -> UploadResult:
        return cls(entry=entry, status=UploadStatus.PUBLISHED, cid=cid)

    @classmethod
    def upload_failed(cls, entry: FileEntry, error: EdufsError) -> UploadResult:
        return cls(entry=entry, status=UploadStatus.UPLOAD_FAILED, error=error)

    @classmethod
    def pin_failed(
        cls, entry: FileEntry, cid: ContentID, error: EdufsError
    ) -> UploadResult:
        return cls(entry=entry, status=UploadStatus.PIN_FAILED, cid=cid, error=error)

    @property
    def ok(self) -> bool:
        """True if the file was uploaded and pinned."""
        return self.status is UploadStatus.PUBLISHED

    @property
    def uploaded(self) -> bool:
        """True if the node holds the content, pinned or not."""
        return self.cid is not None


class RootKind(Enum):
    """How the root identifier of a publish was chosen."""

    # Node returned a CID for the whole tree.
    DIRECTORY = "directory"
    # The publish root was a single file.
    FILE = "file"
    # Per-file upload over a directory: the CID of the first uploaded file
    # stands in for the tree. It does not address the directory.
    FIRST_FILE = "first_file"


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Aggregate outcome of publishing a file or directory tree.

    Attributes:
        root_cid: Identifier for the published root (see root_kind).
        per_file: One result per walked file, in walk order.
        root_kind: How root_cid was selected.
    """

    root_cid: ContentID
    per_file: tuple[UploadResult, ...]
    root_kind: RootKind

    @property
    def root_is_partial(self) -> bool:
        """True if root_cid names a single member file, not the whole tree."""
        return self.root_kind is RootKind.FIRST_FILE

    @property
    def succeeded(self) -> tuple[UploadResult, ...]:
        return tuple(r for r in self.per_file if r.ok)

    @property
    def failed(self) -> tuple[UploadResult, ...]:
        return tuple(r for r in self.per_file if not r.ok)

    @property
    def pin_failures(self) -> tuple[UploadResult, ...]:
        return tuple(r for r in self.per_file if r.status is UploadStatus.PIN_FAILED)

    @property
    def has_failures(self) -> bool:
        return any(not r.ok for r in self.per_file)

    def cid_for(self, relative_path: str) -> ContentID | None:
        """Return the cid recorded for a relative path, if any."""
        for result in self.per_file:
            if result.entry.relative_path == relative_path:
                return result.cid
        return None


@dataclass(frozen=True, slots=True)
class NameBinding:
    """A naming-service record pointing at a content identifier.

    Attributes:
        name: The record name (key name or key id).
        cid: The identifier the record was bound to.
        value: Path the naming service reports for the record,
            typically "/ipfs/<cid>".
    """

    name: str
    cid: ContentID
    value: str = ""


@dataclass(frozen=True, slots=True)
class NodeIdentity:
    """Identity and version information reported by a node."""

    node_id: str
    agent_version: str = ""
    protocol_version: str = ""


@dataclass(frozen=True, slots=True)
class DirectoryListing:
    """Result of adding a whole directory to a node in one call.

    Attributes:
        root_cid: Identifier of the directory node.
        files: Identifier of each file, keyed by relative path.
    """

    root_cid: ContentID
    files: Mapping[str, ContentID] = field(default_factory=dict)
