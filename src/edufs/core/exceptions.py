"""Domain exceptions for edufs.

All library errors inherit from EdufsError, allowing users to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path

    from edufs.core.models import UploadResult


class EdufsError(Exception):
    """Base class for all edufs exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class ConfigurationError(EdufsError):
    """Raised for configuration problems (bad endpoint, unsupported mode)."""

    pass


class PathNotFoundError(EdufsError):
    """Raised when a local path to publish does not exist.

    Attributes:
        path: The missing path.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Path not found: {path}")

    @property
    def recovery_hint(self) -> str:
        """Suggest checking the path."""
        return f"Check that '{self.path}' exists and is spelled correctly"


class WalkError(EdufsError):
    """Raised when part of a tree cannot be walked.

    Attributes:
        path: The path that could not be walked.
        cause: The underlying exception, if any.
    """

    def __init__(
        self, message: str, path: Path, cause: Exception | None = None
    ) -> None:
        self.path = path
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest fixing permissions or removing links."""
        if self.cause is None:
            return f"Remove or replace the symbolic link at {self.path}"
        return f"Check read permissions on {self.path}"


class NodeError(EdufsError):
    """Base class for errors reported by a CAS node or its transport.

    Attributes:
        operation: Node operation that failed (e.g. "add", "pin").
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(message)


class NodeConnectionError(NodeError):
    """Raised when the node cannot be reached or does not answer in time."""

    @property
    def recovery_hint(self) -> str:
        """Suggest checking the endpoint."""
        return "Check that the node is running and --node points at its API"


class NodeNotFoundError(NodeError):
    """Raised by a node adapter when requested content is unknown."""

    pass


class UploadFailedError(EdufsError):
    """Raised when content could not be added to the node.

    Attributes:
        source: Path or label of the content being uploaded.
        cause: The underlying exception, if any.
    """

    def __init__(self, source: str, cause: Exception | None = None) -> None:
        self.source = source
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Upload failed for {source}{detail}")

    @property
    def recovery_hint(self) -> str | None:
        """Forward the hint of the underlying error, if it has one."""
        if isinstance(self.cause, EdufsError):
            return self.cause.recovery_hint
        return None


class PinFailedError(EdufsError):
    """Raised when an uploaded identifier could not be pinned.

    The content is on the node but may be garbage collected. Retrying
    only the pin is enough to recover.

    Attributes:
        cid: The identifier that was not pinned.
        cause: The underlying exception, if any.
    """

    def __init__(self, cid: str, cause: Exception | None = None) -> None:
        self.cid = cid
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Pin failed for {cid}{detail}")

    @property
    def recovery_hint(self) -> str:
        """Suggest pinning again."""
        return f"The content was uploaded; retry pinning {self.cid}"


class NoFilesPublishedError(EdufsError):
    """Raised when a publish produced no uploaded file.

    Attributes:
        root: The publish root.
        failures: Per-file results, all failed (empty if nothing was walked).
    """

    def __init__(
        self, root: Path, failures: tuple[UploadResult, ...] = ()
    ) -> None:
        self.root = root
        self.failures = failures
        if failures:
            message = f"No files published from {root}: all {len(failures)} uploads failed"
        else:
            message = f"No files published from {root}: no files found"
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest the first failure's hint, or adding files."""
        if not self.failures:
            return "Add at least one regular file under the path"
        first = self.failures[0].error
        if first is not None and first.recovery_hint:
            return first.recovery_hint
        return "Check node connectivity and retry"


class PublishCancelledError(EdufsError):
    """Raised when a publish is cancelled or runs past its deadline.

    Attributes:
        root: The publish root.
        partial: Results completed before cancellation, in walk order.
    """

    def __init__(self, root: Path, partial: tuple[UploadResult, ...] = ()) -> None:
        self.root = root
        self.partial = partial
        super().__init__(
            f"Publish of {root} cancelled after {len(partial)} file(s)"
        )

    @property
    def recovery_hint(self) -> str:
        """Suggest rerunning; uploads are content-addressed."""
        return "Run the publish again; already uploaded files will reuse their CIDs"


class NamePublishError(EdufsError):
    """Raised when a name cannot be bound to an identifier.

    Attributes:
        name: The record name.
        cid: The identifier it should have pointed to.
        cause: The underlying exception, if any.
    """

    def __init__(self, name: str, cid: str, cause: Exception | None = None) -> None:
        self.name = name
        self.cid = cid
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Publishing name '{name}' -> {cid} failed{detail}")

    @property
    def recovery_hint(self) -> str:
        """Suggest checking the key."""
        return f"Check that key '{self.name}' exists on the node (ipfs key list)"


class NameResolveError(EdufsError):
    """Raised when a name cannot be resolved.

    Attributes:
        name: The record name.
        cause: The underlying exception, if any.
    """

    def __init__(self, name: str, cause: Exception | None = None) -> None:
        self.name = name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Resolving name '{name}' failed{detail}")


class ContentNotFoundError(EdufsError):
    """Raised when the node does not know the requested identifier.

    Attributes:
        cid: The identifier that was requested.
    """

    def __init__(self, cid: str, cause: Exception | None = None) -> None:
        self.cid = cid
        self.cause = cause
        super().__init__(f"Content not found: {cid}")

    @property
    def recovery_hint(self) -> str:
        """Suggest verifying the identifier."""
        return "Verify the CID and that the content is pinned on some reachable node"


class RetrievalError(EdufsError):
    """Raised when content exists but could not be retrieved.

    Attributes:
        cid: The identifier that was requested.
        cause: The underlying exception, if any.
    """

    def __init__(self, cid: str, cause: Exception | None = None) -> None:
        self.cid = cid
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Retrieving {cid} failed{detail}")

    @property
    def recovery_hint(self) -> str | None:
        """Forward the hint of the underlying error, if it has one."""
        if isinstance(self.cause, EdufsError):
            return self.cause.recovery_hint
        return None
