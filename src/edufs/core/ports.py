"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from concurrent.futures import Future
    from contextlib import AbstractContextManager
    from pathlib import Path

    from edufs.core.models import (
        ContentID,
        DirectoryListing,
        FileEntry,
        NameBinding,
        NodeIdentity,
    )
    from edufs.core.streams import CancelToken

ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class NodePort(Protocol):
    """A content-addressable storage node (Kubo RPC, local store).

    Adapters raise NodeError subclasses: NodeConnectionError when the node
    cannot be reached, NodeNotFoundError when content is unknown.
    """

    @property
    def supports_directory_add(self) -> bool:
        """Whether add_directory() can add a whole tree as one DAG."""
        ...

    def add(self, stream: BinaryIO, *, name: str | None = None) -> ContentID:
        """Store the bytes read from stream and return their identifier.

        The stream is read incrementally and must not be buffered whole.
        Content is not pinned.

        Args:
            stream: Readable binary stream.
            name: Optional file name sent along with the content.
        """
        ...

    def add_directory(
        self,
        root: Path,
        entries: Sequence[FileEntry],
        *,
        progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> DirectoryListing:
        """Add a directory tree as a single DAG.

        Args:
            root: Directory being added.
            entries: Walked files under root, in walk order.
            progress: Optional callback(bytes_sent, total_bytes) across all files.
            cancel: Optional token checked while streaming file content.

        Returns:
            DirectoryListing with the directory CID and one CID per entry.
        """
        ...

    def pin(self, cid: ContentID, *, recursive: bool = True) -> None:
        """Protect cid from garbage collection. Pinning twice is not an error."""
        ...

    def cat(self, cid: ContentID) -> AbstractContextManager[Iterator[bytes]]:
        """Open the content of cid as an iterator of byte chunks.

        The returned context manager releases the underlying connection on
        exit, whether or not the iterator was exhausted.
        """
        ...

    def publish_name(self, name: str, cid: ContentID) -> NameBinding:
        """Bind the naming record for key `name` to cid."""
        ...

    def resolve_name(self, name: str) -> str:
        """Resolve a naming record to the path it currently points at."""
        ...

    def identity(self) -> NodeIdentity:
        """Return node identity and version information."""
        ...

    def close(self) -> None:
        """Release transport resources."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports transfer progress to the user.

    This protocol defines the contract for progress display adapters.
    The core domain uses this to report progress without depending
    on any specific UI library.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a transfer task.

        Args:
            name: Human-readable name for the task (relative file path).
            total: Total bytes to transfer.

        Returns:
            A ProgressCallback to call with (bytes_transferred, total_bytes).
        """
        ...

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name passed to start_task().
        """
        ...


class NullProgressReporter:
    """A ProgressReporter that produces no output.

    Used as the default when no progress reporting is desired.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:  # noqa: ARG002
        """Return a no-op callback."""
        return lambda _transferred, _total: None

    def finish_task(self, name: str) -> None:
        """Do nothing."""
        _ = name  # Unused but required by protocol


@runtime_checkable
class ExecutorPort(Protocol):
    """Executor for parallel task execution.

    Abstracts over concurrent.futures executors to allow dependency injection
    and testing. The core domain uses this protocol instead of directly
    importing ThreadPoolExecutor, keeping concurrency at the edges.
    """

    def submit(
        self, fn: Callable[..., object], *args: object, **kwargs: object
    ) -> Future[object]:  # type: ignore[name-defined, unused-ignore]
        """Submit a function for execution.

        Args:
            fn: Function to execute.
            *args: Positional arguments to pass to fn.
            **kwargs: Keyword arguments to pass to fn.

        Returns:
            Future representing the pending result.
        """
        ...

    def __enter__(self) -> ExecutorPort:
        """Enter context manager."""
        ...

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        """Exit context manager."""
        ...
