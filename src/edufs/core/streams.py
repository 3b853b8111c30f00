"""Stream decorators used while transferring content.

ProgressStream forwards bytes unchanged while counting them, and
CancelToken lets a caller stop a transfer between two reads.
"""

from __future__ import annotations

import io
import threading
import time
from typing import TYPE_CHECKING, BinaryIO


if TYPE_CHECKING:
    from edufs.core.ports import ProgressCallback


class OperationCancelled(Exception):
    """Raised from inside a stream read when its CancelToken fires.

    The core translates this into PublishCancelledError; it never
    escapes the library.
    """


class CancelToken:
    """Cancellation and deadline signal shared by one invocation.

    Example:
        >>> token = CancelToken(timeout=30.0)
        >>> token.cancelled
        False
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Create a token.

        Args:
            timeout: Seconds from now after which the token counts as
                cancelled. None means no deadline.
        """
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Trigger cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled()


class ProgressStream(io.RawIOBase):
    """Read-only pass-through stream that reports cumulative bytes read.

    Wraps a binary source without buffering it: every read is forwarded
    to the source and the number of bytes returned is added to a running
    total before the observer is called.

    Args:
        source: Binary stream to read from.
        total: Expected size in bytes, passed through to the observer.
        observer: Optional callback(bytes_read, total).
        cancel: Optional token checked before every read.
    """

    def __init__(
        self,
        source: BinaryIO,
        total: int,
        observer: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        super().__init__()
        self._source = source
        self._total = total
        self._observer = observer
        self._cancel = cancel
        self._count = 0

    @property
    def bytes_read(self) -> int:
        return self._count

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self._cancel is not None:
            self._cancel.raise_if_cancelled()
        chunk = self._source.read(size)
        if chunk:
            self._count += len(chunk)
            if self._observer is not None:
                self._observer(self._count, self._total)
        return chunk

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        chunk = self.read(len(buffer))
        n = len(chunk)
        buffer[:n] = chunk
        return n

    def readall(self) -> bytes:
        return self.read(-1)

    def seekable(self) -> bool:
        return self._source.seekable()

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        # HTTP clients rewind file bodies before sending; keep the count in step.
        position = self._source.seek(offset, whence)
        self._count = position
        return position

    def tell(self) -> int:
        return self._source.tell()

    def fileno(self) -> int:
        return self._source.fileno()

    def close(self) -> None:
        # The source belongs to the caller.
        super().close()
