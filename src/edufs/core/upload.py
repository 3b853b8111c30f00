"""Upload unit: stream one file's bytes to a node and return its CID."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from edufs.core.exceptions import NodeError, UploadFailedError
from edufs.core.ports import NullProgressReporter
from edufs.core.streams import ProgressStream


if TYPE_CHECKING:
    from edufs.core.models import ContentID, FileEntry
    from edufs.core.ports import NodePort, ProgressCallback, ProgressReporter
    from edufs.core.streams import CancelToken


logger = logging.getLogger(__name__)


class Uploader:
    """Adds content to a node without pinning it."""

    def __init__(self, node: NodePort) -> None:
        self._node = node

    def upload(
        self,
        stream: BinaryIO,
        size_hint: int,
        *,
        name: str | None = None,
        progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> ContentID:
        """Upload the bytes of stream and return the node's identifier.

        The stream is wrapped in a ProgressStream when progress or
        cancellation is requested; bytes reach the node unchanged.

        Args:
            stream: Readable binary stream, owned by the caller.
            size_hint: Expected size, used for progress totals only.
            name: Label for the content (file name), also used in errors.
            progress: Optional callback(bytes_sent, size_hint).
            cancel: Optional token checked before every read.

        Returns:
            ContentID assigned by the node.

        Raises:
            UploadFailedError: If the node or transport fails.
            OperationCancelled: If cancel fires mid-stream.
        """
        source: BinaryIO = stream
        if progress is not None or cancel is not None:
            source = ProgressStream(stream, size_hint, progress, cancel)  # type: ignore[assignment]

        try:
            cid = self._node.add(source, name=name)
        except NodeError as e:
            raise UploadFailedError(name or "<stream>", cause=e) from e

        logger.debug("Uploaded %s -> %s", name or "<stream>", cid)
        return cid

    def upload_entry(
        self,
        entry: FileEntry,
        progress: ProgressReporter | None = None,
        cancel: CancelToken | None = None,
    ) -> ContentID:
        """Open a walked file and upload it.

        The file handle is closed and the progress task finished on every
        exit path.

        Raises:
            UploadFailedError: If the file cannot be read or the upload fails.
            OperationCancelled: If cancel fires mid-stream.
        """
        if progress is None:
            progress = NullProgressReporter()

        callback = progress.start_task(entry.relative_path, entry.size_bytes)
        try:
            try:
                f = entry.absolute_path.open("rb")
            except OSError as e:
                raise UploadFailedError(entry.relative_path, cause=e) from e
            with f:
                return self.upload(
                    f,
                    entry.size_bytes,
                    name=entry.relative_path,
                    progress=callback,
                    cancel=cancel,
                )
        finally:
            progress.finish_task(entry.relative_path)
