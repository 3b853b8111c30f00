"""Retrieval unit: fetch content by identifier."""

from __future__ import annotations

import contextlib
import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from edufs.core.exceptions import (
    ContentNotFoundError,
    NodeError,
    NodeNotFoundError,
    RetrievalError,
)
from edufs.core.models import ContentID


if TYPE_CHECKING:
    from collections.abc import Iterator

    from edufs.core.ports import NodePort, ProgressCallback


logger = logging.getLogger(__name__)


def _translate(cid: str, error: NodeError) -> ContentNotFoundError | RetrievalError:
    if isinstance(error, NodeNotFoundError):
        return ContentNotFoundError(cid, cause=error)
    return RetrievalError(cid, cause=error)


class Retriever:
    """Reads content from a node as a stream of byte chunks."""

    def __init__(self, node: NodePort) -> None:
        self._node = node

    @contextlib.contextmanager
    def retrieve(self, cid: str) -> Iterator[Iterator[bytes]]:
        """Open the content of cid.

        The node stream is released when the block exits, including when
        the caller stops reading early.

        Example:
            >>> with retriever.retrieve(cid) as chunks:  # doctest: +SKIP
            ...     for chunk in chunks:
            ...         sys.stdout.buffer.write(chunk)

        Raises:
            ContentNotFoundError: If the node does not know cid.
            RetrievalError: For any other node or transport failure.
        """
        try:
            content_id = ContentID(cid)
        except ValueError as e:
            raise ContentNotFoundError(cid, cause=e) from e

        try:
            with self._node.cat(content_id) as chunks:
                yield self._guarded(cid, chunks)
        except NodeError as e:
            raise _translate(cid, e) from e

    def _guarded(self, cid: str, chunks: Iterator[bytes]) -> Iterator[bytes]:
        try:
            yield from chunks
        except NodeError as e:
            raise _translate(cid, e) from e

    def read_all(self, cid: str) -> bytes:
        """Return the complete content of cid."""
        with self.retrieve(cid) as chunks:
            return b"".join(chunks)

    def download(
        self,
        cid: str,
        dest: Path,
        progress: ProgressCallback | None = None,
    ) -> Path:
        """Write the content of cid to dest.

        Data goes to a temporary file next to dest that is renamed into
        place once complete, so a failed retrieval leaves dest untouched.

        Args:
            cid: Identifier to fetch.
            dest: Output file path; parent directories are created.
            progress: Optional callback(bytes_written, 0); total is unknown.

        Returns:
            The destination path.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            delete=False, dir=dest.parent, prefix=f".{dest.name}.", suffix=".part"
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)

        try:
            written = 0
            with self.retrieve(cid) as chunks, tmp_path.open("wb") as out:
                for chunk in chunks:
                    out.write(chunk)
                    written += len(chunk)
                    if progress is not None:
                        progress(written, 0)
            tmp_path.replace(dest)
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.debug("Downloaded %s (%d bytes) to %s", cid, written, dest)
        return dest
