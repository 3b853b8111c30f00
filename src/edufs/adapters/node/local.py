"""Local content-addressed node backed by a directory.

Implements NodePort without a daemon. Useful for local development,
offline publishing and testing. Content is kept in a hashfs store:
identifiers are sha256 hex digests and blobs are sharded into
subdirectories by digest prefix.
"""

from __future__ import annotations

import contextlib
import json
import re
import shutil
import tempfile
import threading
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO

from hashfs import HashFS

from edufs.core.exceptions import NodeError, NodeNotFoundError
from edufs.core.models import ContentID, NameBinding, NodeIdentity


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from edufs.core.models import DirectoryListing, FileEntry
    from edufs.core.ports import ProgressCallback
    from edufs.core.streams import CancelToken


# Chunk size for reading content (64KB)
_CHUNK_SIZE = 64 * 1024

_SHARD_DEPTH = 2
_SHARD_WIDTH = 2

_SHA256_HEX = re.compile(r"[0-9a-f]{64}")

PROTOCOL_VERSION = "edufs/local/1.0.0"


class LocalNode:
    """Directory-backed node storing content by sha256 digest.

    Layout under root::

        blocks/ab/cd/ef01...   content, one file per identifier (hashfs)
        pins.json              sorted list of pinned identifiers
        names.json             {name: identifier}
        node.json              {"id": ...}

    Attributes:
        root: Directory holding the store.
    """

    def __init__(self, root: Path | str) -> None:
        """Initialize the store, creating its directories if needed.

        Args:
            root: Directory holding the store.
        """
        self.root = Path(root)
        self._blocks = self.root / "blocks"
        self._tmp = self.root / "tmp"
        self._lock = threading.Lock()
        self._blocks.mkdir(parents=True, exist_ok=True)
        self._tmp.mkdir(parents=True, exist_ok=True)
        self._fs = HashFS(
            str(self._blocks),
            depth=_SHARD_DEPTH,
            width=_SHARD_WIDTH,
            algorithm="sha256",
        )

    @property
    def supports_directory_add(self) -> bool:
        return False

    def close(self) -> None:
        """Nothing to release; present for NodePort."""

    def has(self, cid: str) -> bool:
        """Return True if content for cid is stored."""
        # Anything but a digest could name a path outside the blob store.
        return bool(_SHA256_HEX.fullmatch(cid)) and self._fs.exists(cid)

    def add(self, stream: BinaryIO, *, name: str | None = None) -> ContentID:  # noqa: ARG002
        # hashfs reads its input twice (hash, then copy), so the incoming
        # stream is spooled once to a seekable file.
        try:
            with tempfile.TemporaryFile(dir=self._tmp) as spool:
                shutil.copyfileobj(stream, spool, _CHUNK_SIZE)
                spool.seek(0)
                address = self._fs.put(spool)
        except OSError as e:
            raise NodeError(f"Local store write failed: {e}", "add", cause=e) from e
        return ContentID(address.id)

    def add_directory(
        self,
        root: Path,
        entries: Sequence[FileEntry],
        *,
        progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> DirectoryListing:
        """Whole-directory add is not supported by the local store.

        Raises:
            NodeError: Always.
        """
        raise NodeError("Local node cannot add a directory as one DAG", "add")

    def pin(self, cid: ContentID, *, recursive: bool = True) -> None:  # noqa: ARG002
        if not self.has(cid):
            raise NodeNotFoundError(f"Cannot pin {cid}: not found", "pin")
        with self._lock:
            pins = set(self._read_json("pins.json", []))
            if cid in pins:
                return
            pins.add(str(cid))
            self._write_json("pins.json", sorted(pins))

    def pinned(self) -> set[str]:
        """Return every pinned identifier."""
        return set(self._read_json("pins.json", []))

    @contextlib.contextmanager
    def cat(self, cid: ContentID) -> Iterator[Iterator[bytes]]:
        if not self.has(cid):
            raise NodeNotFoundError(f"{cid} not found", "cat")
        try:
            f = self._fs.open(cid)
        except OSError as e:
            raise NodeError(f"Cannot read {cid}: {e}", "cat", cause=e) from e
        with f:
            yield iter(lambda: f.read(_CHUNK_SIZE), b"")

    def publish_name(self, name: str, cid: ContentID) -> NameBinding:
        if not self.has(cid):
            raise NodeNotFoundError(f"Cannot publish {cid}: not found", "name/publish")
        with self._lock:
            names = self._read_json("names.json", {})
            names[name] = str(cid)
            self._write_json("names.json", names)
        return NameBinding(name=name, cid=cid, value=f"/ipfs/{cid}")

    def resolve_name(self, name: str) -> str:
        key = name.removeprefix("/ipns/")
        names = self._read_json("names.json", {})
        if key not in names:
            raise NodeNotFoundError(f"Name '{key}' not found", "name/resolve")
        return f"/ipfs/{names[key]}"

    def identity(self) -> NodeIdentity:
        with self._lock:
            data = self._read_json("node.json", {})
            if "id" not in data:
                data = {"id": uuid.uuid4().hex}
                self._write_json("node.json", data)
        from edufs import __version__

        return NodeIdentity(
            node_id=data["id"],
            agent_version=f"edufs-local/{__version__}",
            protocol_version=PROTOCOL_VERSION,
        )

    def _read_json(self, name: str, default: Any) -> Any:
        path = self.root / name
        if not path.exists():
            return default
        try:
            with path.open() as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise NodeError(f"Local store file {path} is unreadable: {e}", name, cause=e) from e

    def _write_json(self, name: str, data: Any) -> None:
        path = self.root / name
        tmp_path = path.with_suffix(".tmp")
        try:
            with tmp_path.open("w") as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(path)
        except OSError as e:
            raise NodeError(f"Cannot write {path}: {e}", name, cause=e) from e
