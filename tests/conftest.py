"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
shared fixtures for the test suite.
"""

from __future__ import annotations

import contextlib
import hashlib
import logging
from typing import TYPE_CHECKING

import pytest

from edufs.core.exceptions import NodeConnectionError, NodeError, NodeNotFoundError
from edufs.core.models import ContentID, DirectoryListing, NameBinding, NodeIdentity


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path
    from typing import BinaryIO

    from edufs.core.models import FileEntry
    from edufs.core.ports import ProgressCallback
    from edufs.core.streams import CancelToken


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, ports, and services")
    config.addinivalue_line("markers", "node: Node adapters (kubo, local)")
    config.addinivalue_line("markers", "progress: Rich progress integration")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow)",
    )


class FakeNode:
    """In-memory NodePort for tests.

    Identifiers are "fake-" plus the sha256 of the content, so equal bytes
    get equal identifiers. Failures can be scripted per file name or per
    identifier.
    """

    def __init__(self, *, directory_add: bool = False) -> None:
        self.blobs: dict[str, bytes] = {}
        self.pins: set[str] = set()
        self.names: dict[str, str] = {}
        self.add_calls: list[str | None] = []
        self.pin_calls: list[tuple[str, bool]] = []
        self.directory_calls: list[list[str]] = []
        self.fail_add_for: set[str] = set()
        self.fail_pin_for: set[str] = set()
        self.fail_publish = False
        self.unreachable = False
        self.closed = False
        self._directory_add = directory_add

    @property
    def supports_directory_add(self) -> bool:
        return self._directory_add

    @staticmethod
    def cid_of(data: bytes) -> ContentID:
        return ContentID("fake-" + hashlib.sha256(data).hexdigest())

    def _check_reachable(self, operation: str) -> None:
        if self.unreachable:
            raise NodeConnectionError("connection refused", operation)

    def add(self, stream: BinaryIO, *, name: str | None = None) -> ContentID:
        self._check_reachable("add")
        self.add_calls.append(name)
        chunks = []
        for chunk in iter(lambda: stream.read(4), b""):
            chunks.append(chunk)
        if name in self.fail_add_for:
            raise NodeError(f"add refused for {name}", "add")
        data = b"".join(chunks)
        cid = self.cid_of(data)
        self.blobs[cid] = data
        return cid

    def add_directory(
        self,
        root: Path,
        entries: Sequence[FileEntry],
        *,
        progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> DirectoryListing:
        self._check_reachable("add")
        if not self._directory_add:
            raise NodeError("directory add unsupported", "add")
        self.directory_calls.append([e.relative_path for e in entries])
        total = sum(e.size_bytes for e in entries)
        sent = 0
        files: dict[str, ContentID] = {}
        manifest = []
        for entry in entries:
            if cancel is not None:
                cancel.raise_if_cancelled()
            data = entry.absolute_path.read_bytes()
            cid = self.cid_of(data)
            self.blobs[cid] = data
            files[entry.relative_path] = cid
            manifest.append(f"{entry.relative_path}={cid}")
            sent += len(data)
            if progress is not None:
                progress(sent, total)
        root_data = "\n".join(manifest).encode()
        root_cid = ContentID("fake-dir-" + hashlib.sha256(root_data).hexdigest())
        self.blobs[root_cid] = root_data
        return DirectoryListing(root_cid=root_cid, files=files)

    def pin(self, cid: ContentID, *, recursive: bool = True) -> None:
        self._check_reachable("pin")
        self.pin_calls.append((str(cid), recursive))
        if cid in self.fail_pin_for:
            raise NodeError(f"pin refused for {cid}", "pin")
        if cid not in self.blobs:
            raise NodeNotFoundError(f"{cid} not found", "pin")
        self.pins.add(str(cid))

    @contextlib.contextmanager
    def cat(self, cid: ContentID) -> Iterator[Iterator[bytes]]:
        self._check_reachable("cat")
        if cid not in self.blobs:
            raise NodeNotFoundError(f"{cid} not found", "cat")
        data = self.blobs[cid]
        yield iter([data[i : i + 3] for i in range(0, len(data), 3)])

    def publish_name(self, name: str, cid: ContentID) -> NameBinding:
        self._check_reachable("name/publish")
        if self.fail_publish:
            raise NodeError(f"no key named {name}", "name/publish")
        self.names[name] = str(cid)
        return NameBinding(name=name, cid=cid, value=f"/ipfs/{cid}")

    def resolve_name(self, name: str) -> str:
        self._check_reachable("name/resolve")
        key = name.removeprefix("/ipns/")
        if key not in self.names:
            raise NodeNotFoundError(f"could not resolve name {key}", "name/resolve")
        return f"/ipfs/{self.names[key]}"

    def identity(self) -> NodeIdentity:
        self._check_reachable("id")
        return NodeIdentity(
            node_id="12D3KooWFake", agent_version="fake/1.0", protocol_version="ipfs/0.1.0"
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_edufs_logger() -> Iterator[None]:
    """Undo the CLI's logging setup so caplog sees library records."""
    yield
    logger = logging.getLogger("edufs")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def fake_node() -> FakeNode:
    """In-memory node supporting per-file add only."""
    return FakeNode()


@pytest.fixture
def fake_directory_node() -> FakeNode:
    """In-memory node that can add a whole directory as one DAG."""
    return FakeNode(directory_add=True)


@pytest.fixture
def two_file_dir(tmp_path: Path) -> Path:
    """Directory with a.txt="hello" and b.txt="world"."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "a.txt").write_text("hello")
    (root / "b.txt").write_text("world")
    return root


@pytest.fixture
def nested_dir(tmp_path: Path) -> Path:
    """Directory with nested folders whose names sort around '/'."""
    root = tmp_path / "tree"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.txt").write_text("ab")
    (root / "a-c.txt").write_text("a-c")
    (root / "a" / "z").mkdir()
    (root / "a" / "z" / "deep.txt").write_text("deep")
    (root / "B.txt").write_text("upper")
    (root / "index.html").write_text("<h1>hi</h1>")
    return root
