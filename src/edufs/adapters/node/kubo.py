"""Kubo (go-ipfs) node adapter using the HTTP RPC API and httpx."""

from __future__ import annotations

import contextlib
import json
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, BinaryIO

import httpx

from edufs.core.exceptions import NodeConnectionError, NodeError, NodeNotFoundError
from edufs.core.models import ContentID, DirectoryListing, NameBinding, NodeIdentity
from edufs.core.streams import ProgressStream


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from edufs.core.models import FileEntry
    from edufs.core.ports import ProgressCallback
    from edufs.core.streams import CancelToken


# Chunk size for streaming responses (64KB)
_CHUNK_SIZE = 64 * 1024

_DIRECTORY_CONTENT_TYPE = "application/x-directory"
_FILE_CONTENT_TYPE = "application/octet-stream"

# Fragments of Kubo error messages that mean "this content is unknown".
_NOT_FOUND_MARKERS = (
    "not found",
    "no link named",
    "invalid path",
    "invalid cid",
    "failed to decode",
    "could not resolve name",
)


class _LazyFile:
    """File body that is opened on first read and closed at EOF.

    Lets a multipart request list every file of a tree without holding
    one open descriptor per file.
    """

    def __init__(
        self,
        path: Path,
        size: int,
        observer: ProgressCallback | None,
        cancel: CancelToken | None,
    ) -> None:
        self._path = path
        self._size = size
        self._observer = observer
        self._cancel = cancel
        self._file: BinaryIO | None = None
        self._stream: ProgressStream | None = None
        self._done = False

    def read(self, size: int = -1) -> bytes:
        if self._done:
            return b""
        if self._stream is None:
            self._file = self._path.open("rb")
            self._stream = ProgressStream(self._file, self._size, self._observer, self._cancel)
        chunk = self._stream.read(size)
        if not chunk:
            self.close()
        return chunk

    def close(self) -> None:
        self._done = True
        if self._file is not None:
            self._file.close()
            self._file = None


def _offset_observer(
    progress: ProgressCallback, offset: int, total: int
) -> ProgressCallback:
    return lambda sent, _size: progress(offset + sent, total)


def _parse_ndjson(text: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class KuboNode:
    """NodePort implementation talking to a Kubo daemon's /api/v0 RPC.

    One httpx.Client is held for the lifetime of the node and reused by
    every call; it is safe to share between threads.

    Example:
        >>> node = KuboNode("http://127.0.0.1:5001")  # doctest: +SKIP
        >>> node.identity().agent_version  # doctest: +SKIP
        'kubo/0.29.0/'
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = 60.0,
        cid_version: int = 1,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url: API root of the daemon, e.g. "http://127.0.0.1:5001".
            timeout: Per-request timeout in seconds, None to wait forever.
            cid_version: CID version requested for added content.
            client: Optional preconfigured httpx client (tests inject a
                client with a MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self._cid_version = cid_version
        self._client = client or httpx.Client(
            base_url=f"{self.base_url}/api/v0/",
            timeout=httpx.Timeout(timeout),
        )

    @property
    def supports_directory_add(self) -> bool:
        return True

    def __enter__(self) -> KuboNode:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, operation: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.post(endpoint, **kwargs)
        except httpx.TimeoutException as e:
            raise NodeConnectionError(
                f"Node timed out during {operation}", operation, cause=e
            ) from e
        except httpx.TransportError as e:
            raise NodeConnectionError(
                f"Cannot reach node at {self.base_url}: {e}", operation, cause=e
            ) from e
        except OSError as e:
            # Request bodies read local files while the request is sent.
            raise NodeError(
                f"Cannot read content for {operation}: {e}", operation, cause=e
            ) from e
        if response.is_error:
            raise self._translate_error(response, operation)
        return response

    def _translate_error(self, response: httpx.Response, operation: str) -> NodeError:
        """Map a Kubo error response to a NodeError subclass.

        Kubo reports command failures as HTTP 500 with a JSON body
        {"Message": ..., "Code": ..., "Type": "error"}.
        """
        try:
            message = str(response.json().get("Message", ""))
        except (json.JSONDecodeError, AttributeError, UnicodeDecodeError):
            message = response.text.strip()
        if not message:
            message = f"HTTP {response.status_code}"

        if response.status_code == 404 and message.startswith("404"):
            return NodeError(
                f"Node API has no '{operation}' endpoint ({message})", operation
            )
        lowered = message.lower()
        if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
            return NodeNotFoundError(message, operation)
        return NodeError(f"Node error during {operation}: {message}", operation)

    def add(self, stream: BinaryIO, *, name: str | None = None) -> ContentID:
        filename = PurePosixPath(name).name if name else "file"
        response = self._request(
            "add",
            "add",
            params={
                "pin": "false",
                "quieter": "true",
                "cid-version": str(self._cid_version),
            },
            files={"file": (filename, stream, _FILE_CONTENT_TYPE)},
        )
        lines = _parse_ndjson(response.text)
        if not lines or "Hash" not in lines[-1]:
            raise NodeError("Node returned no CID for added content", "add")
        return ContentID(lines[-1]["Hash"])

    def add_directory(
        self,
        root: Path,
        entries: Sequence[FileEntry],
        *,
        progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> DirectoryListing:
        root_name = root.resolve().name or "root"
        total = sum(entry.size_bytes for entry in entries)

        # Directories must precede their contents in the multipart body.
        parts: list[tuple[str, tuple[str, Any, str]]] = [
            ("file", (root_name, b"", _DIRECTORY_CONTENT_TYPE))
        ]
        declared: set[str] = set()
        offset = 0
        for entry in entries:
            parents = PurePosixPath(entry.relative_path).parents
            for parent in reversed(list(parents)[:-1]):
                key = str(parent)
                if key not in declared:
                    declared.add(key)
                    parts.append(
                        ("file", (f"{root_name}/{key}", b"", _DIRECTORY_CONTENT_TYPE))
                    )
            observer = (
                _offset_observer(progress, offset, total) if progress is not None else None
            )
            body = _LazyFile(entry.absolute_path, entry.size_bytes, observer, cancel)
            parts.append(
                ("file", (f"{root_name}/{entry.relative_path}", body, _FILE_CONTENT_TYPE))
            )
            offset += entry.size_bytes

        try:
            response = self._request(
                "add",
                "add",
                params={
                    "pin": "false",
                    "cid-version": str(self._cid_version),
                    "progress": "false",
                },
                files=parts,
            )
        finally:
            for _field, (_name, body, _type) in parts:
                if isinstance(body, _LazyFile):
                    body.close()

        root_cid: ContentID | None = None
        files: dict[str, ContentID] = {}
        prefix = f"{root_name}/"
        for line in _parse_ndjson(response.text):
            added_name = line.get("Name", "")
            if "Hash" not in line:
                continue
            if added_name == root_name:
                root_cid = ContentID(line["Hash"])
            elif added_name.startswith(prefix):
                files[added_name[len(prefix):]] = ContentID(line["Hash"])

        if root_cid is None:
            raise NodeError(f"Node returned no CID for directory {root_name}", "add")
        return DirectoryListing(root_cid=root_cid, files=files)

    def pin(self, cid: ContentID, *, recursive: bool = True) -> None:
        self._request(
            "pin",
            "pin/add",
            params={"arg": str(cid), "recursive": "true" if recursive else "false"},
        )

    @contextlib.contextmanager
    def cat(self, cid: ContentID) -> Iterator[Iterator[bytes]]:
        request = self._client.build_request("POST", "cat", params={"arg": str(cid)})
        try:
            response = self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise NodeConnectionError("Node timed out during cat", "cat", cause=e) from e
        except httpx.TransportError as e:
            raise NodeConnectionError(
                f"Cannot reach node at {self.base_url}: {e}", "cat", cause=e
            ) from e

        try:
            if response.is_error:
                response.read()
                raise self._translate_error(response, "cat")
            yield self._iter_body(response)
        finally:
            response.close()

    def _iter_body(self, response: httpx.Response) -> Iterator[bytes]:
        try:
            yield from response.iter_bytes(_CHUNK_SIZE)
        except httpx.HTTPError as e:
            raise NodeConnectionError(f"Stream interrupted: {e}", "cat", cause=e) from e

    def publish_name(self, name: str, cid: ContentID) -> NameBinding:
        response = self._request(
            "name/publish",
            "name/publish",
            params={"arg": f"/ipfs/{cid}", "key": name},
        )
        data = response.json()
        return NameBinding(
            name=data.get("Name") or name,
            cid=cid,
            value=data.get("Value", f"/ipfs/{cid}"),
        )

    def resolve_name(self, name: str) -> str:
        path = name if name.startswith("/ipns/") else f"/ipns/{name}"
        response = self._request(
            "name/resolve",
            "name/resolve",
            params={"arg": path, "recursive": "true"},
        )
        return str(response.json()["Path"])

    def identity(self) -> NodeIdentity:
        data = self._request("id", "id").json()
        return NodeIdentity(
            node_id=data.get("ID", ""),
            agent_version=data.get("AgentVersion", ""),
            protocol_version=data.get("ProtocolVersion", ""),
        )
