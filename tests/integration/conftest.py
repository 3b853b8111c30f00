"""Shared fixtures for integration tests.

FakeKuboDaemon answers the subset of the Kubo RPC API that edufs uses,
so KuboNode can be exercised end to end through httpx.MockTransport.
"""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import PurePosixPath

import httpx
import pytest

from edufs.adapters.node.kubo import KuboNode


_FILENAME_RE = re.compile(rb'filename="([^"]*)"')
_CONTENT_TYPE_RE = re.compile(rb"Content-Type: ([^\r\n]+)", re.IGNORECASE)
_BOUNDARY_RE = re.compile(r"boundary=([^;\s]+)")


def _cid(data: bytes) -> str:
    return "bafk" + hashlib.sha256(data).hexdigest()[:40]


def _error(message: str) -> httpx.Response:
    return httpx.Response(500, json={"Message": message, "Code": 0, "Type": "error"})


class FakeKuboDaemon:
    """In-memory stand-in for a Kubo daemon's /api/v0 endpoints."""

    def __init__(self) -> None:
        self.blocks: dict[str, bytes] = {}
        self.pins: set[str] = set()
        self.keys: set[str] = {"self"}
        self.names: dict[str, str] = {}
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        command = request.url.path.removeprefix("/api/v0/")
        self.calls.append(command)
        params = request.url.params
        if command == "add":
            return self._add(request)
        if command == "pin/add":
            cid = params["arg"]
            if cid not in self.blocks:
                return _error(f"pin: block {cid} not found")
            self.pins.add(cid)
            return httpx.Response(200, json={"Pins": [cid]})
        if command == "cat":
            cid = params["arg"]
            if cid not in self.blocks:
                return _error(f"block was not found locally (offline): {cid}")
            return httpx.Response(200, content=self.blocks[cid])
        if command == "name/publish":
            key = params["key"]
            if key not in self.keys:
                return _error("no key by the given name was found")
            name = f"k51{key}"
            self.names[name] = params["arg"]
            return httpx.Response(200, json={"Name": name, "Value": params["arg"]})
        if command == "name/resolve":
            name = params["arg"].removeprefix("/ipns/")
            if name not in self.names:
                return _error(f"could not resolve name: {name}")
            return httpx.Response(200, json={"Path": self.names[name]})
        if command == "id":
            return httpx.Response(
                200,
                json={
                    "ID": "12D3KooWDaemon",
                    "AgentVersion": "kubo/0.29.0/",
                    "ProtocolVersion": "ipfs/0.1.0",
                },
            )
        return httpx.Response(404, text="404 page not found")

    def _parts(self, request: httpx.Request) -> list[tuple[str, str, bytes]]:
        match = _BOUNDARY_RE.search(request.headers["content-type"])
        assert match is not None
        boundary = b"--" + match.group(1).strip('"').encode()
        parts = []
        for chunk in request.content.split(boundary)[1:]:
            if chunk.startswith(b"--"):
                break
            head, _, body = chunk.lstrip(b"\r\n").partition(b"\r\n\r\n")
            filename = _FILENAME_RE.search(head)
            content_type = _CONTENT_TYPE_RE.search(head)
            assert filename is not None and content_type is not None
            parts.append(
                (
                    filename.group(1).decode(),
                    content_type.group(1).decode(),
                    body.removesuffix(b"\r\n"),
                )
            )
        return parts

    def _add(self, request: httpx.Request) -> httpx.Response:
        children: dict[str, list[str]] = {}
        directories: list[str] = []
        lines = []
        for name, content_type, body in self._parts(request):
            if content_type == "application/x-directory":
                directories.append(name)
                children.setdefault(name, [])
                continue
            cid = _cid(body)
            self.blocks[cid] = body
            lines.append({"Name": name, "Hash": cid, "Size": str(len(body))})
            parent = str(PurePosixPath(name).parent)
            children.setdefault(parent, []).append(f"{PurePosixPath(name).name}={cid}")

        # Deepest directories first so parents can link their children.
        for directory in sorted(directories, key=lambda d: d.count("/"), reverse=True):
            listing = "\n".join(sorted(children[directory])).encode()
            cid = _cid(b"dir:" + listing)
            self.blocks[cid] = listing
            lines.append({"Name": directory, "Hash": cid, "Size": str(len(listing))})
            parent = str(PurePosixPath(directory).parent)
            if parent != ".":
                children.setdefault(parent, []).append(
                    f"{PurePosixPath(directory).name}/={cid}"
                )

        return httpx.Response(200, text="".join(json.dumps(line) + "\n" for line in lines))


@pytest.fixture
def daemon() -> FakeKuboDaemon:
    return FakeKuboDaemon()


@pytest.fixture
def kubo_node(daemon: FakeKuboDaemon):
    """KuboNode wired to the fake daemon."""
    client = httpx.Client(
        base_url="http://127.0.0.1:5001/api/v0/", transport=httpx.MockTransport(daemon)
    )
    node = KuboNode("http://127.0.0.1:5001", client=client)
    yield node
    node.close()
