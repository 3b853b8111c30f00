"""Tests for Uploader and PinManager."""

from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from edufs.core.exceptions import NodeConnectionError, PinFailedError, UploadFailedError
from edufs.core.models import ContentID, FileEntry
from edufs.core.pinning import PinManager
from edufs.core.streams import CancelToken, OperationCancelled
from edufs.core.upload import Uploader


if TYPE_CHECKING:
    from tests.conftest import FakeNode


class RecordingReporter:
    """ProgressReporter that records every call."""

    def __init__(self) -> None:
        self.started: list[tuple[str, int]] = []
        self.updates: list[tuple[int, int]] = []
        self.finished: list[str] = []

    def start_task(self, name: str, total: int):
        self.started.append((name, total))
        return lambda n, t: self.updates.append((n, t))

    def finish_task(self, name: str) -> None:
        self.finished.append(name)


@pytest.mark.core
@pytest.mark.tier(1)
class TestUploader:
    """Tests for Uploader."""

    def test_upload_returns_node_cid(self, fake_node: FakeNode) -> None:
        cid = Uploader(fake_node).upload(io.BytesIO(b"hello"), 5, name="a.txt")
        assert cid == fake_node.cid_of(b"hello")
        assert fake_node.blobs[cid] == b"hello"
        assert fake_node.add_calls == ["a.txt"]

    def test_upload_does_not_pin(self, fake_node: FakeNode) -> None:
        Uploader(fake_node).upload(io.BytesIO(b"hello"), 5)
        assert fake_node.pins == set()

    def test_equal_bytes_get_equal_cids(self, fake_node: FakeNode) -> None:
        uploader = Uploader(fake_node)
        first = uploader.upload(io.BytesIO(b"same"), 4)
        second = uploader.upload(io.BytesIO(b"same"), 4)
        assert first == second

    def test_progress_reports_bytes_sent(self, fake_node: FakeNode) -> None:
        updates: list[tuple[int, int]] = []
        Uploader(fake_node).upload(
            io.BytesIO(b"abcdefghij"), 10, progress=lambda n, t: updates.append((n, t))
        )
        assert updates[-1] == (10, 10)
        assert [n for n, _ in updates] == sorted(n for n, _ in updates)

    def test_node_error_becomes_upload_failed(self, fake_node: FakeNode) -> None:
        fake_node.unreachable = True
        with pytest.raises(UploadFailedError) as exc_info:
            Uploader(fake_node).upload(io.BytesIO(b"x"), 1, name="x.bin")
        assert exc_info.value.source == "x.bin"
        assert isinstance(exc_info.value.cause, NodeConnectionError)

    def test_cancelled_token_aborts_upload(self, fake_node: FakeNode) -> None:
        token = CancelToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            Uploader(fake_node).upload(io.BytesIO(b"hello"), 5, cancel=token)
        assert fake_node.blobs == {}

    def test_upload_entry_reports_and_finishes_task(
        self, fake_node: FakeNode, two_file_dir: Path
    ) -> None:
        reporter = RecordingReporter()
        entry = FileEntry("a.txt", two_file_dir / "a.txt", 5)
        cid = Uploader(fake_node).upload_entry(entry, reporter)

        assert cid == fake_node.cid_of(b"hello")
        assert reporter.started == [("a.txt", 5)]
        assert reporter.updates[-1] == (5, 5)
        assert reporter.finished == ["a.txt"]

    def test_upload_entry_finishes_task_on_failure(
        self, fake_node: FakeNode, two_file_dir: Path
    ) -> None:
        reporter = RecordingReporter()
        fake_node.fail_add_for.add("a.txt")
        entry = FileEntry("a.txt", two_file_dir / "a.txt", 5)

        with pytest.raises(UploadFailedError):
            Uploader(fake_node).upload_entry(entry, reporter)
        assert reporter.finished == ["a.txt"]

    def test_unreadable_file_becomes_upload_failed(
        self, fake_node: FakeNode, tmp_path: Path
    ) -> None:
        entry = FileEntry("gone.txt", tmp_path / "gone.txt", 3)
        with pytest.raises(UploadFailedError) as exc_info:
            Uploader(fake_node).upload_entry(entry)
        assert isinstance(exc_info.value.cause, OSError)
        assert fake_node.add_calls == []


@pytest.mark.core
@pytest.mark.tier(1)
class TestPinManager:
    """Tests for PinManager."""

    def test_pin_is_idempotent(self, fake_node: FakeNode) -> None:
        cid = Uploader(fake_node).upload(io.BytesIO(b"hello"), 5)
        pins = PinManager(fake_node)
        pins.pin(cid)
        pins.pin(cid)
        assert fake_node.pins == {cid}
        assert fake_node.pin_calls == [(cid, True), (cid, True)]

    def test_non_recursive_pin(self, fake_node: FakeNode) -> None:
        cid = Uploader(fake_node).upload(io.BytesIO(b"hello"), 5)
        PinManager(fake_node).pin(cid, recursive=False)
        assert fake_node.pin_calls == [(cid, False)]

    def test_refused_pin_raises_pin_failed(self, fake_node: FakeNode) -> None:
        cid = Uploader(fake_node).upload(io.BytesIO(b"hello"), 5)
        fake_node.fail_pin_for.add(cid)
        with pytest.raises(PinFailedError) as exc_info:
            PinManager(fake_node).pin(cid)
        assert exc_info.value.cid == cid
        assert not isinstance(exc_info.value, UploadFailedError)

    def test_unknown_cid_raises_pin_failed(self, fake_node: FakeNode) -> None:
        with pytest.raises(PinFailedError):
            PinManager(fake_node).pin(ContentID("fake-unknown"))
