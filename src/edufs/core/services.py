"""Core domain services for edufs."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from edufs.core.exceptions import (
    ConfigurationError,
    EdufsError,
    NodeError,
    NoFilesPublishedError,
    PinFailedError,
    PublishCancelledError,
    UploadFailedError,
)
from edufs.core.models import PublishResult, RootKind, UploadResult
from edufs.core.pinning import PinManager
from edufs.core.ports import NullProgressReporter
from edufs.core.streams import OperationCancelled
from edufs.core.upload import Uploader
from edufs.core.walker import walk


if TYPE_CHECKING:
    from edufs.core.models import FileEntry
    from edufs.core.ports import ExecutorPort, NodePort, ProgressReporter
    from edufs.core.streams import CancelToken
    from edufs.core.walker import FileWalk


logger = logging.getLogger(__name__)


class PublishMode(Enum):
    """How a directory is sent to the node."""

    # Whole-directory add when the node supports it, per-file otherwise.
    AUTO = "auto"
    # Always add the tree as one DAG.
    DIRECTORY = "directory"
    # Upload and pin each file on its own.
    PER_FILE = "per_file"


class Publisher:
    """Publishes a file or directory tree to a node.

    Walks the root, uploads and pins content, and selects a root
    identifier. Per-file failures are collected rather than raised; the
    publish fails as a whole only when nothing was uploaded.

    Root selection:
        * Whole-directory add: the directory CID returned by the node.
        * Single file: that file's CID.
        * Per-file add over a directory: the CID of the first uploaded
          file in walk order. This does not address the directory itself;
          PublishResult.root_is_partial reports it.
    """

    def __init__(
        self,
        node: NodePort,
        progress: ProgressReporter | None = None,
        executor: ExecutorPort | None = None,
        mode: PublishMode = PublishMode.AUTO,
        *,
        follow_symlinks: bool = False,
    ) -> None:
        self._node = node
        self._uploader = Uploader(node)
        self._pins = PinManager(node)
        self._progress = progress if progress is not None else NullProgressReporter()
        self._executor = executor
        self._mode = mode
        self._follow_symlinks = follow_symlinks

    def publish(
        self, root: Path | str, *, cancel: CancelToken | None = None
    ) -> PublishResult:
        """Publish root and return the aggregate result.

        Args:
            root: File or directory to publish.
            cancel: Optional token; when it fires the walk stops and the
                in-flight upload is aborted.

        Returns:
            PublishResult with one UploadResult per walked file, in walk order.

        Raises:
            PathNotFoundError: If root does not exist.
            WalkError: If part of the tree cannot be walked.
            ConfigurationError: If DIRECTORY mode is forced on a node without it.
            UploadFailedError: If a whole-directory add or a single-file root
                upload fails.
            PinFailedError: If a single-file root cannot be pinned.
            NoFilesPublishedError: If no file was found or none uploaded.
            PublishCancelledError: If cancel fires; carries partial results.
        """
        root_path = Path(root)
        files = walk(root_path, follow_symlinks=self._follow_symlinks)

        if self._use_directory_add(files):
            return self._publish_directory(root_path, files, cancel)
        return self._publish_per_file(root_path, files, cancel)

    def _use_directory_add(self, files: FileWalk) -> bool:
        if files.is_single_file:
            return False
        if self._mode is PublishMode.PER_FILE:
            return False
        supported = self._node.supports_directory_add
        if self._mode is PublishMode.DIRECTORY and not supported:
            raise ConfigurationError(
                "This node cannot add a directory as a single DAG; "
                "use per-file mode instead"
            )
        return supported

    def _publish_entry(
        self, entry: FileEntry, cancel: CancelToken | None
    ) -> UploadResult:
        """Upload and pin one file, recording failure instead of raising."""
        try:
            cid = self._uploader.upload_entry(entry, self._progress, cancel)
        except UploadFailedError as e:
            logger.warning("Upload failed for %s: %s", entry.relative_path, e.cause or e)
            return UploadResult.upload_failed(entry, e)

        try:
            self._pins.pin(cid)
        except PinFailedError as e:
            logger.warning("Pin failed for %s (%s): %s", entry.relative_path, cid, e.cause or e)
            return UploadResult.pin_failed(entry, cid, e)

        return UploadResult.published(entry, cid)

    def _publish_per_file(
        self, root: Path, files: FileWalk, cancel: CancelToken | None
    ) -> PublishResult:
        if self._executor is None:
            results: list[UploadResult] = []
            try:
                for entry in files:
                    if cancel is not None:
                        cancel.raise_if_cancelled()
                    results.append(self._publish_entry(entry, cancel))
            except OperationCancelled:
                raise PublishCancelledError(root, tuple(results)) from None
            per_file = tuple(results)
        else:
            per_file = self._publish_concurrently(root, list(files), cancel)

        return self._aggregate(root, per_file, files.is_single_file)

    def _publish_concurrently(
        self, root: Path, entries: list[FileEntry], cancel: CancelToken | None
    ) -> tuple[UploadResult, ...]:
        """Run uploads on the executor, keeping results in walk order."""

        def publish_one(entry: FileEntry) -> UploadResult:
            if cancel is not None:
                cancel.raise_if_cancelled()
            return self._publish_entry(entry, cancel)

        # Slots are indexed by walk position, not completion order.
        slots: list[UploadResult | None] = [None] * len(entries)
        cancelled = False
        executor = self._executor
        assert executor is not None
        with executor:
            futures = [executor.submit(publish_one, entry) for entry in entries]
            for index, future in enumerate(futures):
                try:
                    slots[index] = future.result()  # type: ignore[assignment]
                except OperationCancelled:
                    cancelled = True

        if cancelled:
            completed = tuple(r for r in slots if r is not None)
            raise PublishCancelledError(root, completed)
        return tuple(r for r in slots if r is not None)

    def _aggregate(
        self, root: Path, per_file: tuple[UploadResult, ...], single_file: bool
    ) -> PublishResult:
        if single_file and per_file and per_file[0].error is not None:
            raise per_file[0].error

        uploaded = [r for r in per_file if r.uploaded]
        if not uploaded:
            raise NoFilesPublishedError(root, per_file)

        first = uploaded[0]
        assert first.cid is not None
        kind = RootKind.FILE if single_file else RootKind.FIRST_FILE
        if kind is RootKind.FIRST_FILE:
            logger.info(
                "Root CID %s is the CID of %s, not of the directory",
                first.cid,
                first.entry.relative_path,
            )
        return PublishResult(root_cid=first.cid, per_file=per_file, root_kind=kind)

    def _publish_directory(
        self, root: Path, files: FileWalk, cancel: CancelToken | None
    ) -> PublishResult:
        entries = list(files)
        if not entries:
            raise NoFilesPublishedError(root)

        total = sum(entry.size_bytes for entry in entries)
        task = root.name or str(root)
        callback = self._progress.start_task(task, total)
        try:
            listing = self._node.add_directory(
                root, entries, progress=callback, cancel=cancel
            )
        except OperationCancelled:
            raise PublishCancelledError(root) from None
        except NodeError as e:
            raise UploadFailedError(str(root), cause=e) from e
        finally:
            self._progress.finish_task(task)

        # One recursive pin on the directory covers every file in it.
        pin_error: EdufsError | None = None
        try:
            self._pins.pin(listing.root_cid, recursive=True)
        except PinFailedError as e:
            logger.warning("Pin failed for directory %s: %s", listing.root_cid, e.cause or e)
            pin_error = e

        results: list[UploadResult] = []
        for entry in entries:
            cid = listing.files.get(entry.relative_path)
            if cid is None:
                missing = UploadFailedError(
                    entry.relative_path,
                    cause=NodeError("Node did not report a CID for this file", "add"),
                )
                results.append(UploadResult.upload_failed(entry, missing))
            elif pin_error is not None:
                results.append(UploadResult.pin_failed(entry, cid, pin_error))
            else:
                results.append(UploadResult.published(entry, cid))

        logger.debug("Added directory %s -> %s", root, listing.root_cid)
        return PublishResult(
            root_cid=listing.root_cid,
            per_file=tuple(results),
            root_kind=RootKind.DIRECTORY,
        )
