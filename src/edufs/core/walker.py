"""Filesystem walker producing FileEntry sequences for a publish root.

Entries come out in lexicographic order of their forward-slash relative
path. The order is produced lazily: siblings are sorted with directories
keyed as ``name + "/"``, which places every descendant of a directory
exactly where a global sort of relative paths would put it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from edufs.core.exceptions import PathNotFoundError, WalkError
from edufs.core.models import FileEntry


if TYPE_CHECKING:
    from collections.abc import Iterator


logger = logging.getLogger(__name__)


def _sort_key(entry: os.DirEntry[str], is_dir: bool) -> str:
    return entry.name + "/" if is_dir else entry.name


class FileWalk:
    """Lazy, restartable sequence of the regular files under a root.

    Every call to iter() walks the filesystem again, so two iterations
    over an unmodified tree yield equal sequences.

    Attributes:
        root: The publish root (file or directory).
        follow_symlinks: Whether symbolic links below the root are followed.
    """

    def __init__(self, root: Path, *, follow_symlinks: bool = False) -> None:
        self.root = root
        self.follow_symlinks = follow_symlinks

    @property
    def is_single_file(self) -> bool:
        return not self.root.is_dir()

    def __iter__(self) -> Iterator[FileEntry]:
        if self.is_single_file:
            yield self._single_file_entry()
            return
        yield from self._walk_dir(self.root, "", frozenset())

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def total_bytes(self) -> int:
        """Sum of entry sizes, walking the tree once."""
        return sum(entry.size_bytes for entry in self)

    def _single_file_entry(self) -> FileEntry:
        try:
            size = self.root.stat().st_size
        except OSError as e:
            raise WalkError(f"Cannot stat {self.root}: {e}", self.root, e) from e
        return FileEntry(
            relative_path=self.root.name,
            absolute_path=self.root.absolute(),
            size_bytes=size,
        )

    def _walk_dir(
        self, directory: Path, prefix: str, ancestors: frozenset[Path]
    ) -> Iterator[FileEntry]:
        real = directory.resolve()
        if real in ancestors:
            raise WalkError(f"Directory cycle through {directory}", directory)
        ancestors = ancestors | {real}
        try:
            with os.scandir(directory) as it:
                children = list(it)
        except OSError as e:
            raise WalkError(f"Cannot list {directory}: {e}", directory, e) from e

        keyed: list[tuple[str, os.DirEntry[str], bool]] = []
        for child in children:
            if child.is_symlink() and not self.follow_symlinks:
                raise WalkError(
                    f"Symbolic link not followed: {child.path}", Path(child.path)
                )
            try:
                is_dir = child.is_dir()
                is_file = child.is_file()
            except OSError as e:
                raise WalkError(f"Cannot stat {child.path}: {e}", Path(child.path), e) from e
            if not is_dir and not is_file:
                # Sockets, FIFOs and device nodes carry no publishable content.
                logger.debug("Skipping special file %s", child.path)
                continue
            keyed.append((_sort_key(child, is_dir), child, is_dir))

        keyed.sort(key=lambda item: item[0])
        for _key, child, is_dir in keyed:
            relative = f"{prefix}{child.name}"
            if is_dir:
                yield from self._walk_dir(Path(child.path), relative + "/", ancestors)
                continue
            try:
                size = child.stat().st_size
            except OSError as e:
                raise WalkError(f"Cannot stat {child.path}: {e}", Path(child.path), e) from e
            yield FileEntry(
                relative_path=relative,
                absolute_path=Path(child.path).absolute(),
                size_bytes=size,
            )


def walk(root: Path | str, *, follow_symlinks: bool = False) -> FileWalk:
    """Prepare a walk over the regular files under root.

    A root that is a single file yields exactly one entry named after the
    file, so files and folders share one publishing path.

    Args:
        root: File or directory to walk.
        follow_symlinks: Follow symbolic links below the root instead of
            failing on them.

    Returns:
        A restartable FileWalk.

    Raises:
        PathNotFoundError: If root does not exist.
    """
    root_path = Path(root)
    if not root_path.exists():
        raise PathNotFoundError(root_path)
    return FileWalk(root_path, follow_symlinks=follow_symlinks)
