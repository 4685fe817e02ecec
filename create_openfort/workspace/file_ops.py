"""Filesystem primitives used while materializing a project.

Recursive copy with an ignore list, directory emptiness checks and purging,
and in-place file editing.  All operations are synchronous; a run only ever
has one writer.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

VCS_DIR = ".git"


def is_empty(path: str | Path) -> bool:
    """Return ``True`` if *path* has no entries, or only a ``.git`` folder."""
    entries = [entry.name for entry in Path(path).iterdir()]
    return len(entries) == 0 or entries == [VCS_DIR]


def empty_dir(path: str | Path) -> None:
    """Remove everything inside *path* except ``.git``.

    A missing directory is left alone.
    """
    directory = Path(path)
    if not directory.exists():
        return
    for entry in directory.iterdir():
        if entry.name == VCS_DIR:
            continue
        remove_path(entry)


def remove_path(path: str | Path) -> None:
    """Delete a file or directory tree; missing paths are ignored."""
    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target, ignore_errors=True)
    else:
        target.unlink(missing_ok=True)


def copy(src: str | Path, dest: str | Path, ignore: Iterable[str | Path] = ()) -> None:
    """Copy a file or a directory tree from *src* to *dest*.

    Args:
        src: Source file or directory.
        dest: Destination path.  Existing files are overwritten.
        ignore: Absolute source paths to skip, at any depth.
    """
    ignored = {Path(p) for p in ignore}
    _copy(Path(src), Path(dest), ignored)


def copy_dir(src_dir: str | Path, dest_dir: str | Path, ignore: Iterable[str | Path] = ()) -> None:
    """Copy the contents of *src_dir* into *dest_dir*, creating it if needed."""
    ignored = {Path(p) for p in ignore}
    _copy_dir(Path(src_dir), Path(dest_dir), ignored)


def _copy(src: Path, dest: Path, ignored: set[Path]) -> None:
    if src in ignored:
        return
    if src.is_dir():
        _copy_dir(src, dest, ignored)
    else:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dest)


def _copy_dir(src_dir: Path, dest_dir: Path, ignored: set[Path]) -> None:
    dest_dir.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src_dir.iterdir()):
        _copy(entry, dest_dir / entry.name, ignored)


def edit_file(path: str | Path, callback: Callable[[str], str]) -> None:
    """Rewrite *path* with ``callback(current_content)``."""
    file_path = Path(path)
    content = file_path.read_text(encoding="utf-8")
    file_path.write_text(callback(content), encoding="utf-8")
