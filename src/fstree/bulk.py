"""Bulk operations: copy, move, delete and empty whole trees.

Directory operations list the tree through the traversal engine first and
then act on the listing, so entries created while the operation runs (for
example a destination nested inside the source) are never picked up.

The polymorphic ``copy``/``move``/``delete``/``empty`` resolve the path kind
with a single stat and hand the stat result to the dedicated operation.
"""

from __future__ import annotations

import os
import stat as stat_mod

import structlog

from fstree.config import get_settings
from fstree.entries import (
    create_dir,
    create_dir_sync,
    ensure_parent_dir,
    ensure_parent_dir_sync,
)
from fstree.errors import CrossDeviceError, NotADirError, NotAFileError, NotFoundError
from fstree.listing import collect, collect_sync
from fstree.paths import PathKind, PathLike, kind_of
from fstree.primitives import AsyncFileSystem, FileSystem
from fstree.walker import Entry, WalkOptions

logger = structlog.get_logger()


def _entry(entry: Entry) -> Entry:
    return entry


def _tree_options(threads: int | None, *, follow_symlinks: bool = True) -> WalkOptions:
    return WalkOptions(recursive=True, map=_entry, threads=threads, follow_symlinks=follow_symlinks)


_CHILDREN = WalkOptions(map=_entry, follow_symlinks=False)


def _missing(path: str) -> NotFoundError:
    return NotFoundError(message="No such file or directory", path=path)


def _require_file(path: str, st: os.stat_result | None) -> os.stat_result:
    if st is None:
        raise _missing(path)
    if stat_mod.S_ISDIR(st.st_mode):
        raise NotAFileError(message="Is a directory", path=path)
    return st


def _require_dir(path: str, st: os.stat_result | None) -> os.stat_result:
    if st is None:
        raise _missing(path)
    if not stat_mod.S_ISDIR(st.st_mode):
        raise NotADirError(message="Not a directory", path=path)
    return st


def _split(entries: list[Entry]) -> tuple[list[Entry], list[Entry]]:
    dirs = [entry for entry in entries if entry.is_dir]
    others = [entry for entry in entries if not entry.is_dir]
    return dirs, others


def _use_fallback(src: str, dst: str) -> bool:
    if not get_settings().move.cross_device_fallback:
        return False
    logger.warning("move.cross_device_fallback", src=src, dst=dst)
    return True


# Blocking


def _copy_bytes_sync(fs: FileSystem, src: str, dst: str, st: os.stat_result) -> None:
    fs.copy_bytes(src, dst)
    fs.chmod(dst, stat_mod.S_IMODE(st.st_mode))


def _copy_file_sync(fs: FileSystem, src: str, dst: str, st: os.stat_result) -> None:
    ensure_parent_dir_sync(dst, fs=fs)
    _copy_bytes_sync(fs, src, dst, st)


def _copy_dir_sync(fs: FileSystem, src: str, dst: str, st: os.stat_result, threads: int | None) -> None:
    entries = collect_sync(src, _tree_options(threads), fs=fs)
    dirs, others = _split(entries)
    # Directories stay writable until every file is in place; source modes
    # are applied deepest-first at the end.
    create_dir_sync(dst, fs=fs)
    for entry in dirs:
        create_dir_sync(os.path.join(dst, entry.relative), fs=fs)
    copied = 0
    for entry in others:
        if not entry.is_file:
            logger.debug("copy_dir.skipped", path=entry.path, kind=entry.kind.value)
            continue
        _copy_bytes_sync(fs, entry.path, os.path.join(dst, entry.relative), entry.stat)
        copied += 1
    for entry in reversed(dirs):
        fs.chmod(os.path.join(dst, entry.relative), entry.mode)
    fs.chmod(dst, stat_mod.S_IMODE(st.st_mode))
    logger.info("copy_dir.completed", src=src, dst=dst, dirs=len(dirs), files=copied)


def _move_file_sync(fs: FileSystem, src: str, dst: str) -> None:
    ensure_parent_dir_sync(dst, fs=fs)
    try:
        fs.replace(src, dst)
    except CrossDeviceError:
        if not _use_fallback(src, dst):
            raise
        _copy_bytes_sync(fs, src, dst, fs.stat(src))
        fs.unlink(src)


def _move_dir_sync(fs: FileSystem, src: str, dst: str, st: os.stat_result, threads: int | None) -> None:
    ensure_parent_dir_sync(dst, fs=fs)
    try:
        fs.rename(src, dst)
    except CrossDeviceError:
        if not _use_fallback(src, dst):
            raise
        _copy_dir_sync(fs, src, dst, st, threads)
        _delete_dir_sync(fs, src, threads)
    logger.info("move_dir.completed", src=src, dst=dst)


def _delete_dir_sync(fs: FileSystem, path: str, threads: int | None) -> None:
    entries = collect_sync(path, _tree_options(threads, follow_symlinks=False), fs=fs)
    dirs, others = _split(entries)
    for entry in others:
        fs.unlink(entry.path)
    # Breadth-first order reversed puts every directory after its descendants.
    for entry in reversed(dirs):
        fs.rmdir(entry.path)
    fs.rmdir(path)
    logger.info("delete_dir.completed", path=path, dirs=len(dirs) + 1, files=len(others))


def _empty_dir_sync(fs: FileSystem, path: str) -> None:
    children = collect_sync(path, _CHILDREN, fs=fs)
    for child in children:
        if child.is_dir:
            _delete_dir_sync(fs, child.path, None)
        else:
            fs.unlink(child.path)
    logger.info("empty_dir.completed", path=path, removed=len(children))


def copy_file_sync(src: PathLike, dst: PathLike, *, fs: FileSystem | None = None) -> None:
    """Copy the bytes of ``src`` to ``dst`` and give ``dst`` the source mode.

    Missing parents of ``dst`` are created.
    """
    fs = fs or FileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    _copy_file_sync(fs, src, dst, _require_file(src, fs.try_stat(src)))


def copy_dir_sync(
    src: PathLike,
    dst: PathLike,
    *,
    threads: int | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Recursively copy ``src`` to ``dst``, replicating permission bits.

    ``threads`` bounds concurrent directory reads while listing ``src``.
    A failure part-way leaves a partial tree at ``dst``.
    """
    fs = fs or FileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    _copy_dir_sync(fs, src, dst, _require_dir(src, fs.try_stat(src)), threads)


def move_file_sync(src: PathLike, dst: PathLike, *, fs: FileSystem | None = None) -> None:
    fs = fs or FileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    _require_file(src, fs.try_lstat(src))
    _move_file_sync(fs, src, dst)


def move_dir_sync(
    src: PathLike,
    dst: PathLike,
    *,
    threads: int | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Rename ``src`` to ``dst``; across devices, copy then delete ``src``."""
    fs = fs or FileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    _move_dir_sync(fs, src, dst, _require_dir(src, fs.try_stat(src)), threads)


def delete_dir_sync(path: PathLike, *, threads: int | None = None, fs: FileSystem | None = None) -> None:
    """Remove ``path`` and everything below it. A missing path is a no-op.

    Symlinks inside the tree are removed, never followed.
    """
    fs = fs or FileSystem()
    path = os.fspath(path)
    st = fs.try_lstat(path)
    if st is None:
        return
    _require_dir(path, st)
    _delete_dir_sync(fs, path, threads)


def empty_dir_sync(path: PathLike, *, fs: FileSystem | None = None) -> None:
    """Leave ``path`` as an existing, empty directory."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    st = fs.try_stat(path)
    if st is None:
        create_dir_sync(path, fs=fs)
        return
    _require_dir(path, st)
    _empty_dir_sync(fs, path)


def copy_sync(src: PathLike, dst: PathLike, *, threads: int | None = None, fs: FileSystem | None = None) -> None:
    """Copy a file or a directory tree."""
    fs = fs or FileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    st = fs.try_stat(src)
    kind = kind_of(st)
    if kind is PathKind.MISSING:
        raise _missing(src)
    if kind is PathKind.DIRECTORY:
        _copy_dir_sync(fs, src, dst, st, threads)
    else:
        _copy_file_sync(fs, src, dst, st)


def move_sync(src: PathLike, dst: PathLike, *, threads: int | None = None, fs: FileSystem | None = None) -> None:
    """Move a file or a directory tree."""
    fs = fs or FileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    st = fs.try_lstat(src)
    kind = kind_of(st)
    if kind is PathKind.MISSING:
        raise _missing(src)
    if kind is PathKind.DIRECTORY:
        _move_dir_sync(fs, src, dst, st, threads)
    else:
        _move_file_sync(fs, src, dst)


def delete_sync(path: PathLike, *, threads: int | None = None, fs: FileSystem | None = None) -> None:
    """Delete a file, symlink or directory tree; a missing path is a no-op."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    kind = kind_of(fs.try_lstat(path))
    if kind is PathKind.DIRECTORY:
        _delete_dir_sync(fs, path, threads)
    elif kind is PathKind.FILE:
        fs.unlink(path)


def empty_sync(path: PathLike, *, fs: FileSystem | None = None) -> None:
    """Empty a file or a directory; a missing path becomes an empty directory."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    kind = kind_of(fs.try_stat(path))
    if kind is PathKind.MISSING:
        create_dir_sync(path, fs=fs)
    elif kind is PathKind.DIRECTORY:
        _empty_dir_sync(fs, path)
    else:
        fs.truncate(path)


# Async


async def _copy_bytes(fs: AsyncFileSystem, src: str, dst: str, st: os.stat_result) -> None:
    await fs.copy_bytes(src, dst)
    await fs.chmod(dst, stat_mod.S_IMODE(st.st_mode))


async def _copy_file(fs: AsyncFileSystem, src: str, dst: str, st: os.stat_result) -> None:
    await ensure_parent_dir(dst, fs=fs)
    await _copy_bytes(fs, src, dst, st)


async def _copy_dir(fs: AsyncFileSystem, src: str, dst: str, st: os.stat_result, threads: int | None) -> None:
    entries = await collect(src, _tree_options(threads), fs=fs)
    dirs, others = _split(entries)
    await create_dir(dst, fs=fs)
    for entry in dirs:
        await create_dir(os.path.join(dst, entry.relative), fs=fs)
    copied = 0
    for entry in others:
        if not entry.is_file:
            logger.debug("copy_dir.skipped", path=entry.path, kind=entry.kind.value)
            continue
        await _copy_bytes(fs, entry.path, os.path.join(dst, entry.relative), entry.stat)
        copied += 1
    for entry in reversed(dirs):
        await fs.chmod(os.path.join(dst, entry.relative), entry.mode)
    await fs.chmod(dst, stat_mod.S_IMODE(st.st_mode))
    logger.info("copy_dir.completed", src=src, dst=dst, dirs=len(dirs), files=copied)


async def _move_file(fs: AsyncFileSystem, src: str, dst: str) -> None:
    await ensure_parent_dir(dst, fs=fs)
    try:
        await fs.replace(src, dst)
    except CrossDeviceError:
        if not _use_fallback(src, dst):
            raise
        await _copy_bytes(fs, src, dst, await fs.stat(src))
        await fs.unlink(src)


async def _move_dir(fs: AsyncFileSystem, src: str, dst: str, st: os.stat_result, threads: int | None) -> None:
    await ensure_parent_dir(dst, fs=fs)
    try:
        await fs.rename(src, dst)
    except CrossDeviceError:
        if not _use_fallback(src, dst):
            raise
        await _copy_dir(fs, src, dst, st, threads)
        await _delete_dir(fs, src, threads)
    logger.info("move_dir.completed", src=src, dst=dst)


async def _delete_dir(fs: AsyncFileSystem, path: str, threads: int | None) -> None:
    entries = await collect(path, _tree_options(threads, follow_symlinks=False), fs=fs)
    dirs, others = _split(entries)
    for entry in others:
        await fs.unlink(entry.path)
    for entry in reversed(dirs):
        await fs.rmdir(entry.path)
    await fs.rmdir(path)
    logger.info("delete_dir.completed", path=path, dirs=len(dirs) + 1, files=len(others))


async def _empty_dir(fs: AsyncFileSystem, path: str) -> None:
    children = await collect(path, _CHILDREN, fs=fs)
    for child in children:
        if child.is_dir:
            await _delete_dir(fs, child.path, None)
        else:
            await fs.unlink(child.path)
    logger.info("empty_dir.completed", path=path, removed=len(children))


async def copy_file(src: PathLike, dst: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    await _copy_file(fs, src, dst, _require_file(src, await fs.try_stat(src)))


async def copy_dir(
    src: PathLike,
    dst: PathLike,
    *,
    threads: int | None = None,
    fs: AsyncFileSystem | None = None,
) -> None:
    fs = fs or AsyncFileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    await _copy_dir(fs, src, dst, _require_dir(src, await fs.try_stat(src)), threads)


async def move_file(src: PathLike, dst: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    _require_file(src, await fs.try_lstat(src))
    await _move_file(fs, src, dst)


async def move_dir(
    src: PathLike,
    dst: PathLike,
    *,
    threads: int | None = None,
    fs: AsyncFileSystem | None = None,
) -> None:
    fs = fs or AsyncFileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    await _move_dir(fs, src, dst, _require_dir(src, await fs.try_stat(src)), threads)


async def delete_dir(path: PathLike, *, threads: int | None = None, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    st = await fs.try_lstat(path)
    if st is None:
        return
    _require_dir(path, st)
    await _delete_dir(fs, path, threads)


async def empty_dir(path: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    st = await fs.try_stat(path)
    if st is None:
        await create_dir(path, fs=fs)
        return
    _require_dir(path, st)
    await _empty_dir(fs, path)


async def copy(src: PathLike, dst: PathLike, *, threads: int | None = None, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    st = await fs.try_stat(src)
    kind = kind_of(st)
    if kind is PathKind.MISSING:
        raise _missing(src)
    if kind is PathKind.DIRECTORY:
        await _copy_dir(fs, src, dst, st, threads)
    else:
        await _copy_file(fs, src, dst, st)


async def move(src: PathLike, dst: PathLike, *, threads: int | None = None, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    src, dst = os.fspath(src), os.fspath(dst)
    st = await fs.try_lstat(src)
    kind = kind_of(st)
    if kind is PathKind.MISSING:
        raise _missing(src)
    if kind is PathKind.DIRECTORY:
        await _move_dir(fs, src, dst, st, threads)
    else:
        await _move_file(fs, src, dst)


async def delete(path: PathLike, *, threads: int | None = None, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    kind = kind_of(await fs.try_lstat(path))
    if kind is PathKind.DIRECTORY:
        await _delete_dir(fs, path, threads)
    elif kind is PathKind.FILE:
        await fs.unlink(path)


async def empty(path: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    kind = kind_of(await fs.try_stat(path))
    if kind is PathKind.MISSING:
        await create_dir(path, fs=fs)
    elif kind is PathKind.DIRECTORY:
        await _empty_dir(fs, path)
    else:
        await fs.truncate(path)
