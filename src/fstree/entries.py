"""Single-entry operations: create, ensure, delete and empty one file or directory."""

from __future__ import annotations

import os
import stat as stat_mod

from fstree.config import get_settings
from fstree.errors import FsTreeError, NotADirError, NotAFileError, NotFoundError
from fstree.paths import PathLike, normalize_mode, resolve_mode
from fstree.primitives import AsyncFileSystem, FileSystem

FileData = bytes | bytearray | memoryview | str


def _to_bytes(data: FileData | None) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _is_dir(st: os.stat_result | None) -> bool:
    return st is not None and stat_mod.S_ISDIR(st.st_mode)


def _not_a_dir(path: str) -> NotADirError:
    return NotADirError(message="Not a directory", path=path)


def _not_a_file(path: str) -> NotAFileError:
    return NotAFileError(message="Is a directory", path=path)


def _ancestors(path: str) -> list[str]:
    """``path`` and its ancestors, nearest first."""
    chain = []
    current = os.path.abspath(path)
    while True:
        chain.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            return chain
        current = parent


# Blocking


def _make_dirs_sync(fs: FileSystem, path: str) -> None:
    """mkdir -p with default modes; an existing non-directory raises NotADirError."""
    missing = []
    for candidate in _ancestors(path):
        st = fs.try_stat(candidate)
        if st is None:
            missing.append(candidate)
            continue
        if not stat_mod.S_ISDIR(st.st_mode):
            raise _not_a_dir(candidate)
        break
    for candidate in reversed(missing):
        try:
            fs.mkdir(candidate)
        except FsTreeError:
            # Lost a race with a concurrent creator.
            if not _is_dir(fs.try_stat(candidate)):
                raise


def ensure_parent_dir_sync(path: PathLike, *, fs: FileSystem | None = None) -> None:
    """Create the missing parent directories of ``path`` with default modes."""
    _make_dirs_sync(fs or FileSystem(), os.path.dirname(os.path.abspath(os.fspath(path))))


def create_dir_sync(path: PathLike, mode: int | str | None = None, *, fs: FileSystem | None = None) -> None:
    """Create ``path`` and any missing parents.

    The final directory ends up with ``mode``; an existing directory has its
    mode changed to match.
    """
    fs = fs or FileSystem()
    path = os.fspath(path)
    target = resolve_mode(mode, get_settings().modes.dir)
    _make_dirs_sync(fs, path)
    if stat_mod.S_IMODE(fs.stat(path).st_mode) != target:
        fs.chmod(path, target)


ensure_dir_sync = create_dir_sync


def create_file_sync(
    path: PathLike,
    data: FileData | None = b"",
    mode: int | str | None = None,
    *,
    fs: FileSystem | None = None,
) -> None:
    """Write ``data`` to ``path``, replacing content and mode; parents are created."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    target = resolve_mode(mode, get_settings().modes.file)
    if _is_dir(fs.try_stat(path)):
        raise _not_a_file(path)
    ensure_parent_dir_sync(path, fs=fs)
    fs.write_bytes(path, _to_bytes(data), create_mode=target)
    fs.chmod(path, target)


def ensure_file_sync(path: PathLike, mode: int | str | None = None, *, fs: FileSystem | None = None) -> bool:
    """Make sure a file exists at ``path``; True if it already did."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    st = fs.try_stat(path)
    if st is None:
        create_file_sync(path, b"", mode, fs=fs)
        return False
    if stat_mod.S_ISDIR(st.st_mode):
        raise _not_a_file(path)
    if mode is not None:
        target = normalize_mode(mode)
        if stat_mod.S_IMODE(st.st_mode) != target:
            fs.chmod(path, target)
    return True


def delete_file_sync(path: PathLike, *, fs: FileSystem | None = None) -> None:
    """Remove a file or symlink; a missing path is not an error."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    st = fs.try_lstat(path)
    if st is None:
        return
    if stat_mod.S_ISDIR(st.st_mode):
        raise _not_a_file(path)
    try:
        fs.unlink(path)
    except NotFoundError:
        pass


def empty_file_sync(path: PathLike, *, fs: FileSystem | None = None) -> None:
    """Truncate ``path`` to zero bytes, creating it when missing."""
    fs = fs or FileSystem()
    path = os.fspath(path)
    st = fs.try_stat(path)
    if st is None:
        create_file_sync(path, b"", fs=fs)
        return
    if stat_mod.S_ISDIR(st.st_mode):
        raise _not_a_file(path)
    fs.truncate(path)


# Async


async def _make_dirs(fs: AsyncFileSystem, path: str) -> None:
    missing = []
    for candidate in _ancestors(path):
        st = await fs.try_stat(candidate)
        if st is None:
            missing.append(candidate)
            continue
        if not stat_mod.S_ISDIR(st.st_mode):
            raise _not_a_dir(candidate)
        break
    for candidate in reversed(missing):
        try:
            await fs.mkdir(candidate)
        except FsTreeError:
            if not _is_dir(await fs.try_stat(candidate)):
                raise


async def ensure_parent_dir(path: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    await _make_dirs(fs or AsyncFileSystem(), os.path.dirname(os.path.abspath(os.fspath(path))))


async def create_dir(path: PathLike, mode: int | str | None = None, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    target = resolve_mode(mode, get_settings().modes.dir)
    await _make_dirs(fs, path)
    st = await fs.stat(path)
    if stat_mod.S_IMODE(st.st_mode) != target:
        await fs.chmod(path, target)


ensure_dir = create_dir


async def create_file(
    path: PathLike,
    data: FileData | None = b"",
    mode: int | str | None = None,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    target = resolve_mode(mode, get_settings().modes.file)
    if _is_dir(await fs.try_stat(path)):
        raise _not_a_file(path)
    await ensure_parent_dir(path, fs=fs)
    await fs.write_bytes(path, _to_bytes(data), create_mode=target)
    await fs.chmod(path, target)


async def ensure_file(path: PathLike, mode: int | str | None = None, *, fs: AsyncFileSystem | None = None) -> bool:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    st = await fs.try_stat(path)
    if st is None:
        await create_file(path, b"", mode, fs=fs)
        return False
    if stat_mod.S_ISDIR(st.st_mode):
        raise _not_a_file(path)
    if mode is not None:
        target = normalize_mode(mode)
        if stat_mod.S_IMODE(st.st_mode) != target:
            await fs.chmod(path, target)
    return True


async def delete_file(path: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    st = await fs.try_lstat(path)
    if st is None:
        return
    if stat_mod.S_ISDIR(st.st_mode):
        raise _not_a_file(path)
    try:
        await fs.unlink(path)
    except NotFoundError:
        pass


async def empty_file(path: PathLike, *, fs: AsyncFileSystem | None = None) -> None:
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    st = await fs.try_stat(path)
    if st is None:
        await create_file(path, b"", fs=fs)
        return
    if stat_mod.S_ISDIR(st.st_mode):
        raise _not_a_file(path)
    await fs.truncate(path)
