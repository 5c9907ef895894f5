"""Primitive I/O adapter.

FileSystem is a thin pass-through to the ``os`` calls fstree is built on.
It is the only place where OSError is translated into fstree errors.
AsyncFileSystem exposes the same calls as coroutines built on aiofiles.
"""

from __future__ import annotations

import contextlib
import errno
import os
import shutil
from collections.abc import Callable, Iterator

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from fstree.errors import (
    CrossDeviceError,
    FsTreeError,
    IOFailureError,
    NotADirError,
    NotAFileError,
    NotFoundError,
    PermissionDeniedError,
)

_ERRNO_MAP: dict[int, type[FsTreeError]] = {
    errno.ENOENT: NotFoundError,
    errno.ENOTDIR: NotADirError,
    errno.EISDIR: NotAFileError,
    errno.EACCES: PermissionDeniedError,
    errno.EPERM: PermissionDeniedError,
    errno.EXDEV: CrossDeviceError,
}


def translate_os_error(exc: OSError, path: str | None = None) -> FsTreeError:
    """Map an OSError onto the fstree error taxonomy."""
    error_cls = _ERRNO_MAP.get(exc.errno or 0, IOFailureError)
    target = path if path is not None else exc.filename
    return error_cls(message=exc.strerror or str(exc), path=None if target is None else str(target))


@contextlib.contextmanager
def os_errors(path: str | None = None) -> Iterator[None]:
    """Re-raise OSError from the wrapped block as FsTreeError."""
    try:
        yield
    except OSError as exc:
        raise translate_os_error(exc, path) from exc


DirListing = list[tuple[str, os.stat_result]]


def _list_dir(path: str, follow_symlinks: bool) -> DirListing:
    with os.scandir(path) as it:
        return [(dir_entry.name, dir_entry.stat(follow_symlinks=follow_symlinks)) for dir_entry in it]


def _opener(create_mode: int) -> Callable[[str, int], int]:
    """``open()`` opener that creates new files with ``create_mode`` & ~umask."""

    def opener(path: str, flags: int) -> int:
        return os.open(path, flags, create_mode)

    return opener


class FileSystem:
    """Blocking primitive calls against the local filesystem."""

    def stat(self, path: str) -> os.stat_result:
        with os_errors(path):
            return os.stat(path)

    def try_stat(self, path: str) -> os.stat_result | None:
        """Stat ``path``; None when it does not exist."""
        try:
            return os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    def try_lstat(self, path: str) -> os.stat_result | None:
        """Like try_stat, but a symlink is reported as itself."""
        try:
            return os.lstat(path)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def read_dir(self, path: str, follow_symlinks: bool = True) -> DirListing:
        """Read the immediate children of ``path`` with their stat snapshots.

        Children keep the order in which the platform returns them.
        """
        with os_errors(path):
            return _list_dir(path, follow_symlinks)

    def read_bytes(self, path: str) -> bytes:
        with os_errors(path):
            with open(path, "rb") as handle:
                return handle.read()

    def write_bytes(self, path: str, data: bytes, create_mode: int = 0o666) -> None:
        """Replace the content of ``path``; new files get ``create_mode`` & ~umask."""
        with os_errors(path):
            with open(path, "wb", opener=_opener(create_mode)) as handle:
                handle.write(data)

    def truncate(self, path: str) -> None:
        with os_errors(path):
            os.truncate(path, 0)

    def copy_bytes(self, src: str, dst: str) -> None:
        with os_errors(src):
            shutil.copyfile(src, dst)

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        with os_errors(path):
            os.mkdir(path, mode)

    def chmod(self, path: str, mode: int) -> None:
        with os_errors(path):
            os.chmod(path, mode)

    def unlink(self, path: str) -> None:
        with os_errors(path):
            os.unlink(path)

    def rmdir(self, path: str) -> None:
        with os_errors(path):
            os.rmdir(path)

    def rename(self, src: str, dst: str) -> None:
        with os_errors(src):
            os.rename(src, dst)

    def replace(self, src: str, dst: str) -> None:
        with os_errors(src):
            os.replace(src, dst)


_scan_dir = aiofiles.os.wrap(_list_dir)
_lexists = aiofiles.os.wrap(os.path.lexists)
_chmod = aiofiles.os.wrap(os.chmod)
_truncate = aiofiles.os.wrap(os.truncate)
_copyfile = aiofiles.os.wrap(shutil.copyfile)


class AsyncFileSystem:
    """Coroutine primitives on aiofiles; blocking calls run in the loop's executor."""

    async def stat(self, path: str) -> os.stat_result:
        with os_errors(path):
            return await aiofiles.os.stat(path)

    async def try_stat(self, path: str) -> os.stat_result | None:
        try:
            return await aiofiles.os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    async def try_lstat(self, path: str) -> os.stat_result | None:
        try:
            return await aiofiles.os.stat(path, follow_symlinks=False)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise translate_os_error(exc, path) from exc

    async def exists(self, path: str) -> bool:
        return await _lexists(path)

    async def read_dir(self, path: str, follow_symlinks: bool = True) -> DirListing:
        # The per-entry stat calls stay off the event loop with the scan.
        with os_errors(path):
            return await _scan_dir(path, follow_symlinks)

    async def read_bytes(self, path: str) -> bytes:
        with os_errors(path):
            async with aiofiles.open(path, "rb") as handle:
                return await handle.read()

    async def write_bytes(self, path: str, data: bytes, create_mode: int = 0o666) -> None:
        with os_errors(path):
            async with aiofiles.open(path, "wb", opener=_opener(create_mode)) as handle:
                await handle.write(data)

    async def truncate(self, path: str) -> None:
        with os_errors(path):
            await _truncate(path, 0)

    async def copy_bytes(self, src: str, dst: str) -> None:
        with os_errors(src):
            await _copyfile(src, dst)

    async def mkdir(self, path: str, mode: int = 0o777) -> None:
        with os_errors(path):
            await aiofiles.os.mkdir(path, mode)

    async def chmod(self, path: str, mode: int) -> None:
        with os_errors(path):
            await _chmod(path, mode)

    async def unlink(self, path: str) -> None:
        with os_errors(path):
            await aiofiles.os.unlink(path)

    async def rmdir(self, path: str) -> None:
        with os_errors(path):
            await aiofiles.os.rmdir(path)

    async def rename(self, src: str, dst: str) -> None:
        with os_errors(src):
            await aiofiles.os.rename(src, dst)

    async def replace(self, src: str, dst: str) -> None:
        with os_errors(src):
            await aiofiles.os.replace(src, dst)
