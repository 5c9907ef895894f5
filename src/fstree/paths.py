"""Path and mode helpers."""

from __future__ import annotations

import os
import stat as stat_mod
import threading
from enum import Enum

from fstree.primitives import AsyncFileSystem, FileSystem

DEFAULT_FILE_MODE = 0o666
DEFAULT_DIR_MODE = 0o777

PathLike = str | os.PathLike[str]

_umask_lock = threading.Lock()

_SEPARATORS = os.sep + (os.altsep or "")

_PROC_STATUS = "/proc/self/status"


class PathKind(str, Enum):
    """What a path currently is, resolved with a single stat call."""

    FILE = "file"
    DIRECTORY = "directory"
    MISSING = "missing"


def fspath(path: PathLike) -> str:
    return os.fspath(path)


def join(*parts: PathLike) -> str:
    """Join path segments, skipping empty ones."""
    segments = [os.fspath(part) for part in parts if os.fspath(part)]
    if not segments:
        return ""
    return os.path.join(*segments)


def normalize(path: PathLike) -> str:
    return os.path.normpath(os.fspath(path))


def normalize_mode(mode: int | str) -> int:
    """Return permission bits as an int.

    Accepts an int or an octal string such as "776", "0776" or "0o776".
    """
    if isinstance(mode, bool):
        raise ValueError(f"invalid mode: {mode!r}")
    if isinstance(mode, int):
        value = mode
    elif isinstance(mode, str):
        text = mode.strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        try:
            value = int(text, 8)
        except ValueError:
            raise ValueError(f"invalid mode: {mode!r}") from None
    else:
        raise ValueError(f"invalid mode: {mode!r}")
    if not 0 <= value <= 0o7777:
        raise ValueError(f"mode out of range: {mode!r}")
    return value


def _umask_from_proc() -> int | None:
    """The ``Umask:`` line of the process status file; None where there is none."""
    try:
        with open(_PROC_STATUS, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                if line.startswith("Umask:"):
                    return int(line.split()[1], 8)
    except (OSError, ValueError, IndexError):
        return None
    return None


def current_umask() -> int:
    """Read the process umask without changing it.

    Linux reports it in the process status file. Elsewhere the mask is read
    by setting and restoring it, which other threads creating files at the
    same moment can observe.
    """
    mask = _umask_from_proc()
    if mask is not None:
        return mask
    with _umask_lock:
        mask = os.umask(0)
        os.umask(mask)
    return mask


def resolve_mode(mode: int | str | None, default: int) -> int:
    """Explicit modes are used as given; omitted ones are ``default`` minus umask."""
    if mode is None:
        return default & ~current_umask()
    return normalize_mode(mode)


def kind_of(st: os.stat_result | None) -> PathKind:
    if st is None:
        return PathKind.MISSING
    if stat_mod.S_ISDIR(st.st_mode):
        return PathKind.DIRECTORY
    return PathKind.FILE


def path_kind(path: PathLike, fs: FileSystem | None = None) -> PathKind:
    fs = fs or FileSystem()
    return kind_of(fs.try_stat(os.fspath(path)))


async def apath_kind(path: PathLike, fs: AsyncFileSystem | None = None) -> PathKind:
    fs = fs or AsyncFileSystem()
    return kind_of(await fs.try_stat(os.fspath(path)))


def split_ext_chain(name: str) -> tuple[str, str]:
    """Split ``name`` into stem and the full trailing extension chain.

    ``archive.tar.gz`` -> (``archive``, ``.tar.gz``); leading dots belong to
    the stem, so ``.bashrc`` has no extension.
    """
    leading = len(name) - len(name.lstrip("."))
    dot = name.find(".", leading)
    if dot <= leading:
        return name, ""
    return name[:dot], name[dot:]


def _candidate(path: str, index: int) -> str:
    # "photos/" names the directory "photos"; a bare root stays as is.
    trimmed = path.rstrip(_SEPARATORS) or path
    head, name = os.path.split(trimmed)
    stem, exts = split_ext_chain(name)
    return os.path.join(head, f"{stem}-{index}{exts}")


def _check_start(start_index: int) -> None:
    if isinstance(start_index, bool) or not isinstance(start_index, int) or start_index < 1:
        raise ValueError("start_index must be a positive integer")


def unique_path_sync(path: PathLike, start_index: int = 2, *, fs: FileSystem | None = None) -> str:
    """Return ``path`` if free, else the first free ``<stem>-<n><exts>`` sibling."""
    _check_start(start_index)
    fs = fs or FileSystem()
    path = os.fspath(path)
    if not fs.exists(path):
        return path
    index = start_index
    while True:
        candidate = _candidate(path, index)
        if not fs.exists(candidate):
            return candidate
        index += 1


async def unique_path(path: PathLike, start_index: int = 2, *, fs: AsyncFileSystem | None = None) -> str:
    """Async form of :func:`unique_path_sync`."""
    _check_start(start_index)
    fs = fs or AsyncFileSystem()
    path = os.fspath(path)
    if not await fs.exists(path):
        return path
    index = start_index
    while True:
        candidate = _candidate(path, index)
        if not await fs.exists(candidate):
            return candidate
        index += 1
