"""Push-style walk functions (walk_all / walk_files / walk_dirs)."""

from __future__ import annotations

import inspect
import os

from fstree.listing import collect, collect_sync
from fstree.primitives import AsyncFileSystem, FileSystem
from fstree.walker import (
    AsyncWalkCallback,
    CancelToken,
    Comparator,
    EntryFilter,
    EntryMap,
    WalkCallback,
    WalkOptions,
    only_dirs,
    only_files,
    walk,
    walk_sync,
)


def _run_sync(
    root: str | os.PathLike[str],
    callback: WalkCallback,
    options: WalkOptions,
    fs: FileSystem | None,
) -> None:
    if options.sort is None:
        walk_sync(root, callback, options, fs=fs)
        return
    # Sorting needs the complete result set before the first dispatch.
    token = CancelToken()
    for item in collect_sync(root, options, fs=fs):
        if token.aborted:
            break
        callback(item, token)


async def _run(
    root: str | os.PathLike[str],
    callback: AsyncWalkCallback,
    options: WalkOptions,
    fs: AsyncFileSystem | None,
) -> None:
    if options.sort is None:
        await walk(root, callback, options, fs=fs)
        return
    token = CancelToken()
    for item in await collect(root, options, fs=fs):
        if token.aborted:
            break
        result = callback(item, token)
        if inspect.isawaitable(result):
            await result


def walk_all_sync(
    root: str | os.PathLike[str],
    callback: WalkCallback,
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Call ``callback(item, token)`` for every file and directory under ``root``."""
    options = WalkOptions(recursive, filter, map, sort, prepend_dir, threads)
    _run_sync(root, callback, options, fs)


def walk_files_sync(
    root: str | os.PathLike[str],
    callback: WalkCallback,
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
    fs: FileSystem | None = None,
) -> None:
    options = WalkOptions(recursive, filter, map, sort, prepend_dir, threads)
    _run_sync(root, callback, options.restricted(only_files), fs)


def walk_dirs_sync(
    root: str | os.PathLike[str],
    callback: WalkCallback,
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
    fs: FileSystem | None = None,
) -> None:
    options = WalkOptions(recursive, filter, map, sort, prepend_dir, threads)
    _run_sync(root, callback, options.restricted(only_dirs), fs)


async def walk_all(
    root: str | os.PathLike[str],
    callback: AsyncWalkCallback,
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
    fs: AsyncFileSystem | None = None,
) -> None:
    """Async form of :func:`walk_all_sync`.

    ``callback`` may be a coroutine function; the next entry is dispatched
    only after it completes.
    """
    options = WalkOptions(recursive, filter, map, sort, prepend_dir, threads)
    await _run(root, callback, options, fs)


async def walk_files(
    root: str | os.PathLike[str],
    callback: AsyncWalkCallback,
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
    fs: AsyncFileSystem | None = None,
) -> None:
    options = WalkOptions(recursive, filter, map, sort, prepend_dir, threads)
    await _run(root, callback, options.restricted(only_files), fs)


async def walk_dirs(
    root: str | os.PathLike[str],
    callback: AsyncWalkCallback,
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
    fs: AsyncFileSystem | None = None,
) -> None:
    options = WalkOptions(recursive, filter, map, sort, prepend_dir, threads)
    await _run(root, callback, options.restricted(only_dirs), fs)

