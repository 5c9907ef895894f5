"""Listing façade: materialize a traversal into a list."""

from __future__ import annotations

import functools
import os
from typing import Any

from fstree.primitives import AsyncFileSystem, FileSystem
from fstree.walker import (
    AsyncWalkCursor,
    Comparator,
    EntryFilter,
    EntryMap,
    WalkCursor,
    WalkOptions,
    only_dirs,
    only_files,
)


def _options(
    recursive: bool,
    filter: EntryFilter | None,
    map: EntryMap | None,
    sort: Comparator | None,
    prepend_dir: bool,
    threads: int | None,
) -> WalkOptions:
    return WalkOptions(
        recursive=recursive,
        filter=filter,
        map=map,
        sort=sort,
        prepend_dir=prepend_dir,
        threads=threads,
    )


def _sorted(items: list[Any], options: WalkOptions) -> list[Any]:
    if options.sort is None:
        return items
    return sorted(items, key=functools.cmp_to_key(options.sort))


def collect_sync(
    root: str | os.PathLike[str],
    options: WalkOptions,
    *,
    fs: FileSystem | None = None,
) -> list[Any]:
    """Run a traversal to completion and return every dispatched value."""
    with WalkCursor(root, options, fs=fs) as cursor:
        items = list(cursor)
    return _sorted(items, options)


async def collect(
    root: str | os.PathLike[str],
    options: WalkOptions,
    *,
    fs: AsyncFileSystem | None = None,
) -> list[Any]:
    async with AsyncWalkCursor(root, options, fs=fs) as cursor:
        items = [item async for item in cursor]
    return _sorted(items, options)


def list_all_sync(
    root: str | os.PathLike[str],
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
) -> list[Any]:
    """List files and directories under ``root``."""
    return collect_sync(root, _options(recursive, filter, map, sort, prepend_dir, threads))


def list_files_sync(
    root: str | os.PathLike[str],
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
) -> list[Any]:
    """List regular files under ``root``."""
    options = _options(recursive, filter, map, sort, prepend_dir, threads)
    return collect_sync(root, options.restricted(only_files))


def list_dirs_sync(
    root: str | os.PathLike[str],
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
) -> list[Any]:
    """List directories under ``root``."""
    options = _options(recursive, filter, map, sort, prepend_dir, threads)
    return collect_sync(root, options.restricted(only_dirs))


async def list_all(
    root: str | os.PathLike[str],
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
) -> list[Any]:
    return await collect(root, _options(recursive, filter, map, sort, prepend_dir, threads))


async def list_files(
    root: str | os.PathLike[str],
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
) -> list[Any]:
    options = _options(recursive, filter, map, sort, prepend_dir, threads)
    return await collect(root, options.restricted(only_files))


async def list_dirs(
    root: str | os.PathLike[str],
    *,
    recursive: bool = False,
    filter: EntryFilter | None = None,
    map: EntryMap | None = None,
    sort: Comparator | None = None,
    prepend_dir: bool = False,
    threads: int | None = None,
) -> list[Any]:
    options = _options(recursive, filter, map, sort, prepend_dir, threads)
    return await collect(root, options.restricted(only_dirs))
