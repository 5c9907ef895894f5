"""JSON read/write helpers."""

from __future__ import annotations

import json
import os
from typing import Any

from fstree.config import get_settings
from fstree.entries import create_file, create_file_sync
from fstree.paths import PathLike
from fstree.primitives import AsyncFileSystem, FileSystem

_UNSET: Any = object()


def dumps(value: Any, indent: int | str | None = _UNSET) -> str:
    """Serialize ``value``; ``indent=None`` gives compact output."""
    config = get_settings().json_io
    if indent is _UNSET:
        indent = config.indent
    separators = (",", ":") if indent is None else None
    return json.dumps(value, indent=indent, separators=separators, ensure_ascii=config.ensure_ascii)


def read_json_sync(path: PathLike, *, fs: FileSystem | None = None) -> Any:
    """Parse the JSON document at ``path``.

    Raises NotFoundError when the file is missing and json.JSONDecodeError
    (a ValueError) when it is malformed.
    """
    fs = fs or FileSystem()
    return json.loads(fs.read_bytes(os.fspath(path)).decode("utf-8"))


def write_json_sync(
    path: PathLike,
    value: Any,
    indent: int | str | None = _UNSET,
    *,
    fs: FileSystem | None = None,
) -> None:
    create_file_sync(path, dumps(value, indent), fs=fs)


async def read_json(path: PathLike, *, fs: AsyncFileSystem | None = None) -> Any:
    fs = fs or AsyncFileSystem()
    data = await fs.read_bytes(os.fspath(path))
    return json.loads(data.decode("utf-8"))


async def write_json(
    path: PathLike,
    value: Any,
    indent: int | str | None = _UNSET,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    await create_file(path, dumps(value, indent), fs=fs)
