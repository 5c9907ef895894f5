"""fstree - recursive, mode-preserving file and directory operations.

This package provides:
- A breadth-first traversal engine with bounded concurrent directory reads
  (WalkCursor, AsyncWalkCursor, walk, walk_sync)
- Listing and push-style walking (list_*, walk_*)
- Bulk operations on trees (copy, move, delete, empty) and single-entry helpers
- Path utilities (unique_path, path_kind) and JSON helpers

Every operation is a coroutine; the blocking form carries a ``_sync`` suffix.

Usage:
    import fstree

    fstree.copy_dir_sync("assets", "build/assets")
    names = await fstree.list_files("build", recursive=True)
"""

from fstree.bulk import (
    copy,
    copy_dir,
    copy_dir_sync,
    copy_file,
    copy_file_sync,
    copy_sync,
    delete,
    delete_dir,
    delete_dir_sync,
    delete_sync,
    empty,
    empty_dir,
    empty_dir_sync,
    empty_sync,
    move,
    move_dir,
    move_dir_sync,
    move_file,
    move_file_sync,
    move_sync,
)
from fstree.config import Settings, get_settings
from fstree.entries import (
    create_dir,
    create_dir_sync,
    create_file,
    create_file_sync,
    delete_file,
    delete_file_sync,
    empty_file,
    empty_file_sync,
    ensure_dir,
    ensure_dir_sync,
    ensure_file,
    ensure_file_sync,
)
from fstree.errors import (
    CrossDeviceError,
    FsTreeError,
    IOFailureError,
    NotADirError,
    NotAFileError,
    NotFoundError,
    PermissionDeniedError,
)
from fstree.jsonio import read_json, read_json_sync, write_json, write_json_sync
from fstree.listing import (
    list_all,
    list_all_sync,
    list_dirs,
    list_dirs_sync,
    list_files,
    list_files_sync,
)
from fstree.log import configure_logging
from fstree.paths import PathKind, apath_kind, normalize_mode, path_kind, unique_path, unique_path_sync
from fstree.primitives import AsyncFileSystem, FileSystem
from fstree.walker import (
    DONE,
    AsyncWalkCursor,
    CancelToken,
    Entry,
    EntryKind,
    WalkCursor,
    WalkOptions,
    WalkStats,
    walk,
    walk_sync,
)
from fstree.walking import (
    walk_all,
    walk_all_sync,
    walk_dirs,
    walk_dirs_sync,
    walk_files,
    walk_files_sync,
)

__all__ = [
    "DONE",
    "AsyncFileSystem",
    "AsyncWalkCursor",
    "CancelToken",
    "CrossDeviceError",
    "Entry",
    "EntryKind",
    "FileSystem",
    "FsTreeError",
    "IOFailureError",
    "NotADirError",
    "NotAFileError",
    "NotFoundError",
    "PathKind",
    "PermissionDeniedError",
    "Settings",
    "WalkCursor",
    "WalkOptions",
    "WalkStats",
    "apath_kind",
    "configure_logging",
    "copy",
    "copy_dir",
    "copy_dir_sync",
    "copy_file",
    "copy_file_sync",
    "copy_sync",
    "create_dir",
    "create_dir_sync",
    "create_file",
    "create_file_sync",
    "delete",
    "delete_dir",
    "delete_dir_sync",
    "delete_file",
    "delete_file_sync",
    "delete_sync",
    "empty",
    "empty_dir",
    "empty_dir_sync",
    "empty_file",
    "empty_file_sync",
    "empty_sync",
    "ensure_dir",
    "ensure_dir_sync",
    "ensure_file",
    "ensure_file_sync",
    "get_settings",
    "list_all",
    "list_all_sync",
    "list_dirs",
    "list_dirs_sync",
    "list_files",
    "list_files_sync",
    "move",
    "move_dir",
    "move_dir_sync",
    "move_file",
    "move_file_sync",
    "move_sync",
    "normalize_mode",
    "path_kind",
    "read_json",
    "read_json_sync",
    "unique_path",
    "unique_path_sync",
    "walk",
    "walk_all",
    "walk_all_sync",
    "walk_dirs",
    "walk_dirs_sync",
    "walk_files",
    "walk_files_sync",
    "walk_sync",
    "write_json",
    "write_json_sync",
]
