"""Error taxonomy for fstree operations.

All errors raised by fstree derive from FsTreeError. OS-level failures are
translated in exactly one place (fstree.primitives.os_errors) and chained to
the original OSError via ``raise ... from``.
"""

from __future__ import annotations


class FsTreeError(Exception):
    """Base class for fstree errors."""

    code: str = "fstree_error"

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


class NotFoundError(FsTreeError):
    """Path is absent where presence is required."""

    code = "not_found"


class NotADirError(FsTreeError):
    """A directory was required but something else was found."""

    code = "not_a_directory"


class NotAFileError(FsTreeError):
    """A file was required but a directory was found."""

    code = "not_a_file"


class PermissionDeniedError(FsTreeError):
    """The platform refused access."""

    code = "permission_denied"


class CrossDeviceError(FsTreeError):
    """Rename across filesystems with the copy fallback disabled."""

    code = "cross_device"


class IOFailureError(FsTreeError):
    """Any other primitive read/write/rename/mkdir failure."""

    code = "io_failure"
