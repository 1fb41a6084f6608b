"""
Errors raised by the read-only tree filesystem.

Every failure is a PathError tagged with the operation and the path the
caller passed in. The categories subclass the builtin exceptions a real
filesystem raises for the same condition, so code written against
os/pathlib catches them unchanged.
"""

import errno
import logging
from typing import Optional

from ..errors import (
    DirectoryNotFoundError,
    EntryNotFoundError,
    TreeStoreError,
)

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS = (
    DirectoryNotFoundError,
    EntryNotFoundError,
)


class PathError(TreeStoreError, OSError):
    """
    Base error for filesystem operations.

    Attributes:
        op: failing operation ("open", "readdir", "sub", "stat", "read")
        path: path as given by the caller
        cause: underlying exception, if any
    """

    errno_code = errno.EIO
    reason = "input/output error"

    def __init__(self, op: str, path: str, cause: Optional[BaseException] = None):
        self.op = op
        self.path = path
        self.cause = cause
        super().__init__(self.errno_code, self._describe(cause), path)

    def _describe(self, cause: Optional[BaseException]) -> str:
        return str(cause) if cause is not None else self.reason

    def __str__(self) -> str:
        return f"{self.op} {self.path}: {self.strerror}"

    def __reduce__(self):
        return (type(self), (self.op, self.path, self.cause))


class InvalidPathError(PathError, ValueError):
    """Raised when a path is not a valid relative slash-separated path."""

    errno_code = errno.EINVAL
    reason = "invalid argument"

    def _describe(self, cause):
        return self.reason


class NotFoundError(PathError, FileNotFoundError):
    """Raised when a valid path names nothing in the tree."""

    errno_code = errno.ENOENT
    reason = "file does not exist"

    def _describe(self, cause):
        return self.reason


class RetrievalError(PathError):
    """Raised when the store cannot supply data for a path that resolved."""

    errno_code = errno.EIO
    reason = "retrieval failed"


def to_fs_error(op: str, path: str, err: BaseException) -> PathError:
    """
    Translate a store error into a filesystem error.

    Store "not found" conditions become NotFoundError; a PathError keeps
    its category but takes the new op and path; anything else becomes a
    RetrievalError wrapping the original.
    """
    if isinstance(err, NOT_FOUND_ERRORS):
        return NotFoundError(op, path, err)
    if isinstance(err, PathError):
        return type(err)(op, path, err.cause)
    logger.warning("%s %s failed: %s", op, path, err)
    return RetrievalError(op, path, err)
