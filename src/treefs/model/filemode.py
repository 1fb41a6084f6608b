"""
Tree entry modes.

Entries carry git-style modes; the filesystem layer reports their
POSIX equivalents.
"""

import stat
from enum import IntEnum

from ..errors import InvalidObjectError

GIT_MODE_DEPRECATED = 0o100664
GIT_MODE_GITLINK = 0o160000


class FileMode(IntEnum):
    """Mode of a named child of a tree."""

    DIR = 0o040000
    REGULAR = 0o100644
    EXECUTABLE = 0o100755
    SYMLINK = 0o120000

    @classmethod
    def parse(cls, value) -> 'FileMode':
        """
        Convert a stored mode value to a FileMode.

        Accepts ints and octal strings ("100644").
        Raises InvalidObjectError for anything else.
        """
        if isinstance(value, str):
            try:
                value = int(value, 8)
            except ValueError:
                raise InvalidObjectError(f"Malformed mode: {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise InvalidObjectError(f"Malformed mode: {value!r}")

    @classmethod
    def from_git_mode(cls, git_mode: int) -> 'FileMode':
        """
        Convert a git tree filemode.

        Group-writable files (100664) read as regular files and gitlinks
        (160000) read as directories.
        """
        if git_mode == GIT_MODE_DEPRECATED:
            return cls.REGULAR
        if git_mode == GIT_MODE_GITLINK:
            return cls.DIR
        return cls.parse(git_mode)

    @classmethod
    def from_os_mode(cls, st_mode: int) -> 'FileMode':
        """Pick the entry mode for a file found on disk."""
        if stat.S_ISDIR(st_mode):
            return cls.DIR
        if stat.S_ISLNK(st_mode):
            return cls.SYMLINK
        if st_mode & stat.S_IXUSR:
            return cls.EXECUTABLE
        return cls.REGULAR

    def to_os_mode(self) -> int:
        """POSIX mode bits (type and permissions) reported for this entry."""
        if self is FileMode.DIR:
            return stat.S_IFDIR | 0o777
        if self is FileMode.SYMLINK:
            return stat.S_IFLNK | 0o777
        if self is FileMode.EXECUTABLE:
            return stat.S_IFREG | 0o755
        return stat.S_IFREG | 0o644

    @property
    def is_dir(self) -> bool:
        return self is FileMode.DIR

    def __str__(self) -> str:
        return f"{self.value:06o}"
