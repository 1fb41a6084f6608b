"""
File handles and metadata for entries of a tree filesystem.

A TreeFile is at once a readable binary stream, a directory entry and
a source of metadata. Blob content is fetched from the store only when
size or bytes are first needed.
"""

import io
import logging
import stat
from dataclasses import dataclass
from typing import Optional

from ..errors import TreeStoreError
from ..model.tree import TreeEntry
from .errors import RetrievalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileInfo:
    """
    Metadata of one entry, as reported by stat().

    Trees carry no timestamps or ownership, so mtime is always 0.0
    and sys is always None.
    """

    name: str
    size: int
    mode: int
    mtime: float = 0.0
    sys: Optional[object] = None

    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    def type(self) -> int:
        """Type bits of the mode (S_IFDIR, S_IFREG, S_IFLNK)."""
        return stat.S_IFMT(self.mode)

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)


class TreeFile(io.RawIOBase):
    """
    Read-only handle on one tree entry.

    Directories read as empty and report size 0. For files the blob is
    loaded on the first stat() or read and kept for the life of the
    handle; the content stream is opened on the first read and keeps
    its position across reads.

    A handle is owned by whoever opened it and is not shared.
    """

    def __init__(self, store, entry: TreeEntry, path: Optional[str] = None):
        """
        Args:
            store: object providing open_blob(hash)
            entry: the entry this handle reads
            path: path used to attribute errors, defaults to the entry name
        """
        super().__init__()
        self._store = store
        self._content = None
        self._reader = None
        self.entry = entry
        self.name = entry.name
        self.path = path if path is not None else entry.name
        self._mode = entry.mode.to_os_mode()

    def _load(self, op: str) -> None:
        if self._content is not None or self.is_dir():
            return
        try:
            content = self._store.open_blob(self.entry.hash)
        except (TreeStoreError, OSError, ValueError) as e:
            raise RetrievalError(op, self.path, e) from e
        self._content = content

    # --- stream ---

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        """Read up to len(buffer) bytes into buffer; 0 means end of stream."""
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        if self.is_dir():
            return 0
        self._load('read')
        if self._reader is None:
            try:
                self._reader = self._content.reader()
            except (TreeStoreError, OSError, ValueError) as e:
                raise RetrievalError('read', self.path, e) from e
            logger.debug("Opened content stream for %s", self.path)

        return self._reader.readinto(buffer)

    def close(self) -> None:
        """Release the content stream, if one was opened. Safe to repeat."""
        if self.closed:
            return
        try:
            if self._reader is not None:
                self._reader.close()
        finally:
            self._reader = None
            super().close()

    # --- metadata ---

    def stat(self) -> FileInfo:
        self._load('stat')
        size = self._content.size if self._content is not None else 0
        return FileInfo(name=self.name, size=size, mode=self._mode)

    # --- directory entry ---

    def info(self) -> FileInfo:
        return self.stat()

    def type(self) -> int:
        return stat.S_IFMT(self._mode)

    def is_dir(self) -> bool:
        return stat.S_ISDIR(self._mode)

    def is_file(self) -> bool:
        return stat.S_ISREG(self._mode)

    def is_symlink(self) -> bool:
        return stat.S_ISLNK(self._mode)

    def __repr__(self) -> str:
        return f"TreeFile(path={self.path!r}, mode={self._mode:o})"
