"""
Read-only filesystem view over a tree snapshot.
"""

import logging
from typing import List

from ..errors import TreeStoreError
from ..git import GitTreeStore, open_repo, tree_of
from .errors import PathError, to_fs_error
from .file import FileInfo, TreeFile
from .path import ROOT, resolve, resolve_tree

logger = logging.getLogger(__name__)

# Errors a store may raise while resolving or listing; anything else is a bug
# and propagates as is.
STORE_ERRORS = (TreeStoreError, OSError, ValueError)


class TreeFS:
    """
    Filesystem interface over an immutable tree.

    Paths are slash-separated and relative to the view's root tree; "."
    is the root itself. Views hold no mutable state and can be shared.

    The store only needs two operations:
    - find_child(tree_hash, name) -> TreeEntry
    - open_blob(blob_hash) -> object with size and reader()
    listing also uses get_tree(tree_hash) to enumerate entries.
    """

    def __init__(self, store, tree_hash: str):
        """
        Args:
            store: tree store, a TreeStoreEngine or a GitTreeStore
            tree_hash: hash of the root tree of this view
        """
        self.store = store
        self.tree_hash = tree_hash

    @classmethod
    def from_git(cls, repo, rev='HEAD') -> 'TreeFS':
        """
        View the tree of a git revision.

        Args:
            repo: dulwich repository, or the path of one
            rev: ref name, or id of a commit, annotated tag or tree

        Raises ObjectNotFoundError if rev names nothing.
        """
        repo = open_repo(repo)
        return cls(GitTreeStore.from_repo(repo), tree_of(repo, rev))

    def open(self, name: str) -> TreeFile:
        """
        Open the named file or directory for reading.

        Raises InvalidPathError, NotFoundError or RetrievalError, all
        with op "open".
        """
        try:
            entry = resolve(self.store, self.tree_hash, name, 'open')
        except PathError:
            raise
        except STORE_ERRORS as e:
            raise to_fs_error('open', name, e) from e
        return TreeFile(self.store, entry, path=name)

    def read_dir(self, name: str) -> List[TreeFile]:
        """
        List the entries of the named directory, sorted by name.

        Listing a path that names a file returns an empty list.
        """
        try:
            entry = resolve(self.store, self.tree_hash, name, 'readdir')
            if not entry.is_dir:
                return []
            tree = self.store.get_tree(entry.hash)
        except PathError:
            raise
        except STORE_ERRORS as e:
            raise to_fs_error('readdir', name, e) from e

        prefix = '' if name == ROOT else name + '/'
        children = sorted(tree.entries, key=lambda e: e.name)
        logger.debug("Listed %s: %d entries", name, len(children))
        return [TreeFile(self.store, child, path=prefix + child.name) for child in children]

    def sub(self, name: str) -> 'TreeFS':
        """
        Get a view rooted at the named directory.

        Raises NotFoundError if name is missing or is not a directory.
        """
        if name == ROOT:
            return self
        try:
            tree_hash = resolve_tree(self.store, self.tree_hash, name, 'sub')
        except PathError:
            raise
        except STORE_ERRORS as e:
            raise to_fs_error('sub', name, e) from e
        return TreeFS(self.store, tree_hash)

    def stat(self, name: str) -> FileInfo:
        """Get metadata for the named file or directory."""
        with self.open(name) as f:
            return f.stat()

    def read_file(self, name: str) -> bytes:
        """Read the whole named file. Directories read as b''."""
        with self.open(name) as f:
            return f.read()

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeFS):
            return NotImplemented
        return self.store is other.store and self.tree_hash == other.tree_hash

    def __hash__(self) -> int:
        return hash((id(self.store), self.tree_hash))

    def __repr__(self) -> str:
        return f"TreeFS(tree={self.tree_hash[:8]}...)"
