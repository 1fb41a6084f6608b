"""
Path validation and resolution against a tree.
"""

import logging

from ..errors import DirectoryNotFoundError
from ..model.filemode import FileMode
from ..model.tree import TreeEntry
from .errors import InvalidPathError

logger = logging.getLogger(__name__)

ROOT = '.'


def valid_path(name) -> bool:
    """
    Report whether name is a valid path for a tree filesystem.

    Valid paths are unrooted, slash-separated sequences of names with no
    empty, '.' or '..' elements. The single name '.' denotes the root.
    """
    if not isinstance(name, str):
        return False
    if name == ROOT:
        return True
    return all(elem not in ('', '.', '..') for elem in name.split('/'))


def root_entry(tree_hash: str) -> TreeEntry:
    """Synthetic entry standing for the root of a view."""
    return TreeEntry(ROOT, FileMode.DIR, tree_hash)


def resolve(store, tree_hash: str, name: str, op: str = 'open') -> TreeEntry:
    """
    Find the entry a path denotes below a tree.

    Raises InvalidPathError for invalid paths. Store lookup errors
    (EntryNotFoundError, DirectoryNotFoundError, retrieval failures)
    propagate unchanged for the caller to map.
    """
    if not valid_path(name):
        raise InvalidPathError(op, name)
    if name == ROOT:
        return root_entry(tree_hash)

    names = name.split('/')
    entry = None
    current = tree_hash
    for depth, elem in enumerate(names):
        if entry is not None and not entry.is_dir:
            raise DirectoryNotFoundError('/'.join(names[:depth]))
        entry = store.find_child(current, elem)
        current = entry.hash

    logger.debug("Resolved %s to %s %s", name, entry.mode.name, entry.hash)
    return entry


def resolve_tree(store, tree_hash: str, name: str, op: str = 'open') -> str:
    """
    Find the hash of the directory a path denotes.

    Raises DirectoryNotFoundError if the path names a non-directory.
    """
    entry = resolve(store, tree_hash, name, op)
    if not entry.is_dir:
        raise DirectoryNotFoundError(name)
    return entry.hash
