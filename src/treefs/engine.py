"""
Tree Store Engine.

Main entry point of the object store the filesystem layer reads from.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Union

from .storage.layout import StorageLayout
from .storage.object_store import ObjectStore
from .integrity.verification import verify_tree_recursive
from .errors import (
    DirectoryNotFoundError,
    EntryNotFoundError,
    InvalidObjectError,
)
from .model.blob import Blob, BlobContent
from .model.filemode import FileMode
from .model.tree import Tree, TreeEntry

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE = ('.git',)


def split_tree_path(path: str) -> List[str]:
    """Split a slash-separated tree path into names; '' and '.' are the root."""
    if path in ('', '.'):
        return []
    return path.split('/')


class TreeStoreEngine:
    """
    Main engine for tree and blob storage.

    This is the primary interface for:
    - Storing blobs and trees
    - Importing directories from disk as tree snapshots
    - Looking up entries and blob content inside a tree
    - Verifying integrity
    """

    def __init__(self, store_path: Union[str, Path], verify: bool = True):
        """
        Initialize tree store at given path.

        Args:
            store_path: filesystem path for object storage
            verify: check every object against its hash when reading
        """
        self.store_path = Path(store_path).resolve()
        self.verify = verify
        self.layout = StorageLayout(self.store_path)
        self.object_store = ObjectStore(self.layout)

    def initialize(self) -> None:
        """
        Initialize the store.

        Creates necessary directory structure.
        Safe to call multiple times (idempotent).
        """
        self.layout.initialize()

    # ========== Object Storage ==========

    def put_blob(self, data: bytes) -> str:
        """Store file content and return its hash."""
        return self.object_store.put_object(Blob(data).to_dict())

    def get_blob(self, blob_hash: str) -> Blob:
        """
        Retrieve a blob by hash.

        Raises InvalidObjectError if the object is not a blob.
        """
        obj_data = self.object_store.get_object(blob_hash, verify=self.verify)
        try:
            return Blob.from_dict(obj_data)
        except ValueError as e:
            raise InvalidObjectError(str(e), blob_hash)

    def put_tree(self, entries: Iterable[TreeEntry]) -> str:
        """Store a tree built from entries and return its hash."""
        return self.object_store.put_object(Tree(entries).to_dict())

    def get_tree(self, tree_hash: str) -> Tree:
        """
        Retrieve a tree by hash.

        Raises InvalidObjectError if the object is not a tree.
        """
        obj_data = self.object_store.get_object(tree_hash, verify=self.verify)
        try:
            return Tree.from_dict(obj_data)
        except ValueError as e:
            raise InvalidObjectError(str(e), tree_hash)

    def has_object(self, obj_hash: str) -> bool:
        """Check if an object exists."""
        return self.object_store.has_object(obj_hash)

    def get_object_raw(self, obj_hash: str) -> dict:
        """Get raw object dictionary."""
        return self.object_store.get_object(obj_hash, verify=self.verify)

    # ========== Tree Lookups ==========

    def find_child(self, tree_hash: str, name: str) -> TreeEntry:
        """
        Look up one entry of a tree by name.

        Raises EntryNotFoundError if the tree has no such entry.
        """
        entry = self.get_tree(tree_hash).entry(name)
        if entry is None:
            raise EntryNotFoundError(tree_hash, name)
        return entry

    def open_blob(self, blob_hash: str) -> BlobContent:
        """Load a blob's content so it can be sized and streamed."""
        content = BlobContent(blob_hash, self.get_blob(blob_hash))
        logger.debug("Loaded blob %s (%d bytes)", blob_hash, content.size)
        return content

    def find_entry(self, tree_hash: str, path: str) -> TreeEntry:
        """
        Walk a slash-separated path from a tree down to an entry.

        Raises DirectoryNotFoundError if an intermediate name is not a
        directory, EntryNotFoundError if a name is missing.
        """
        names = split_tree_path(path)
        if not names:
            raise EntryNotFoundError(tree_hash, path)

        current = tree_hash
        for depth, name in enumerate(names[:-1]):
            entry = self.find_child(current, name)
            if not entry.is_dir:
                raise DirectoryNotFoundError('/'.join(names[:depth + 1]))
            current = entry.hash
        return self.find_child(current, names[-1])

    # ========== Snapshot Building ==========

    def import_files(self, files: Mapping[str, Union[bytes, str]]) -> str:
        """
        Build a tree snapshot from a mapping of paths to content.

        Args:
            files: slash-separated relative paths mapped to bytes (or
                UTF-8 text); parent directories are implied

        Returns:
            str: hash of the root tree
        """
        root: Dict[str, object] = {}
        for path, content in files.items():
            names = split_tree_path(path)
            if not names:
                raise ValueError(f"Invalid file path: {path!r}")
            node = root
            for name in names[:-1]:
                child = node.setdefault(name, {})
                if not isinstance(child, dict):
                    raise ValueError(f"Path {path!r} runs through file {name!r}")
                node = child
            if isinstance(node.get(names[-1]), dict):
                raise ValueError(f"Path {path!r} is already a directory")
            if isinstance(content, str):
                content = content.encode('utf-8')
            node[names[-1]] = content

        return self._store_nested(root)

    def _store_nested(self, node: Dict[str, object]) -> str:
        entries = []
        for name, value in node.items():
            if isinstance(value, dict):
                entries.append(TreeEntry(name, FileMode.DIR, self._store_nested(value)))
            else:
                entries.append(TreeEntry(name, FileMode.REGULAR, self.put_blob(value)))
        return self.put_tree(entries)

    def import_directory(
        self,
        path: Union[str, Path],
        exclude: Iterable[str] = DEFAULT_EXCLUDE,
    ) -> str:
        """
        Snapshot a directory on disk into the store.

        Executable bits and symbolic links (stored as their target)
        are kept. Empty directories are skipped.

        Args:
            path: directory to import
            exclude: entry names skipped at every level

        Returns:
            str: hash of the root tree
        """
        exclude = frozenset(exclude)
        tree_hash = self._import_dir(Path(path), exclude)
        if tree_hash is None:
            tree_hash = self.put_tree([])
        logger.debug("Imported %s as tree %s", path, tree_hash)
        return tree_hash

    def _import_dir(self, path: Path, exclude: frozenset):
        entries = []
        with os.scandir(path) as it:
            for dirent in it:
                if dirent.name in exclude:
                    continue
                if dirent.is_symlink():
                    target = os.readlink(dirent.path)
                    entries.append(TreeEntry(
                        dirent.name, FileMode.SYMLINK,
                        self.put_blob(os.fsencode(target)),
                    ))
                elif dirent.is_dir():
                    sub_hash = self._import_dir(Path(dirent.path), exclude)
                    if sub_hash is not None:
                        entries.append(TreeEntry(dirent.name, FileMode.DIR, sub_hash))
                else:
                    mode = FileMode.from_os_mode(dirent.stat().st_mode)
                    data = Path(dirent.path).read_bytes()
                    entries.append(TreeEntry(dirent.name, mode, self.put_blob(data)))

        if not entries:
            return None
        return self.put_tree(entries)

    # ========== Integrity Verification ==========

    def verify_object(self, obj_hash: str) -> bool:
        """
        Verify an object's integrity.

        Returns True if valid.
        Raises ObjectCorruptedError if corrupted.
        """
        self.object_store.get_object(obj_hash, verify=True)
        return True

    def verify_tree(self, tree_hash: str) -> Dict[str, object]:
        """
        Verify a tree and every object below it.

        Returns dict with:
            - valid: bool
            - errors: list of error messages
        """
        is_valid, errors = verify_tree_recursive(
            tree_hash,
            load_func=lambda h: self.object_store.get_object(h, verify=False),
            exists_func=self.object_store.has_object,
        )
        return {
            'valid': is_valid,
            'errors': errors,
        }

    def detect_tampering(self) -> Dict[str, object]:
        """
        Detect tampering across all stored objects.

        Returns dict with:
            - tampered: list of tampered object hashes
            - verified: count of verified objects
            - errors: list of error messages
        """
        result = {
            'tampered': [],
            'verified': 0,
            'errors': [],
        }

        for obj_hash in self.object_store.list_all_objects():
            try:
                self.verify_object(obj_hash)
                result['verified'] += 1
            except Exception as e:
                result['tampered'].append(obj_hash)
                result['errors'].append(f"{obj_hash}: {e}")

        return result

    # ========== Statistics ==========

    def get_statistics(self) -> Dict[str, int]:
        """Get object count and total size of the store."""
        return self.object_store.get_stats()

    def list_all_objects(self) -> List[str]:
        """List all object hashes in store."""
        return self.object_store.list_all_objects()

    def __repr__(self) -> str:
        return f"TreeStoreEngine(path={self.store_path})"
