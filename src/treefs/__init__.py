"""
treefs - read-only filesystem access to content-addressed tree snapshots.

This package provides:
- Immutable content-addressed blob and tree storage
- Snapshots of directories on disk
- A read-only filesystem view (open, read_dir, sub) over any stored tree
- Integrity verification and tamper detection
- The same view over any commit or tree of a git repository

Example usage:
    from treefs import TreeStoreEngine, TreeFS

    engine = TreeStoreEngine('/path/to/store')
    engine.initialize()

    tree_hash = engine.import_directory('/path/to/project')
    fsys = TreeFS(engine, tree_hash)

    fsys.read_file('README.md')
    [entry.name for entry in fsys.read_dir('.')]
    docs = fsys.sub('docs')

    repo_fs = TreeFS.from_git('/path/to/repo', 'refs/heads/main')
    repo_fs.read_file('setup.py')
"""

from .engine import TreeStoreEngine
from .errors import (
    TreeStoreError,
    ObjectNotFoundError,
    ObjectCorruptedError,
    InvalidObjectError,
    ReferenceMissingError,
    TreeVerificationError,
    EntryNotFoundError,
    DirectoryNotFoundError,
    StorageError,
)
from .git import GitTreeStore, tree_of
from .fs.errors import (
    PathError,
    InvalidPathError,
    NotFoundError,
    RetrievalError,
    to_fs_error,
)
from .fs.file import FileInfo, TreeFile
from .fs.path import valid_path
from .fs.view import TreeFS
from .fs.walk import exists, glob, walk
from .model.blob import Blob, BlobContent
from .model.filemode import FileMode
from .model.tree import Tree, TreeEntry

__version__ = '0.1.0'

__all__ = [
    # Stores
    'TreeStoreEngine',
    'GitTreeStore',
    'tree_of',

    # Filesystem view
    'TreeFS',
    'TreeFile',
    'FileInfo',
    'valid_path',
    'walk',
    'glob',
    'exists',

    # Store errors
    'TreeStoreError',
    'ObjectNotFoundError',
    'ObjectCorruptedError',
    'InvalidObjectError',
    'ReferenceMissingError',
    'TreeVerificationError',
    'EntryNotFoundError',
    'DirectoryNotFoundError',
    'StorageError',

    # Filesystem errors
    'PathError',
    'InvalidPathError',
    'NotFoundError',
    'RetrievalError',
    'to_fs_error',

    # Models
    'Blob',
    'BlobContent',
    'FileMode',
    'Tree',
    'TreeEntry',
]
