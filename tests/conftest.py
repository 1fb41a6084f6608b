"""
Shared fixtures: a temporary store and the sample snapshot used across
the filesystem tests.
"""

import tempfile

import pytest

from treefs import TreeStoreEngine, TreeFS, ObjectNotFoundError


SAMPLE_FILES = {
    'README.md': b'# README',
    'dir1/dir11/dir11.txt': b'dir11',
    'dir1/dir12/dir12.txt': b'dir12',
    'dir1/dir12/dir121/empty.txt': b'',
}


class CountingStore:
    """Store wrapper that counts blob loads and can be told to fail them."""

    def __init__(self, engine):
        self.engine = engine
        self.open_blob_calls = 0
        self.fail_blobs = False

    def find_child(self, tree_hash, name):
        return self.engine.find_child(tree_hash, name)

    def get_tree(self, tree_hash):
        return self.engine.get_tree(tree_hash)

    def open_blob(self, blob_hash):
        self.open_blob_calls += 1
        if self.fail_blobs:
            raise ObjectNotFoundError(blob_hash)
        return self.engine.open_blob(blob_hash)


@pytest.fixture
def store():
    """Create a temporary store for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        engine = TreeStoreEngine(tmpdir)
        engine.initialize()
        yield engine


@pytest.fixture
def sample_files():
    return dict(SAMPLE_FILES)


@pytest.fixture
def sample_tree(store):
    """Hash of the sample snapshot."""
    return store.import_files(SAMPLE_FILES)


@pytest.fixture
def fsys(store, sample_tree):
    """Filesystem view over the sample snapshot."""
    return TreeFS(store, sample_tree)


@pytest.fixture
def counting_store(store):
    return CountingStore(store)
