"""
Test filesystem views over git repositories.

Repositories are built in memory with dulwich, holding the same sample
snapshot the store-backed tests use.
"""

import stat

import pytest
from dulwich.objects import Blob as GitBlob
from dulwich.objects import Commit, Tag
from dulwich.objects import Tree as GitTree
from dulwich.object_store import MemoryObjectStore
from dulwich.repo import MemoryRepo

from treefs import (
    FileMode,
    GitTreeStore,
    TreeFS,
    EntryNotFoundError,
    InvalidObjectError,
    InvalidPathError,
    NotFoundError,
    ObjectNotFoundError,
    RetrievalError,
    glob,
    tree_of,
    walk,
)

MISSING_SHA = b'a' * 40


def store_tree(object_store, files):
    """
    Add nested git trees for a path mapping and return the root id.

    Values are bytes (stored as 100644) or (git_mode, bytes); a
    (git_mode, sha) pair with a 40-byte sha references an object
    without storing it.
    """
    root = {}
    for path, value in files.items():
        node = root
        *parents, name = path.split('/')
        for parent in parents:
            node = node.setdefault(parent, {})
        node[name] = value
    return _store_node(object_store, root)


def _store_node(object_store, node):
    git_tree = GitTree()
    for name, value in node.items():
        if isinstance(value, dict):
            git_tree.add(name.encode(), 0o040000, _store_node(object_store, value))
            continue
        git_mode, data = value if isinstance(value, tuple) else (0o100644, value)
        if data is MISSING_SHA:
            git_tree.add(name.encode(), git_mode, MISSING_SHA)
            continue
        blob = GitBlob.from_string(data)
        object_store.add_object(blob)
        git_tree.add(name.encode(), git_mode, blob.id)
    object_store.add_object(git_tree)
    return git_tree.id


def commit_tree(repo, tree_id, message=b'snapshot'):
    commit = Commit()
    commit.tree = tree_id
    commit.author = commit.committer = b'Test User <test@example.com>'
    commit.author_time = commit.commit_time = 0
    commit.author_timezone = commit.commit_timezone = 0
    commit.message = message
    repo.object_store.add_object(commit)
    return commit.id


@pytest.fixture
def git_repo(sample_files):
    """In-memory repository whose HEAD commit holds the sample snapshot."""
    repo = MemoryRepo()
    tree_id = store_tree(repo.object_store, sample_files)
    commit_id = commit_tree(repo, tree_id)
    repo.refs[b'refs/heads/master'] = commit_id
    repo.refs.set_symbolic_ref(b'HEAD', b'refs/heads/master')
    return repo


@pytest.fixture
def git_fs(git_repo):
    return TreeFS.from_git(git_repo)


class TestGitView:
    """The sample snapshot behaves the same when read from git."""

    def test_stat_root(self, git_fs):
        info = git_fs.stat('.')

        assert info.name == '.'
        assert info.size == 0
        assert info.mode == stat.S_IFDIR | 0o777
        assert info.mtime == 0.0

    def test_read_file(self, git_fs):
        assert git_fs.read_file('README.md') == b'# README'

    def test_read_dir(self, git_fs):
        """Listing reports names, kinds and blob sizes."""
        dir12_txt, dir121 = git_fs.read_dir('dir1/dir12')

        assert dir12_txt.name == 'dir12.txt'
        assert dir12_txt.info().size == 5
        assert dir12_txt.info().mode == stat.S_IFREG | 0o644
        assert dir121.name == 'dir121'
        assert dir121.is_dir()

    def test_missing_file(self, git_fs):
        with pytest.raises(NotFoundError):
            git_fs.read_file('dir1/dir11/file_not_exists.txt')

    def test_invalid_path(self, git_fs):
        with pytest.raises(InvalidPathError):
            git_fs.open('./../abc.txt')

    def test_sub(self, git_fs):
        assert git_fs.sub('dir1').read_file('dir11/dir11.txt') == b'dir11'

    def test_walk_matches_snapshot(self, git_fs, sample_files):
        """Every file of the commit is reachable by walking."""
        found = {}
        for dirpath, _, filenames in walk(git_fs):
            for filename in filenames:
                path = filename if dirpath == '.' else f"{dirpath}/{filename}"
                found[path] = git_fs.read_file(path)

        assert found == sample_files

    def test_glob(self, git_fs):
        assert glob(git_fs, 'dir1/*/*.txt') == ['dir1/dir11/dir11.txt', 'dir1/dir12/dir12.txt']

    def test_same_tree_as_store(self, git_fs, fsys):
        """A git view and a store view of one snapshot list alike."""
        for dirpath, dirnames, filenames in walk(fsys):
            assert [e.name for e in git_fs.read_dir(dirpath)] == sorted(dirnames + filenames)


class TestRevisions:
    """Test picking the tree a view is rooted at."""

    def test_by_commit_id(self, git_repo):
        commit_id = git_repo.refs[b'HEAD']

        fsys = TreeFS.from_git(git_repo, commit_id.decode())

        assert fsys.read_file('README.md') == b'# README'

    def test_by_tree_id(self, git_repo):
        tree_id = git_repo[git_repo.refs[b'HEAD']].tree

        fsys = TreeFS.from_git(git_repo, tree_id)

        assert fsys.tree_hash == tree_id.decode()

    def test_by_branch(self, git_repo):
        assert tree_of(git_repo, 'refs/heads/master') == tree_of(git_repo, 'HEAD')

    def test_annotated_tag_is_peeled(self, git_repo):
        commit_id = git_repo.refs[b'HEAD']
        tag = Tag()
        tag.name = b'v1.0'
        tag.tagger = b'Test User <test@example.com>'
        tag.tag_time = 0
        tag.tag_timezone = 0
        tag.message = b'release'
        tag.object = (Commit, commit_id)
        git_repo.object_store.add_object(tag)
        git_repo.refs[b'refs/tags/v1.0'] = tag.id

        assert tree_of(git_repo, 'refs/tags/v1.0') == tree_of(git_repo, 'HEAD')

    def test_later_commit_is_a_new_snapshot(self, git_repo, sample_files):
        """Views keep reading the commit they were created from."""
        before = TreeFS.from_git(git_repo)
        changed = dict(sample_files, **{'README.md': b'# CHANGED'})
        git_repo.refs[b'refs/heads/master'] = commit_tree(
            git_repo, store_tree(git_repo.object_store, changed)
        )

        assert before.read_file('README.md') == b'# README'
        assert TreeFS.from_git(git_repo).read_file('README.md') == b'# CHANGED'

    def test_unknown_ref(self, git_repo):
        with pytest.raises(ObjectNotFoundError):
            TreeFS.from_git(git_repo, 'refs/heads/nope')

    def test_blob_is_not_a_revision(self, git_repo):
        blob = GitBlob.from_string(b'data')
        git_repo.object_store.add_object(blob)

        with pytest.raises(InvalidObjectError):
            tree_of(git_repo, blob.id)


class TestGitModes:
    """Git filemodes map onto the entry modes the view reports."""

    @pytest.fixture
    def modes_fs(self):
        object_store = MemoryObjectStore()
        tree_id = store_tree(object_store, {
            'run.sh': (0o100755, b'#!/bin/sh\n'),
            'link': (0o120000, b'run.sh'),
            'shared.txt': (0o100664, b'group'),
        })
        return TreeFS(GitTreeStore(object_store), tree_id.decode())

    def test_executable(self, modes_fs):
        assert modes_fs.stat('run.sh').mode == stat.S_IFREG | 0o755

    def test_symlink(self, modes_fs):
        """Symlinks read as their target and report S_IFLNK."""
        with modes_fs.open('link') as f:
            assert f.is_symlink()
            assert f.read() == b'run.sh'

    def test_group_writable_reads_as_regular(self, modes_fs):
        assert modes_fs.stat('shared.txt').mode == stat.S_IFREG | 0o644

    def test_mode_table(self):
        assert FileMode.from_git_mode(0o040000) is FileMode.DIR
        assert FileMode.from_git_mode(0o100644) is FileMode.REGULAR
        assert FileMode.from_git_mode(0o100664) is FileMode.REGULAR
        assert FileMode.from_git_mode(0o100755) is FileMode.EXECUTABLE
        assert FileMode.from_git_mode(0o120000) is FileMode.SYMLINK
        assert FileMode.from_git_mode(0o160000) is FileMode.DIR

        with pytest.raises(InvalidObjectError):
            FileMode.from_git_mode(0o100600)


class TestGitTreeStore:
    """Test the store's lookups and their failures."""

    @pytest.fixture
    def object_store(self):
        return MemoryObjectStore()

    @pytest.fixture
    def git_store(self, object_store):
        return GitTreeStore(object_store)

    def test_object_store_directly(self, object_store, git_store):
        """A bare object store is enough to build a view."""
        tree_id = store_tree(object_store, {'README.md': b'# README'})

        fsys = TreeFS(git_store, tree_id.decode())

        assert fsys.read_file('README.md') == b'# README'

    def test_find_child(self, object_store, git_store):
        tree_id = store_tree(object_store, {'a/b.txt': b'b'}).decode()

        entry = git_store.find_child(tree_id, 'a')

        assert entry.name == 'a'
        assert entry.mode is FileMode.DIR
        assert git_store.find_child(entry.hash, 'b.txt').mode is FileMode.REGULAR

    def test_missing_child(self, object_store, git_store):
        tree_id = store_tree(object_store, {'a.txt': b'a'}).decode()

        with pytest.raises(EntryNotFoundError) as exc_info:
            git_store.find_child(tree_id, 'b.txt')

        assert exc_info.value.name == 'b.txt'
        assert exc_info.value.tree_hash == tree_id

    def test_get_tree_is_sorted(self, object_store, git_store):
        tree_id = store_tree(object_store, {'b': b'', 'a/x': b'', 'c': b''}).decode()

        assert git_store.get_tree(tree_id).names() == ['a', 'b', 'c']

    def test_wrong_object_type(self, object_store, git_store):
        blob = GitBlob.from_string(b'data')
        object_store.add_object(blob)

        with pytest.raises(InvalidObjectError):
            git_store.get_tree(blob.id.decode())

    def test_missing_object(self, git_store):
        with pytest.raises(ObjectNotFoundError):
            git_store.open_blob(MISSING_SHA.decode())

    def test_malformed_hash(self, git_store):
        with pytest.raises(InvalidObjectError):
            git_store.find_child('../../etc/passwd', 'x')

    def test_missing_blob_is_retrieval_error(self, object_store, git_store):
        """An entry whose blob is absent exists but cannot be read."""
        tree_id = store_tree(object_store, {'ghost.txt': (0o100644, MISSING_SHA)})
        fsys = TreeFS(git_store, tree_id.decode())

        assert [e.name for e in fsys.read_dir('.')] == ['ghost.txt']
        with pytest.raises(RetrievalError) as exc_info:
            fsys.read_file('ghost.txt')

        assert isinstance(exc_info.value.cause, ObjectNotFoundError)
