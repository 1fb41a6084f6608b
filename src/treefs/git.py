"""
Git object database as a tree store.

GitTreeStore answers the lookups a TreeFS needs (find_child, get_tree,
open_blob) straight from a git repository's objects through dulwich,
so any commit or tree can be browsed without a checkout.
"""

import logging
import os
from typing import Union

from dulwich.errors import ObjectFormatException
from dulwich.objects import Blob as GitBlob
from dulwich.objects import Commit, Tag, valid_hexsha
from dulwich.objects import Tree as GitTree
from dulwich.repo import BaseRepo, Repo

from .errors import EntryNotFoundError, InvalidObjectError, ObjectNotFoundError
from .model.blob import Blob, BlobContent
from .model.filemode import FileMode
from .model.tree import Tree, TreeEntry

logger = logging.getLogger(__name__)


def encode_name(name: str) -> bytes:
    return name.encode('utf-8', 'surrogateescape')


def decode_name(name: bytes) -> str:
    return name.decode('utf-8', 'surrogateescape')


class GitTreeStore:
    """
    Read-only tree store over a dulwich object store.

    Hashes are 40-character hex object ids as str. Objects are read
    from the repository on every call; nothing is cached here.
    """

    def __init__(self, object_store):
        """
        Args:
            object_store: dulwich object store (repo.object_store, or a
                MemoryObjectStore)
        """
        self.object_store = object_store

    @classmethod
    def from_repo(cls, repo: BaseRepo) -> 'GitTreeStore':
        return cls(repo.object_store)

    # ========== Object Access ==========

    def _get_object(self, obj_hash: str, expected):
        """
        Load an object and check its type.

        Raises InvalidObjectError for malformed ids, unparseable objects
        and objects of another type; ObjectNotFoundError if absent.
        """
        if not isinstance(obj_hash, str) or not valid_hexsha(obj_hash):
            raise InvalidObjectError("Malformed object hash", obj_hash)

        try:
            obj = self.object_store[obj_hash.encode('ascii')]
        except KeyError:
            raise ObjectNotFoundError(obj_hash)
        except ObjectFormatException as e:
            raise InvalidObjectError(str(e), obj_hash) from e

        if not isinstance(obj, expected):
            raise InvalidObjectError(
                f"Expected {expected.type_name.decode()}, "
                f"got {obj.type_name.decode()}",
                obj_hash,
            )
        return obj

    # ========== Tree Lookups ==========

    def find_child(self, tree_hash: str, name: str) -> TreeEntry:
        """
        Look up one entry of a tree by name.

        Raises EntryNotFoundError if the tree has no such entry.
        """
        git_tree = self._get_object(tree_hash, GitTree)
        try:
            git_mode, sha = git_tree[encode_name(name)]
        except KeyError:
            raise EntryNotFoundError(tree_hash, name)
        return TreeEntry(name, FileMode.from_git_mode(git_mode), sha.decode('ascii'))

    def get_tree(self, tree_hash: str) -> Tree:
        """
        Retrieve a tree by hash.

        Raises InvalidObjectError if the object is not a tree or holds
        an entry with an unknown mode.
        """
        git_tree = self._get_object(tree_hash, GitTree)
        return Tree(
            TreeEntry(
                decode_name(item.path),
                FileMode.from_git_mode(item.mode),
                item.sha.decode('ascii'),
            )
            for item in git_tree.iteritems()
        )

    def open_blob(self, blob_hash: str) -> BlobContent:
        """Load a blob's content so it can be sized and streamed."""
        git_blob = self._get_object(blob_hash, GitBlob)
        content = BlobContent(blob_hash, Blob(git_blob.as_raw_string()))
        logger.debug("Loaded git blob %s (%d bytes)", blob_hash, content.size)
        return content

    def __repr__(self) -> str:
        return f"GitTreeStore({self.object_store!r})"


def open_repo(repo: Union[BaseRepo, str, os.PathLike]) -> BaseRepo:
    """Accept an open repository or the path of one."""
    if isinstance(repo, BaseRepo):
        return repo
    return Repo(os.fspath(repo))


def tree_of(repo: BaseRepo, rev: Union[str, bytes] = 'HEAD') -> str:
    """
    Find the root tree a revision points at.

    rev may be a ref name ("HEAD", "refs/heads/main") or the id of a
    commit, annotated tag or tree. Tags are peeled.

    Raises ObjectNotFoundError if rev names nothing, InvalidObjectError
    if it names a blob.
    """
    if isinstance(rev, str):
        rev = rev.encode('utf-8')

    try:
        obj = repo[rev]
        while isinstance(obj, Tag):
            _obj_type, sha = obj.object
            obj = repo.object_store[sha]
    except KeyError:
        raise ObjectNotFoundError(rev.decode('utf-8', 'replace'))

    if isinstance(obj, Commit):
        tree_hash = obj.tree.decode('ascii')
    elif isinstance(obj, GitTree):
        tree_hash = obj.id.decode('ascii')
    else:
        raise InvalidObjectError(
            f"{rev.decode('utf-8', 'replace')} names a {obj.type_name.decode()}, "
            "not a commit or tree"
        )

    logger.debug("Revision %s has tree %s", rev.decode('utf-8', 'replace'), tree_hash)
    return tree_hash
