"""
Tree object model.

Trees provide hierarchical grouping of blobs and other trees.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..integrity.hashing import compute_object_hash
from .filemode import FileMode


@dataclass(frozen=True)
class TreeEntry:
    """One named child of a tree: a subtree or a blob reference."""

    name: str
    mode: FileMode
    hash: str

    @property
    def is_dir(self) -> bool:
        return self.mode.is_dir

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'mode': str(self.mode),
            'hash': self.hash,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TreeEntry':
        """
        Reconstruct an entry from its stored form.

        Raises ValueError if a field is missing.
        """
        for field_name in ('name', 'mode', 'hash'):
            if field_name not in data:
                raise ValueError(f"Tree entry missing {field_name} field")
        return cls(data['name'], FileMode.parse(data['mode']), data['hash'])


def validate_entry_name(name: str) -> None:
    """
    Check that a name can be a single tree entry.

    Raises ValueError for empty names, '.', '..' and names containing '/'.
    """
    if not name or name in ('.', '..') or '/' in name:
        raise ValueError(f"Invalid tree entry name: {name!r}")


class Tree:
    """
    Immutable tree object.

    Entries are kept sorted by name and names are unique, so the
    canonical form (and therefore the hash) does not depend on the
    order entries were supplied in.
    """

    def __init__(self, entries: Iterable[TreeEntry]):
        """
        Create a tree.

        Args:
            entries: child entries in any order

        Raises ValueError on invalid or duplicate names.
        """
        ordered = sorted(entries, key=lambda e: e.name)
        seen = set()
        for entry in ordered:
            validate_entry_name(entry.name)
            if entry.name in seen:
                raise ValueError(f"Duplicate tree entry name: {entry.name!r}")
            seen.add(entry.name)
        self.entries = tuple(ordered)
        self._by_name = {entry.name: entry for entry in self.entries}

    def to_dict(self) -> dict:
        """
        Convert tree to storable dictionary representation.

        Returns canonical dict that can be hashed and stored.
        """
        return {
            'type': 'tree',
            'content': {
                'entries': [entry.to_dict() for entry in self.entries],
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Tree':
        """
        Reconstruct tree from stored dictionary.

        Raises ValueError if data is invalid.
        """
        if data.get('type') != 'tree':
            raise ValueError(f"Invalid tree type: {data.get('type')}")

        if 'content' not in data:
            raise ValueError("Tree missing content field")

        content = data['content']

        if not isinstance(content, dict) or 'entries' not in content:
            raise ValueError("Tree content missing entries field")

        entries = content['entries']
        if not isinstance(entries, list):
            raise ValueError("Tree entries must be a list")

        return cls(TreeEntry.from_dict(entry) for entry in entries)

    def compute_hash(self) -> str:
        """Compute content hash of this tree."""
        return compute_object_hash(self.to_dict())

    def entry(self, name: str) -> Optional[TreeEntry]:
        """Get the entry with the given name, or None."""
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def child_hashes(self) -> List[str]:
        return [entry.hash for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __repr__(self) -> str:
        hash_preview = self.compute_hash()[:8]
        return f"Tree(entries={len(self.entries)}, hash={hash_preview}...)"
