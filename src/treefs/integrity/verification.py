"""
Integrity verification for stored objects and trees.

Provides tamper detection and recursive tree verification.
"""

from typing import Callable, List, Set, Tuple

from ..errors import (
    ObjectCorruptedError,
    InvalidObjectError,
    ReferenceMissingError,
)
from ..model.filemode import FileMode
from .hashing import compute_object_hash, is_valid_hash


VALID_TYPES = {'blob', 'tree'}


def verify_object_integrity(obj_data: dict, expected_hash: str) -> None:
    """
    Verify that an object's content matches its hash.

    Raises ObjectCorruptedError if mismatch detected.
    """
    actual_hash = compute_object_hash(obj_data)
    if actual_hash != expected_hash:
        raise ObjectCorruptedError(expected_hash, expected_hash, actual_hash)


def verify_object_structure(obj_data: dict) -> None:
    """
    Verify that an object has valid structure.

    All objects must have a 'type' of blob or tree and a 'content'
    field. Blob content is a base64 string; tree content holds an
    'entries' list of {name, mode, hash} records.

    Raises InvalidObjectError if structure is invalid.
    """
    if not isinstance(obj_data, dict):
        raise InvalidObjectError("Object must be a dictionary")

    if 'type' not in obj_data:
        raise InvalidObjectError("Object missing 'type' field")

    if 'content' not in obj_data:
        raise InvalidObjectError("Object missing 'content' field")

    obj_type = obj_data['type']
    if obj_type not in VALID_TYPES:
        raise InvalidObjectError(f"Invalid object type: {obj_type}")

    content = obj_data['content']

    if obj_type == 'blob':
        if not isinstance(content, str):
            raise InvalidObjectError("Blob content must be a base64 string")
        return

    if not isinstance(content, dict) or not isinstance(content.get('entries'), list):
        raise InvalidObjectError("Tree content must hold an entries list")

    for entry in content['entries']:
        if not isinstance(entry, dict):
            raise InvalidObjectError("Tree entry must be a dictionary")
        for field_name in ('name', 'mode', 'hash'):
            if field_name not in entry:
                raise InvalidObjectError(f"Tree entry missing '{field_name}' field")
        if not is_valid_hash(entry['hash']):
            raise InvalidObjectError(f"Tree entry has invalid hash: {entry['hash']!r}")
        FileMode.parse(entry['mode'])


def extract_references(obj_data: dict) -> Set[str]:
    """
    Extract all object references from an object.

    Trees reference the objects named by their entries; blobs are
    leaf objects with no references.

    Returns set of referenced hashes.
    """
    if obj_data.get('type') != 'tree':
        return set()
    content = obj_data.get('content', {})
    if not isinstance(content, dict):
        return set()
    return {entry['hash'] for entry in content.get('entries', []) if 'hash' in entry}


def verify_references_exist(obj_hash: str, references: Set[str], exists_func) -> None:
    """
    Verify that all referenced objects exist.

    exists_func should be a callable that takes a hash and returns bool.

    Raises ReferenceMissingError if any reference is missing.
    """
    for ref_hash in sorted(references):
        if not exists_func(ref_hash):
            raise ReferenceMissingError(obj_hash, ref_hash)


def verify_tree_recursive(
    tree_hash: str,
    load_func: Callable[[str], dict],
    exists_func: Callable[[str], bool],
    visited: Set[str] = None,
) -> Tuple[bool, List[str]]:
    """
    Recursively verify a tree and everything below it.

    load_func: callable that loads object data by hash
    exists_func: callable that checks if object exists by hash
    visited: set of already-verified hashes (shared subtrees are
        verified once)

    Returns (is_valid, errors) where errors is list of error messages.
    """
    if visited is None:
        visited = set()

    errors = []

    if tree_hash in visited:
        return True, errors
    visited.add(tree_hash)

    try:
        obj_data = load_func(tree_hash)
    except Exception as e:
        errors.append(f"Failed to load {tree_hash}: {e}")
        return False, errors

    try:
        verify_object_structure(obj_data)
    except InvalidObjectError as e:
        errors.append(f"Invalid structure in {tree_hash}: {e}")
        return False, errors

    try:
        verify_object_integrity(obj_data, tree_hash)
    except ObjectCorruptedError as e:
        errors.append(f"Corruption in {tree_hash}: {e}")
        return False, errors

    if obj_data.get('type') != 'tree':
        errors.append(f"Object {tree_hash} is not a tree")
        return False, errors

    try:
        verify_references_exist(tree_hash, extract_references(obj_data), exists_func)
    except ReferenceMissingError as e:
        errors.append(str(e))
        return False, errors

    for entry in obj_data['content']['entries']:
        ref_hash = entry['hash']
        is_dir_entry = FileMode.parse(entry['mode']).is_dir

        if is_dir_entry:
            is_valid, sub_errors = verify_tree_recursive(
                ref_hash, load_func, exists_func, visited
            )
            if not is_valid:
                errors.extend(sub_errors)
            continue

        if ref_hash in visited:
            continue
        visited.add(ref_hash)

        try:
            ref_obj = load_func(ref_hash)
            verify_object_structure(ref_obj)
            verify_object_integrity(ref_obj, ref_hash)
        except Exception as e:
            errors.append(f"Failed to verify entry {entry['name']!r} ({ref_hash}): {e}")
            continue

        if ref_obj.get('type') != 'blob':
            errors.append(f"Entry {entry['name']!r} ({ref_hash}) is not a blob")

    return len(errors) == 0, errors
