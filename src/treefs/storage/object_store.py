"""
Content-addressed object storage.

Provides immutable object storage with content addressing.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from ..errors import (
    ObjectNotFoundError,
    ObjectCorruptedError,
    StorageError,
    InvalidObjectError,
)
from ..integrity.hashing import canonical_json, compute_object_hash, is_valid_hash
from ..integrity.verification import (
    verify_object_integrity,
    verify_object_structure,
)
from .layout import StorageLayout

logger = logging.getLogger(__name__)


class ObjectStore:
    """
    Content-addressed object store with immutable objects.

    Objects are stored by their content hash.
    Once written, objects never change.
    """

    def __init__(self, layout: StorageLayout):
        """Initialize object store with given layout."""
        self.layout = layout

    def put_object(self, obj_data: dict) -> str:
        """
        Store an object and return its hash.

        The object is stored immutably:
        - Hash is computed from canonical representation
        - Object is written atomically
        - If hash already exists, no action (idempotent)

        Returns the content hash.
        """
        verify_object_structure(obj_data)

        obj_hash = compute_object_hash(obj_data)

        obj_path = self.layout.get_object_path(obj_hash)
        if obj_path.exists():
            existing_data = self._read_object_file(obj_path)
            try:
                existing_obj = json.loads(existing_data.decode('utf-8'))
                verify_object_integrity(existing_obj, obj_hash)
                return obj_hash
            except (UnicodeDecodeError, json.JSONDecodeError, ObjectCorruptedError):
                logger.warning("Rewriting corrupted object %s", obj_hash)

        self.layout.ensure_object_directory(obj_hash)
        self._write_object_atomic(obj_path, canonical_json(obj_data))
        logger.debug("Stored %s object %s", obj_data['type'], obj_hash)

        return obj_hash

    def get_object(self, obj_hash: str, verify: bool = True) -> dict:
        """
        Retrieve an object by its hash.

        If verify=True (default), verifies integrity before returning.

        Raises ObjectNotFoundError if object doesn't exist.
        Raises ObjectCorruptedError if verification fails.
        """
        if not is_valid_hash(obj_hash):
            raise InvalidObjectError("Malformed object hash", obj_hash)

        obj_path = self.layout.get_object_path(obj_hash)

        if not obj_path.exists():
            raise ObjectNotFoundError(obj_hash)

        data = self._read_object_file(obj_path)
        try:
            obj_data = json.loads(data.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError("read_object", str(obj_path), e)

        if verify:
            verify_object_structure(obj_data)
            verify_object_integrity(obj_data, obj_hash)

        return obj_data

    def has_object(self, obj_hash: str) -> bool:
        """Check if an object exists in the store."""
        return is_valid_hash(obj_hash) and self.layout.object_exists(obj_hash)

    def list_all_objects(self) -> list[str]:
        """List all object hashes in the store."""
        return self.layout.list_all_objects()

    def _read_object_file(self, path: Path) -> bytes:
        """Read object file contents."""
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError("read_file", str(path), e)

    def _write_object_atomic(self, path: Path, data: bytes) -> None:
        """
        Write object file atomically.

        Uses temp file + rename for atomicity.
        """
        fd = None
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix='.tmp_',
                suffix='.json'
            )

            os.write(fd, data)
            os.close(fd)
            fd = None

            os.replace(temp_path, path)
            temp_path = None

        except OSError as e:
            raise StorageError("write_file", str(path), e)

        finally:
            if fd is not None:
                os.close(fd)
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

    def get_stats(self) -> dict:
        """Get storage statistics."""
        return self.layout.get_storage_stats()
