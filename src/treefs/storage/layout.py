"""
Filesystem layout for object storage.

Implements content-addressed storage with directory sharding.
"""

from pathlib import Path

from ..errors import StorageError
from ..integrity.hashing import get_hash_prefix


class StorageLayout:
    """
    Manages filesystem layout for content-addressed objects.

    Layout:
        store_root/
            objects/
                <prefix>/
                    <hash>       # object file
    """

    def __init__(self, store_root: Path):
        """Initialize storage layout at given root."""
        self.store_root = Path(store_root).resolve()
        self.objects_dir = self.store_root / "objects"

    def initialize(self) -> None:
        """
        Initialize storage directory structure.

        Idempotent - safe to call multiple times.
        """
        try:
            self.store_root.mkdir(parents=True, exist_ok=True)
            self.objects_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise StorageError("initialize", str(self.store_root), e)

    def get_object_path(self, obj_hash: str) -> Path:
        """
        Get filesystem path for an object by its hash.

        Uses 2-character prefix for directory sharding.
        """
        prefix = get_hash_prefix(obj_hash, 2)
        return self.objects_dir / prefix / obj_hash

    def ensure_object_directory(self, obj_hash: str) -> None:
        """Ensure the directory for an object exists."""
        prefix_dir = self.objects_dir / get_hash_prefix(obj_hash, 2)
        try:
            prefix_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("mkdir", str(prefix_dir), e)

    def list_all_objects(self) -> list[str]:
        """List all object hashes in the store by scanning prefix directories."""
        objects = []

        if not self.objects_dir.exists():
            return objects

        try:
            for prefix_dir in sorted(self.objects_dir.iterdir()):
                if not prefix_dir.is_dir():
                    continue
                for obj_file in sorted(prefix_dir.iterdir()):
                    # skip in-flight temp files
                    if obj_file.is_file() and not obj_file.name.startswith('.'):
                        objects.append(obj_file.name)
        except OSError as e:
            raise StorageError("list_objects", str(self.objects_dir), e)

        return objects

    def object_exists(self, obj_hash: str) -> bool:
        """Check if an object exists in storage."""
        return self.get_object_path(obj_hash).exists()

    def get_storage_stats(self) -> dict:
        """
        Get storage statistics.

        Returns dict with:
        - total_objects: number of objects
        - total_size_bytes: total size in bytes
        """
        stats = {
            'total_objects': 0,
            'total_size_bytes': 0,
        }

        for obj_hash in self.list_all_objects():
            obj_path = self.get_object_path(obj_hash)
            try:
                stats['total_size_bytes'] += obj_path.stat().st_size
            except OSError as e:
                raise StorageError("stat", str(obj_path), e)
            stats['total_objects'] += 1

        return stats
