"""
Blob object model.

Blobs store the raw bytes of one file, content-addressed by hash.
"""

import base64
import io
from typing import BinaryIO

from ..integrity.hashing import compute_object_hash


class Blob:
    """
    Immutable blob object containing file content.

    Blobs are leaf objects - they contain no references.
    """

    def __init__(self, data: bytes):
        self.data = bytes(data)

    def to_dict(self) -> dict:
        """
        Convert blob to storable dictionary representation.

        Returns canonical dict that can be hashed and stored.
        """
        return {
            'type': 'blob',
            'content': base64.b64encode(self.data).decode('ascii'),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Blob':
        """
        Reconstruct blob from stored dictionary.

        Raises ValueError if data is invalid.
        """
        if data.get('type') != 'blob':
            raise ValueError(f"Invalid blob type: {data.get('type')}")

        if 'content' not in data:
            raise ValueError("Blob missing content field")

        try:
            content_bytes = base64.b64decode(data['content'], validate=True)
        except Exception as e:
            raise ValueError(f"Failed to decode blob content: {e}")

        return cls(content_bytes)

    def compute_hash(self) -> str:
        """Compute content hash of this blob."""
        return compute_object_hash(self.to_dict())

    def size(self) -> int:
        """Get size of blob data in bytes."""
        return len(self.data)

    def __repr__(self) -> str:
        hash_preview = self.compute_hash()[:8]
        return f"Blob(size={len(self.data)}, hash={hash_preview}...)"


class BlobContent:
    """
    Loaded content of a blob, ready to be streamed.

    Each call to reader() returns an independent stream positioned
    at the start of the content.
    """

    def __init__(self, blob_hash: str, blob: Blob):
        self.hash = blob_hash
        self._blob = blob

    @property
    def size(self) -> int:
        return self._blob.size()

    def reader(self) -> BinaryIO:
        return io.BytesIO(self._blob.data)

    def __repr__(self) -> str:
        return f"BlobContent(hash={self.hash[:8]}..., size={self.size})"
