"""
Content addressing for stored objects.

Objects are encoded as canonical JSON and hashed with BLAKE3, or
SHA-256 when the blake3 package is not installed.
"""

import hashlib
import json
from typing import Any

try:
    import blake3
    HAS_BLAKE3 = True
except ImportError:
    HAS_BLAKE3 = False


HASH_HEX_LENGTH = 64


def canonical_json(obj: Any) -> bytes:
    """
    Encode an object to canonical JSON bytes.

    Keys are sorted, there is no whitespace and the output is UTF-8,
    so the same object always encodes to the same bytes.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(',', ':'),
        ensure_ascii=False,
        allow_nan=False,
    ).encode('utf-8')


def compute_hash(data: bytes) -> str:
    """Hex digest of raw bytes."""
    if HAS_BLAKE3:
        return blake3.blake3(data).hexdigest()
    return hashlib.sha256(data).hexdigest()


def compute_object_hash(obj: Any) -> str:
    """
    Hash a structured object through its canonical JSON encoding.

    Independent of dict ordering.
    """
    return compute_hash(canonical_json(obj))


def is_valid_hash(value: Any) -> bool:
    """Check that a value looks like an object hash (64 lowercase hex chars)."""
    if not isinstance(value, str) or len(value) != HASH_HEX_LENGTH:
        return False
    return all(c in '0123456789abcdef' for c in value)


def get_hash_prefix(hash_str: str, prefix_length: int = 2) -> str:
    """
    Get prefix of hash for directory sharding.

    Default is 2 characters, creating 256 subdirectories.
    """
    if len(hash_str) < prefix_length:
        raise ValueError(f"Hash too short for prefix length {prefix_length}")
    return hash_str[:prefix_length]
