"""
Error types for tree store operations.

All errors are explicit and never silent.
"""


class TreeStoreError(Exception):
    """Base exception for all tree store errors."""
    pass


class ObjectNotFoundError(TreeStoreError):
    """Raised when a requested object does not exist in the object store."""

    def __init__(self, object_hash: str):
        self.object_hash = object_hash
        super().__init__(f"Object not found: {object_hash}")


class ObjectCorruptedError(TreeStoreError):
    """Raised when an object's content does not match its hash."""

    def __init__(self, object_hash: str, expected: str, actual: str):
        self.object_hash = object_hash
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Object corrupted: {object_hash}\n"
            f"Expected hash: {expected}\n"
            f"Actual hash: {actual}"
        )


class InvalidObjectError(TreeStoreError):
    """Raised when an object is malformed or invalid."""

    def __init__(self, reason: str, object_hash: str = None):
        self.reason = reason
        self.object_hash = object_hash
        msg = f"Invalid object: {reason}"
        if object_hash:
            msg += f" (hash: {object_hash})"
        super().__init__(msg)


class ReferenceMissingError(TreeStoreError):
    """Raised when a referenced object is missing."""

    def __init__(self, referencing_hash: str, missing_hash: str):
        self.referencing_hash = referencing_hash
        self.missing_hash = missing_hash
        super().__init__(
            f"Object {referencing_hash} references missing object {missing_hash}"
        )


class TreeVerificationError(TreeStoreError):
    """Raised when recursive tree verification fails."""

    def __init__(self, tree_hash: str, reason: str):
        self.tree_hash = tree_hash
        self.reason = reason
        super().__init__(f"Tree verification failed: {tree_hash}\nReason: {reason}")


class EntryNotFoundError(TreeStoreError):
    """Raised when a tree has no entry with the requested name."""

    def __init__(self, tree_hash: str, name: str):
        self.tree_hash = tree_hash
        self.name = name
        super().__init__(f"Entry not found: {name!r} in tree {tree_hash}")


class DirectoryNotFoundError(TreeStoreError):
    """Raised when a path does not lead to a directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Directory not found: {path}")


class StorageError(TreeStoreError):
    """Raised when filesystem operations fail."""

    def __init__(self, operation: str, path: str, cause: Exception = None):
        self.operation = operation
        self.path = path
        self.cause = cause
        msg = f"Storage error during {operation}: {path}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)
