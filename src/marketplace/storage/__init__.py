"""Blob store factory.

Provides get_blob_store() / set_blob_store() to swap implementations. The
in-memory store is the default for development and testing.
"""

from marketplace.storage.fake_adapter import InMemoryBlobStore
from marketplace.storage.port import BlobStore

_current_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    """Return the current blob store. Defaults to InMemoryBlobStore."""
    global _current_store
    if _current_store is None:
        _current_store = InMemoryBlobStore()
    return _current_store


def set_blob_store(store: BlobStore) -> None:
    """Override the active blob store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_blob_store() -> None:
    """Reset to default store."""
    global _current_store
    _current_store = None
