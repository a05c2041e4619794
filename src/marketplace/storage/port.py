"""Blob storage port (abstract interface).

Deposit proofs, avatars, identity documents and vehicle photos are stored
as blobs; records only keep the opaque reference returned by ``put``. Read
paths resolve references into URLs at read time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredBlob:
    """Result of storing a blob."""

    ref: str
    content_type: str
    size: int


class BlobStore(ABC):
    """Abstract blob store interface."""

    @abstractmethod
    def put(self, content: bytes, content_type: str) -> StoredBlob:
        """Store ``content`` and return its reference."""
        ...

    @abstractmethod
    def get(self, ref: str) -> tuple[bytes, str] | None:
        """Return ``(content, content_type)`` or None when the reference is unknown."""
        ...

    @abstractmethod
    def url_for(self, ref: str | None) -> str | None:
        """Resolve a reference into a URL a client can fetch; None when unknown."""
        ...

    @abstractmethod
    def delete(self, ref: str) -> bool:
        """Remove a blob. Returns False when the reference is unknown."""
        ...
