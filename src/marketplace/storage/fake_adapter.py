"""In-memory blob store for development and testing.

Blobs live in a dict keyed by a random reference; URLs point at the
``/uploads/{ref}`` route, which serves the bytes back from this store.
"""

from uuid import uuid4

from marketplace.storage.port import BlobStore, StoredBlob


class InMemoryBlobStore(BlobStore):
    """Process-local blob store."""

    def __init__(self, base_url: str = "/uploads") -> None:
        self.base_url = base_url.rstrip("/")
        self.blobs: dict[str, tuple[bytes, str]] = {}

    def put(self, content: bytes, content_type: str) -> StoredBlob:
        ref = f"blob_{uuid4().hex}"
        self.blobs[ref] = (content, content_type)
        return StoredBlob(ref=ref, content_type=content_type, size=len(content))

    def get(self, ref: str) -> tuple[bytes, str] | None:
        return self.blobs.get(ref)

    def url_for(self, ref: str | None) -> str | None:
        if not ref or ref not in self.blobs:
            return None
        return f"{self.base_url}/{ref}"

    def delete(self, ref: str) -> bool:
        return self.blobs.pop(ref, None) is not None
