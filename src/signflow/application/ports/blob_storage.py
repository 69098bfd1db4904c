"""Blob storage port - where the document's file bytes live."""

from typing import Protocol


class BlobStorage(Protocol):
    """Resolves object keys to URLs. The engine stores URLs, never bytes."""

    def url_for(self, key: str) -> str: ...

    def key_from_url(self, url: str) -> str | None: ...
