"""Blob storage backed by a public bucket URL."""

from urllib.parse import quote, unquote


class PublicBucketStorage:
    """Maps object keys to URLs under a fixed base URL."""

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url.rstrip("/")

    def url_for(self, key: str) -> str:
        return f"{self._base_url}/{quote(key.lstrip('/'))}"

    def key_from_url(self, url: str) -> str | None:
        """Inverse of url_for; None for URLs outside the bucket."""
        prefix = self._base_url + "/"
        if not url.startswith(prefix):
            return None
        return unquote(url[len(prefix):]) or None
