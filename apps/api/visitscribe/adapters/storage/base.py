"""Object store interface used as the sole coordination substrate."""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class ObjectNotFoundError(Exception):
    """Raised when a downloaded object does not exist."""


class ObjectStore(ABC):
    """Provider-neutral hierarchical blob store."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return whether an object exists at ``key``."""

    @abstractmethod
    def download(self, key: str) -> bytes:
        """Return object bytes or raise ``ObjectNotFoundError``."""

    @abstractmethod
    def upload(self, key: str, data: bytes, content_type: str) -> None:
        """Create or overwrite an object."""

    @abstractmethod
    def create_if_absent(self, key: str, data: bytes, content_type: str) -> bool:
        """Create ``key`` only if it does not exist yet.

        Returns ``False`` when the object already exists. This is the only
        concurrency-control primitive the pipeline relies on.
        """

    @abstractmethod
    def list_prefix(self, prefix: str) -> list[str]:
        """Return keys under ``prefix`` in lexicographic order."""

    @abstractmethod
    def compose(self, sources: Sequence[str], destination: str) -> None:
        """Concatenate ``sources`` in order into ``destination``."""

    @abstractmethod
    def copy(self, source: str, destination: str) -> None:
        """Copy one object to another key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete one object; missing objects are ignored."""

    @abstractmethod
    def delete_prefix(self, prefix: str) -> None:
        """Delete every object under ``prefix``."""

    @abstractmethod
    def signed_url(self, key: str, *, method: str, expires_in_seconds: int, content_type: str | None = None) -> str:
        """Return a time-limited URL granting ``method`` access to ``key``."""

    @abstractmethod
    def uri(self, key: str) -> str:
        """Return the provider URI for ``key`` (for example ``gs://bucket/key``)."""

    def upload_text(self, key: str, text: str, content_type: str = "text/plain; charset=utf-8") -> None:
        self.upload(key, text.encode("utf-8"), content_type)

    def download_text(self, key: str) -> str:
        return self.download(key).decode("utf-8")


__all__ = ["ObjectNotFoundError", "ObjectStore"]
