"""In-memory object store used for local development and tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import threading

from visitscribe.adapters.storage.base import ObjectNotFoundError, ObjectStore


@dataclass(slots=True)
class StoredObject:
    data: bytes
    content_type: str
    generation: int


@dataclass
class InMemoryObjectStore(ObjectStore):
    """Deterministic, thread-safe store with write bookkeeping for assertions."""

    bucket: str = "memory-bucket"
    objects: dict[str, StoredObject] = field(default_factory=dict)
    write_count: int = 0
    compose_calls: list[tuple[tuple[str, ...], str]] = field(default_factory=list)
    max_compose_sources: int = 32
    failing_write_prefixes: set[str] = field(default_factory=set)
    _generation: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self.objects

    def download(self, key: str) -> bytes:
        with self._lock:
            stored = self.objects.get(key)
        if stored is None:
            raise ObjectNotFoundError(key)
        return stored.data

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        self._maybe_fail_write(key)
        with self._lock:
            self._put(key, data, content_type)

    def create_if_absent(self, key: str, data: bytes, content_type: str) -> bool:
        self._maybe_fail_write(key)
        with self._lock:
            if key in self.objects:
                return False
            self._put(key, data, content_type)
            return True

    def list_prefix(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(key for key in self.objects if key.startswith(prefix))

    def compose(self, sources: Sequence[str], destination: str) -> None:
        if len(sources) > self.max_compose_sources:
            raise ValueError(f"compose accepts at most {self.max_compose_sources} sources, got {len(sources)}")
        self._maybe_fail_write(destination)
        with self._lock:
            missing = [key for key in sources if key not in self.objects]
            if missing:
                raise ObjectNotFoundError(missing[0])
            data = b"".join(self.objects[key].data for key in sources)
            content_type = self.objects[sources[0]].content_type
            self._put(destination, data, content_type)
            self.compose_calls.append((tuple(sources), destination))

    def copy(self, source: str, destination: str) -> None:
        self._maybe_fail_write(destination)
        with self._lock:
            stored = self.objects.get(source)
            if stored is None:
                raise ObjectNotFoundError(source)
            self._put(destination, stored.data, stored.content_type)

    def delete(self, key: str) -> None:
        with self._lock:
            self.objects.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        with self._lock:
            for key in [key for key in self.objects if key.startswith(prefix)]:
                del self.objects[key]

    def signed_url(self, key: str, *, method: str, expires_in_seconds: int, content_type: str | None = None) -> str:
        return f"memory://{self.bucket}/{key}?method={method}&expires={expires_in_seconds}"

    def uri(self, key: str) -> str:
        return f"memory://{self.bucket}/{key}"

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        self._generation += 1
        self.objects[key] = StoredObject(
            data=bytes(data),
            content_type=content_type,
            generation=self._generation,
        )
        self.write_count += 1

    def _maybe_fail_write(self, key: str) -> None:
        for prefix in self.failing_write_prefixes:
            if key.startswith(prefix):
                raise RuntimeError(f"Injected write failure for {key}")


__all__ = ["InMemoryObjectStore", "StoredObject"]
