"""Object store adapters."""

from .base import ObjectNotFoundError, ObjectStore
from .memory_storage import InMemoryObjectStore

__all__ = [
    "InMemoryObjectStore",
    "ObjectNotFoundError",
    "ObjectStore",
]
