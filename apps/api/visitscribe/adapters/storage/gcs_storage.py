"""Google Cloud Storage adapter initialised through the Firebase Admin SDK."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta

import firebase_admin
from firebase_admin import storage as firebase_storage
from google.api_core import exceptions as gcs_exceptions

from visitscribe.adapters.storage.base import ObjectNotFoundError, ObjectStore


class GcsObjectStore(ObjectStore):
    """Bucket-backed store. Conditional-create maps to ``ifGenerationMatch=0``."""

    def __init__(self, bucket_name: str) -> None:
        if not bucket_name:
            raise ValueError("GCS bucket name is required for the gcs storage provider")
        if not firebase_admin._apps:
            firebase_admin.initialize_app(options={"storageBucket": bucket_name})
        self._bucket = firebase_storage.bucket(bucket_name)
        self._bucket_name = bucket_name

    def exists(self, key: str) -> bool:
        return bool(self._bucket.blob(key).exists())

    def download(self, key: str) -> bytes:
        try:
            return self._bucket.blob(key).download_as_bytes()
        except gcs_exceptions.NotFound as exc:
            raise ObjectNotFoundError(key) from exc

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        blob = self._bucket.blob(key)
        blob.cache_control = "no-store"
        blob.upload_from_string(data, content_type=content_type)

    def create_if_absent(self, key: str, data: bytes, content_type: str) -> bool:
        blob = self._bucket.blob(key)
        try:
            blob.upload_from_string(data, content_type=content_type, if_generation_match=0)
        except gcs_exceptions.PreconditionFailed:
            return False
        return True

    def list_prefix(self, prefix: str) -> list[str]:
        return sorted(blob.name for blob in self._bucket.list_blobs(prefix=prefix))

    def compose(self, sources: Sequence[str], destination: str) -> None:
        destination_blob = self._bucket.blob(destination)
        destination_blob.compose([self._bucket.blob(key) for key in sources])

    def copy(self, source: str, destination: str) -> None:
        try:
            self._bucket.copy_blob(self._bucket.blob(source), self._bucket, destination)
        except gcs_exceptions.NotFound as exc:
            raise ObjectNotFoundError(source) from exc

    def delete(self, key: str) -> None:
        try:
            self._bucket.blob(key).delete()
        except gcs_exceptions.NotFound:
            return

    def delete_prefix(self, prefix: str) -> None:
        blobs = list(self._bucket.list_blobs(prefix=prefix))
        if blobs:
            self._bucket.delete_blobs(blobs, on_error=lambda _blob: None)

    def signed_url(self, key: str, *, method: str, expires_in_seconds: int, content_type: str | None = None) -> str:
        return self._bucket.blob(key).generate_signed_url(
            version="v4",
            expiration=timedelta(seconds=expires_in_seconds),
            method=method,
            content_type=content_type,
        )

    def uri(self, key: str) -> str:
        return f"gs://{self._bucket_name}/{key}"


__all__ = ["GcsObjectStore"]
