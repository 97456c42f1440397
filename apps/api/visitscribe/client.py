"""HTTP client for the visitscribe API, including the bounded summary poll loop."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from visitscribe.core.logging_safety import safe_log_identifier
from visitscribe.schemas.job import PollResponse, PollStatus
from visitscribe.schemas.session import FinalizeResponse, SignUploadResponse

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 4.0
DEFAULT_POLL_ATTEMPTS = 30


class ClientError(Exception):
    """The API answered with an error payload."""

    def __init__(self, status_code: int, code: str | None, message: str) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(f"{status_code} {code or 'ERROR'}: {message}")


class PollTimeoutError(Exception):
    """The job did not reach DONE within the allowed attempts."""

    def __init__(self, job_id: str, attempts: int) -> None:
        self.job_id = job_id
        self.attempts = attempts
        super().__init__(f"job {job_id} still running after {attempts} polls")


class VisitScribeClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "VisitScribeClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def sign_upload(self, session_id: str, user_id: str, seq: int, content_type: str) -> SignUploadResponse:
        body = {"sessionId": session_id, "userId": user_id, "seq": seq, "contentType": content_type}
        return SignUploadResponse.model_validate(self._request("POST", "/api/v1/uploads/sign", json=body))

    def upload_chunk(self, signed: SignUploadResponse, data: bytes, content_type: str) -> None:
        response = httpx.put(signed.signed_url, content=data, headers={"Content-Type": content_type})
        response.raise_for_status()

    def finalize(self, session_id: str, user_id: str, **context: str) -> FinalizeResponse:
        body = {"sessionId": session_id, "userId": user_id, **context}
        return FinalizeResponse.model_validate(self._request("POST", "/api/v1/finalize", json=body))

    def poll(self, job_id: str) -> PollResponse:
        return PollResponse.model_validate(self._request("GET", f"/api/v1/jobs/{job_id}"))

    def wait_for_summary(
        self,
        job_id: str,
        *,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_POLL_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> PollResponse:
        """Poll until DONE, sleeping ``interval_seconds`` between attempts."""
        safe_job_id = safe_log_identifier(job_id, prefix="jid")
        for attempt in range(1, max_attempts + 1):
            result = self.poll(job_id)
            if result.status is PollStatus.DONE:
                logger.info("client.poll_done job_id=%s attempts=%s", safe_job_id, attempt)
                return result
            if attempt < max_attempts:
                sleep(interval_seconds)
        logger.warning("client.poll_timeout job_id=%s attempts=%s", safe_job_id, max_attempts)
        raise PollTimeoutError(job_id, max_attempts)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self._client.request(method, path, **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = {}
        if response.is_error:
            raise ClientError(response.status_code, payload.get("code"), payload.get("message") or response.text)
        return payload


__all__ = ["ClientError", "PollTimeoutError", "VisitScribeClient"]
