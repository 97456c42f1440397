"""LINE Messaging API push adapter."""

from __future__ import annotations

import httpx

from visitscribe.adapters.messaging.base import PushMessenger, PushOutcome
from visitscribe.errors import DeliveryError

_PUSH_PATH = "/v2/bot/message/push"


class LinePushMessenger(PushMessenger):
    """Pushes text messages with ``X-Line-Retry-Key``; HTTP 409 means the key was already accepted."""

    def __init__(
        self,
        channel_access_token: str | None,
        *,
        base_url: str = "https://api.line.me",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not channel_access_token:
            raise ValueError("LINE channel access token is required for the line push provider")
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {channel_access_token}"},
        )

    def push_text(self, recipient: str, text: str, idempotency_key: str) -> PushOutcome:
        payload = {"to": recipient, "messages": [{"type": "text", "text": text}]}
        try:
            response = self._client.post(
                _PUSH_PATH,
                json=payload,
                headers={"X-Line-Retry-Key": idempotency_key},
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code == httpx.codes.CONFLICT:
            return PushOutcome.DEDUPLICATED
        if response.is_error:
            raise DeliveryError(
                f"LINE push rejected: {response.text[:200]}",
                status_code=response.status_code,
            )
        return PushOutcome.SENT

    def close(self) -> None:
        self._client.close()


__all__ = ["LinePushMessenger"]
