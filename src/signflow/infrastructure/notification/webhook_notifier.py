"""Webhook notifier - POSTs workflow events to a configured endpoint."""

import hashlib
import hmac
import json
import logging

import httpx

from signflow.domain.exceptions import NotificationError
from signflow.domain.value_objects import WorkflowEvent

logger = logging.getLogger(__name__)


class WebhookNotifier:
    """Delivers each event as a signed JSON payload.

    Deliveries are attempted once; a non-2xx response or transport error
    raises NotificationError.
    """

    def __init__(
        self,
        url: str,
        secret: str = "",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._secret = secret
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def notify(self, event: WorkflowEvent) -> None:
        body = json.dumps(event.to_dict(), sort_keys=True).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "X-Signflow-Event": event.type.value,
        }
        if self._secret:
            headers["X-Signflow-Signature"] = self.sign(body)
        try:
            response = await self._client.post(self._url, content=body, headers=headers)
        except httpx.HTTPError as e:
            raise NotificationError(f"Webhook delivery failed: {e}") from e
        if not response.is_success:
            raise NotificationError(
                f"Webhook returned HTTP {response.status_code}: {response.text[:200]}"
            )
        logger.debug("Delivered %s for %s", event.type.value, event.document_id)

    def sign(self, body: bytes) -> str:
        """HMAC-SHA256 hex digest of the payload."""
        return hmac.new(self._secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    async def aclose(self) -> None:
        await self._client.aclose()
