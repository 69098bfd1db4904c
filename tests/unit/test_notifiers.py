"""Unit tests for workflow event notifiers."""

import hashlib
import hmac
import json
import logging
from datetime import UTC, datetime
from uuid import uuid4

import httpx
import pytest

from signflow.domain.exceptions import NotificationError
from signflow.domain.value_objects import WorkflowEvent, WorkflowEventType
from signflow.infrastructure.notification.logging_notifier import LoggingNotifier
from signflow.infrastructure.notification.webhook_notifier import WebhookNotifier

URL = "https://hooks.example.com/signflow"


def _event() -> WorkflowEvent:
    return WorkflowEvent(
        type=WorkflowEventType.COMPLETED,
        document_id=uuid4(),
        occurred_at=datetime(2026, 3, 2, 12, 0, tzinfo=UTC),
        signer_id=uuid4(),
        details={"warnings": 0},
    )


def _notifier(handler, secret: str = "s3cret") -> WebhookNotifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookNotifier(URL, secret=secret, client=client)


@pytest.mark.asyncio
async def test_webhook_posts_signed_payload() -> None:
    received: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(request)
        return httpx.Response(204)

    event = _event()
    notifier = _notifier(handler)
    await notifier.notify(event)
    await notifier.aclose()

    (request,) = received
    assert str(request.url) == URL
    assert request.headers["X-Signflow-Event"] == "completed"
    assert json.loads(request.content) == event.to_dict()
    expected = hmac.new(b"s3cret", request.content, hashlib.sha256).hexdigest()
    assert request.headers["X-Signflow-Signature"] == expected


@pytest.mark.asyncio
async def test_webhook_without_secret_is_unsigned() -> None:
    received: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(request)
        return httpx.Response(200)

    await _notifier(handler, secret="").notify(_event())
    assert "X-Signflow-Signature" not in received[0].headers


@pytest.mark.asyncio
async def test_webhook_error_status_raises() -> None:
    notifier = _notifier(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(NotificationError, match="HTTP 502"):
        await notifier.notify(_event())


@pytest.mark.asyncio
async def test_webhook_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NotificationError, match="delivery failed"):
        await _notifier(handler).notify(_event())


@pytest.mark.asyncio
async def test_logging_notifier(caplog) -> None:
    event = _event()
    with caplog.at_level(logging.INFO, logger="signflow.infrastructure.notification.logging_notifier"):
        await LoggingNotifier().notify(event)
    assert str(event.document_id) in caplog.text
