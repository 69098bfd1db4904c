"""Unit tests for settings and the composition helpers."""

from datetime import timedelta

import pytest

from signflow.config import Settings
from signflow.domain.value_objects import DeclinePolicy
from signflow.infrastructure.notification.logging_notifier import LoggingNotifier
from signflow.infrastructure.notification.webhook_notifier import WebhookNotifier
from signflow.main import build_coordinator, build_notifier

from tests.conftest import FakeStore, make_uow_factory


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DECLINE_POLICY", "any_declines")
    monkeypatch.setenv("DEFAULT_EXPIRY_DAYS", "14")
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/in")
    settings = Settings(_env_file=None)
    assert settings.decline_policy is DeclinePolicy.ANY_DECLINES
    assert settings.default_expiry_days == 14
    assert settings.webhook_url == "https://hooks.example.com/in"


def test_settings_reject_bad_values(monkeypatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "qa")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


@pytest.mark.asyncio
async def test_build_notifier() -> None:
    assert isinstance(build_notifier(Settings(_env_file=None)), LoggingNotifier)
    notifier = build_notifier(Settings(_env_file=None, webhook_url="https://hooks.example.com/in"))
    assert isinstance(notifier, WebhookNotifier)
    await notifier.aclose()


def test_build_coordinator_applies_settings() -> None:
    settings = Settings(_env_file=None, default_expiry_days=30, default_page_width=595.0)
    coordinator = build_coordinator(settings, make_uow_factory(FakeStore()), LoggingNotifier())
    assert coordinator._lifecycle._default_expiry == timedelta(days=30)
    assert coordinator._page_size == (595.0, 792.0)
