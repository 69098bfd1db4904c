"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from signflow.interfaces.api.app import create_app
from signflow.interfaces.api.middleware.auth import AuthMiddleware

from tests.conftest import AUTHOR_ID


class _RejectAllMiddleware:
    """Middleware that leaves the request unauthenticated."""

    async def process_request(self, req, resp):
        req.context.user = None


@pytest.fixture
def app(coordinator):
    """Falcon ASGI app over the fake unit of work. Users come from X-User-Id."""
    return create_app(coordinator, middleware=[AuthMiddleware()])


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client acting as the document author by default."""
    return TestClient(app, headers={"X-User-Id": AUTHOR_ID})


@pytest.fixture
def anonymous_client(coordinator) -> TestClient:
    return TestClient(create_app(coordinator, middleware=[_RejectAllMiddleware()]))
