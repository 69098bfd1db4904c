"""Falcon ASGI application."""

import logging

import falcon
import falcon.asgi
from falcon.asgi import App
from psycopg_pool import AsyncConnectionPool

from signflow.application.coordinator import WorkflowCoordinator
from signflow.interfaces.api.resources.documents import (
    DocumentActionsResource,
    DocumentResource,
    DocumentsResource,
)
from signflow.interfaces.api.resources.fields import FieldResource, FieldsResource
from signflow.interfaces.api.resources.health import HealthResource
from signflow.interfaces.api.resources.signers import SignerResource, SignersResource

logger = logging.getLogger(__name__)


async def _log_exception(req, resp, ex, params):
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal Server Error", "code": "error"}


def create_app(
    coordinator: WorkflowCoordinator,
    pool: AsyncConnectionPool | None = None,
    middleware: list | None = None,
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=middleware or [])
    app.add_error_handler(Exception, _log_exception)

    health = HealthResource(pool)
    documents = DocumentsResource(coordinator)
    document = DocumentResource(coordinator)
    actions = DocumentActionsResource(coordinator)
    signers = SignersResource(coordinator)
    signer = SignerResource(coordinator)
    fields = FieldsResource(coordinator)
    field = FieldResource(coordinator)

    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")
    app.add_route("/v1/documents", documents)
    app.add_route("/v1/documents/{document_id}", document)
    for action in ("send", "remind", "cancel", "history"):
        app.add_route(f"/v1/documents/{{document_id}}/{action}", actions, suffix=action)
    app.add_route("/v1/documents/{document_id}/signers", signers)
    app.add_route("/v1/documents/{document_id}/signers/{signer_id}", signer)
    for action in ("view", "complete", "decline", "status"):
        app.add_route(
            f"/v1/documents/{{document_id}}/signers/{{signer_id}}/{action}", signer, suffix=action
        )
    app.add_route("/v1/documents/{document_id}/fields", fields)
    app.add_route("/v1/documents/{document_id}/fields/{field_id}", field)
    app.add_route("/v1/documents/{document_id}/fields/{field_id}/value", field, suffix="value")
    return app
