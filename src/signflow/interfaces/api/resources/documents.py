"""Document API resources."""

import falcon.asgi

from signflow.application.coordinator import WorkflowCoordinator
from signflow.application.dto import (
    DocumentCreateInput,
    DocumentUpdateInput,
    ReasonInput,
    SendInput,
)
from signflow.domain.exceptions import SignFlowError, ValidationError
from signflow.interfaces.api.resources.common import (
    author_actor,
    error_response,
    history_to_dict,
    parse_input,
    parse_uuid,
    read_body,
    require_user,
    snapshot_to_dict,
)

_MAX_LIMIT = 100


class DocumentsResource:
    """GET/POST /v1/documents - list the caller's documents, create a document."""

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            limit = req.get_param_as_int("limit", min_value=1, max_value=_MAX_LIMIT) or 20
        except falcon.HTTPInvalidParam as e:
            error_response(resp, ValidationError(e.description))
            return
        snapshots, next_cursor = await self._coordinator.list_documents(
            author_actor(user), cursor=req.get_param("cursor"), limit=limit
        )
        resp.media = {
            "documents": [snapshot_to_dict(s) for s in snapshots],
            "next_cursor": next_cursor,
        }
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Create a PENDING document from an already uploaded file key."""
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(DocumentCreateInput, await read_body(req))
            snapshot = await self._coordinator.create_document(author_actor(user), input_data)
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_201


class DocumentResource:
    """GET/PATCH/DELETE /v1/documents/{document_id}."""

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        if not require_user(req, resp):
            return
        try:
            snapshot = await self._coordinator.get_document(parse_uuid(document_id, "document_id"))
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            changes = parse_input(DocumentUpdateInput, await read_body(req))
            snapshot = await self._coordinator.update_document(
                author_actor(user), parse_uuid(document_id, "document_id"), changes
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            await self._coordinator.delete_document(
                author_actor(user), parse_uuid(document_id, "document_id")
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.status = falcon.HTTP_204


class DocumentActionsResource:
    """Author actions on a document.

    POST /v1/documents/{document_id}/send
    POST /v1/documents/{document_id}/remind
    POST /v1/documents/{document_id}/cancel
    GET  /v1/documents/{document_id}/history
    """

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_post_send(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(SendInput, await read_body(req))
            snapshot = await self._coordinator.send(
                author_actor(user),
                parse_uuid(document_id, "document_id"),
                expires_at=input_data.expires_at,
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_post_remind(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            snapshot = await self._coordinator.remind(
                author_actor(user), parse_uuid(document_id, "document_id")
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_post_cancel(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(ReasonInput, await read_body(req))
            snapshot = await self._coordinator.cancel(
                author_actor(user), parse_uuid(document_id, "document_id"), input_data.reason
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_get_history(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            output = await self._coordinator.history(
                author_actor(user), parse_uuid(document_id, "document_id")
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = {
            "document_id": str(output.document_id),
            "entries": [history_to_dict(h) for h in output.entries],
        }
        resp.status = falcon.HTTP_200
