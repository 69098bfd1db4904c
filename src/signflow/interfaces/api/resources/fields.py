"""Document field API resources."""

import falcon.asgi

from signflow.application.coordinator import WorkflowCoordinator
from signflow.application.dto import FieldCreateInput, FieldValueInput
from signflow.domain.exceptions import SignFlowError
from signflow.interfaces.api.resources.common import (
    author_actor,
    error_response,
    field_to_dict,
    parse_input,
    parse_uuid,
    read_body,
    require_user,
    signer_actor,
    snapshot_to_dict,
)


class FieldsResource:
    """POST /v1/documents/{document_id}/fields - place a field (author)."""

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(FieldCreateInput, await read_body(req))
            field = await self._coordinator.add_field(
                author_actor(user), parse_uuid(document_id, "document_id"), input_data
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = field_to_dict(field)
        resp.status = falcon.HTTP_201


class FieldResource:
    """DELETE /v1/documents/{document_id}/fields/{field_id}
    PUT    /v1/documents/{document_id}/fields/{field_id}/value
    """

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        field_id: str,
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            snapshot = await self._coordinator.remove_field(
                author_actor(user),
                parse_uuid(document_id, "document_id"),
                parse_uuid(field_id, "field_id"),
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_put_value(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        field_id: str,
    ) -> None:
        """Signers write with their signer_id; the author prefills without one."""
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(FieldValueInput, await read_body(req))
            actor = (
                signer_actor(req, user) if input_data.signer_id is not None else author_actor(user)
            )
            snapshot = await self._coordinator.set_field_value(
                actor,
                parse_uuid(document_id, "document_id"),
                parse_uuid(field_id, "field_id"),
                input_data.value,
                signer_id=input_data.signer_id,
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200
