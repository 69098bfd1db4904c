"""Signer API resources."""

import falcon.asgi

from signflow.application.coordinator import WorkflowCoordinator
from signflow.application.dto import CompleteInput, ReasonInput, SignerInput
from signflow.domain.exceptions import SignFlowError
from signflow.interfaces.api.resources.common import (
    author_actor,
    error_response,
    parse_input,
    parse_uuid,
    read_body,
    require_user,
    signer_actor,
    signer_to_dict,
    snapshot_to_dict,
)


class SignersResource:
    """POST /v1/documents/{document_id}/signers - add a signer (author)."""

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(SignerInput, await read_body(req))
            signer = await self._coordinator.add_signer(
                author_actor(user), parse_uuid(document_id, "document_id"), input_data
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = signer_to_dict(signer)
        resp.status = falcon.HTTP_201


class SignerResource:
    """Signer-scoped endpoints.

    DELETE /v1/documents/{document_id}/signers/{signer_id}          (author)
    POST   /v1/documents/{document_id}/signers/{signer_id}/view
    POST   /v1/documents/{document_id}/signers/{signer_id}/complete
    POST   /v1/documents/{document_id}/signers/{signer_id}/decline
    GET    /v1/documents/{document_id}/signers/{signer_id}/status
    """

    def __init__(self, coordinator: WorkflowCoordinator) -> None:
        self._coordinator = coordinator

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        signer_id: str,
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            snapshot = await self._coordinator.remove_signer(
                author_actor(user),
                parse_uuid(document_id, "document_id"),
                parse_uuid(signer_id, "signer_id"),
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_post_view(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        signer_id: str,
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            snapshot = await self._coordinator.view(
                signer_actor(req, user),
                parse_uuid(document_id, "document_id"),
                parse_uuid(signer_id, "signer_id"),
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_post_complete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        signer_id: str,
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(CompleteInput, await read_body(req))
            snapshot = await self._coordinator.complete_turn(
                signer_actor(req, user),
                parse_uuid(document_id, "document_id"),
                parse_uuid(signer_id, "signer_id"),
                input_data.values,
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_post_decline(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        signer_id: str,
    ) -> None:
        user = require_user(req, resp)
        if not user:
            return
        try:
            input_data = parse_input(ReasonInput, await read_body(req))
            snapshot = await self._coordinator.decline(
                signer_actor(req, user),
                parse_uuid(document_id, "document_id"),
                parse_uuid(signer_id, "signer_id"),
                input_data.reason,
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = snapshot_to_dict(snapshot)
        resp.status = falcon.HTTP_200

    async def on_get_status(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
        signer_id: str,
    ) -> None:
        """Validation findings for the fields this signer still owes."""
        if not require_user(req, resp):
            return
        try:
            findings = await self._coordinator.all_fields_satisfied(
                parse_uuid(document_id, "document_id"),
                parse_uuid(signer_id, "signer_id"),
            )
        except SignFlowError as e:
            error_response(resp, e)
            return
        resp.media = {
            "satisfied": not any(f.blocking for f in findings),
            "findings": [f.to_dict() for f in findings],
        }
        resp.status = falcon.HTTP_200
