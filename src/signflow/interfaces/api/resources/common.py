"""Shared helpers for API resources - actors, bodies, errors, serialization."""

import logging
from dataclasses import asdict
from typing import Any
from uuid import UUID

import falcon.asgi
import pydantic

from signflow.application.dto import DocumentSnapshot
from signflow.domain.entities import Document, DocumentField, DocumentHistory, Signer
from signflow.domain.exceptions import (
    ConflictError,
    DocumentBusy,
    NotFound,
    PermissionDenied,
    PersistenceError,
    SignFlowError,
    ValidationError,
    WorkflowViolation,
)
from signflow.domain.value_objects import Actor, ActorRole, FieldValidationError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[SignFlowError], str]] = [
    (ValidationError, falcon.HTTP_400),
    (PermissionDenied, falcon.HTTP_403),
    (NotFound, falcon.HTTP_404),
    (WorkflowViolation, falcon.HTTP_409),
    (ConflictError, falcon.HTTP_409),
    (DocumentBusy, falcon.HTTP_503),
    (PersistenceError, falcon.HTTP_503),
]


def require_user(req: falcon.asgi.Request, resp: falcon.asgi.Response):
    """Return the request user, or set 401 and return None."""
    user = getattr(req.context, "user", None)
    if not user:
        resp.status = falcon.HTTP_401
        resp.media = {"error": "Unauthorized"}
    return user


def author_actor(user) -> Actor:
    return Actor(subject=user.user_id, role=ActorRole.AUTHOR, email=user.email)


def signer_actor(req: falcon.asgi.Request, user) -> Actor:
    return Actor(
        subject=user.user_id,
        role=ActorRole.SIGNER,
        email=user.email,
        access_code=req.get_header("X-Access-Code"),
    )


def parse_uuid(value: str, name: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}") from None


async def read_body(req: falcon.asgi.Request) -> dict[str, Any]:
    """JSON object body; an empty body reads as {}."""
    try:
        body = await req.get_media(default_when_empty={})
    except falcon.MediaMalformedError as e:
        raise ValidationError(f"Malformed JSON body: {e.description}") from None
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def parse_input(model: type[pydantic.BaseModel], body: dict[str, Any]):
    """Validate a request body against a pydantic input model."""
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Invalid request body", details) from None


def error_response(resp: falcon.asgi.Response, error: SignFlowError) -> None:
    """Map a domain error to status + JSON body."""
    status = falcon.HTTP_500
    for error_type, mapped in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status = mapped
            break
    if status == falcon.HTTP_500:
        logger.error("Unmapped error %s: %s", error.code, error)
    media: dict[str, Any] = {"error": str(error), "code": error.code}
    if isinstance(error, ValidationError) and error.errors:
        media["errors"] = [
            e.to_dict() if isinstance(e, FieldValidationError) else e for e in error.errors
        ]
    if isinstance(error, WorkflowViolation):
        media["expected"] = error.expected
        media["actual"] = error.actual
    resp.status = status
    resp.media = media


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def document_to_dict(d: Document) -> dict[str, Any]:
    return {
        "id": str(d.id),
        "title": d.title,
        "description": d.description,
        "author_id": d.author_id,
        "key": d.key,
        "type": d.type,
        "file_url": d.file_url,
        "status": d.status.value,
        "sequential_signing": d.sequential_signing,
        "enable_watermark": d.enable_watermark,
        "watermark_text": d.watermark_text,
        "page_count": d.page_count,
        "page_width": d.page_width,
        "page_height": d.page_height,
        "created_at": _iso(d.created_at),
        "updated_at": _iso(d.updated_at),
        "prepared_at": _iso(d.prepared_at),
        "sent_at": _iso(d.sent_at),
        "viewed_at": _iso(d.viewed_at),
        "signed_at": _iso(d.signed_at),
        "expires_at": _iso(d.expires_at),
        "canceled_at": _iso(d.canceled_at),
        "extensions": d.extensions.model_dump(mode="json"),
        "version": d.version,
    }


def signer_to_dict(s: Signer) -> dict[str, Any]:
    return {
        "id": str(s.id),
        "document_id": str(s.document_id),
        "email": s.email,
        "name": s.name,
        "role": s.role,
        "order": s.order,
        "status": s.status.value,
        "color": s.color,
        "has_access_code": s.access_code is not None,
        "invited_at": _iso(s.invited_at),
        "viewed_at": _iso(s.viewed_at),
        "completed_at": _iso(s.completed_at),
        "notified_at": _iso(s.notified_at),
        "declined_at": _iso(s.declined_at),
        "decline_reason": s.decline_reason,
    }


def field_to_dict(f: DocumentField) -> dict[str, Any]:
    data = asdict(f)
    data.update(
        id=str(f.id),
        document_id=str(f.document_id),
        signer_id=str(f.signer_id) if f.signer_id else None,
        type=f.type.value,
        validation_rule=f.validation_rule.to_dict() if f.validation_rule else None,
        conditional_logic=f.conditional_logic.to_dict() if f.conditional_logic else None,
    )
    return data


def history_to_dict(h: DocumentHistory) -> dict[str, Any]:
    return {
        "id": str(h.id),
        "action": h.action,
        "actor_id": h.actor_id,
        "actor_role": h.actor_role,
        "signer_id": str(h.signer_id) if h.signer_id else None,
        "details": h.details,
        "timestamp": _iso(h.timestamp),
    }


def snapshot_to_dict(snapshot: DocumentSnapshot) -> dict[str, Any]:
    return {
        "document": document_to_dict(snapshot.document),
        "signers": [signer_to_dict(s) for s in snapshot.signers],
        "fields": [field_to_dict(f) for f in snapshot.fields],
        "progress": snapshot.progress.to_dict(),
        "current_signer_id": str(snapshot.current_signer_id) if snapshot.current_signer_id else None,
    }
