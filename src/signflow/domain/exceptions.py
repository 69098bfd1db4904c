"""Domain exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from signflow.domain.value_objects import FieldValidationError


class SignFlowError(Exception):
    """Base exception for SignFlow."""

    code = "error"


class ValidationError(SignFlowError):
    """One or more field values fail their rules, or input is malformed."""

    code = "validation"

    def __init__(
        self, message: str, errors: list[FieldValidationError] | None = None
    ) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class PermissionDenied(SignFlowError):
    """Caller is not allowed to perform the requested action."""

    code = "permission"


class WorkflowViolation(SignFlowError):
    """Action is inconsistent with the document's current lifecycle state."""

    code = "workflow_violation"

    def __init__(
        self, message: str, expected: str | None = None, actual: str | None = None
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class NotFound(SignFlowError):
    """Requested resource was not found."""

    code = "not_found"

    def __init__(self, entity: str, identifier: str | None = None) -> None:
        message = f"{entity} not found" if identifier is None else f"{entity} {identifier} not found"
        super().__init__(message)
        self.entity = entity
        self.identifier = identifier


class PersistenceError(SignFlowError):
    """Storage layer failure."""

    code = "persistence"


class ConflictError(PersistenceError):
    """Aggregate was modified concurrently; the write was not applied."""

    code = "conflict"


class NotificationError(SignFlowError):
    """Notifier failed to deliver an event. Logged, never propagated."""

    code = "notification"


class DocumentBusy(SignFlowError):
    """Timed out waiting for exclusive access to a document."""

    code = "busy"
