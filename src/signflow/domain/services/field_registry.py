"""Field registry - placement, assignment and value writes for document fields."""

import logging
from datetime import date
from uuid import UUID, uuid4

from signflow.domain.entities import DocumentAggregate, DocumentField
from signflow.domain.exceptions import PermissionDenied, ValidationError, WorkflowViolation
from signflow.domain.services import validation
from signflow.domain.services.signer_roster import SignerRoster
from signflow.domain.value_objects import (
    Actor,
    ActorRole,
    ConditionalLogic,
    DocumentStatus,
    FieldType,
    FieldValidationError,
    ValidationRule,
)

logger = logging.getLogger(__name__)


class FieldRegistry:
    """Owns the fields attached to a document."""

    def __init__(self, roster: SignerRoster) -> None:
        self._roster = roster

    def add_field(
        self,
        aggregate: DocumentAggregate,
        *,
        type: FieldType,
        label: str,
        page_number: int,
        x: float,
        y: float,
        width: float,
        height: float,
        required: bool = False,
        signer_id: UUID | None = None,
        value: str | None = None,
        validation_rule: ValidationRule | None = None,
        conditional_logic: ConditionalLogic | None = None,
        options: list[str] | None = None,
        **style: str | float | None,
    ) -> DocumentField:
        """Place a new field. Only allowed before the document is sent."""
        document = aggregate.document
        if document.status is not DocumentStatus.PENDING:
            raise WorkflowViolation(
                "fields can only be added before the document is sent",
                expected=DocumentStatus.PENDING.value,
                actual=document.status.value,
            )
        self.check_geometry(aggregate, page_number, x, y, width, height)
        if signer_id is not None and not aggregate.has_signer(signer_id):
            raise ValidationError("Assigned signer does not belong to this document")
        if type.has_options and not options:
            raise ValidationError(f"A {type.value} field needs at least one option")
        if validation_rule is not None and not validation_rule.known:
            raise ValidationError(f"Unknown validation rule kind: {validation_rule.kind}")
        if conditional_logic is not None:
            known = {f.id for f in aggregate.fields}
            missing = conditional_logic.referenced_fields() - known
            if missing:
                raise ValidationError("Conditional logic references fields not on this document")

        field = DocumentField(
            id=uuid4(),
            document_id=aggregate.id,
            type=type,
            label=label,
            page_number=page_number,
            x=x,
            y=y,
            width=width,
            height=height,
            required=required,
            signer_id=signer_id,
            validation_rule=validation_rule,
            conditional_logic=conditional_logic,
            options=list(options) if options else None,
            **style,
        )
        if value is not None:
            field.value = validation.normalize_value(field, value)
        aggregate.fields.append(field)
        return field

    def remove_field(self, aggregate: DocumentAggregate, field_id: UUID) -> DocumentField:
        field = aggregate.get_field(field_id)
        if aggregate.document.status is not DocumentStatus.PENDING:
            raise WorkflowViolation(
                "fields cannot be removed after the document is sent",
                expected=DocumentStatus.PENDING.value,
                actual=aggregate.document.status.value,
            )
        dependents = [
            f.label or str(f.id)
            for f in aggregate.fields
            if f.conditional_logic is not None and field_id in f.conditional_logic.referenced_fields()
        ]
        if dependents:
            raise ValidationError(
                "Field is referenced by the conditional logic of: " + ", ".join(dependents)
            )
        aggregate.fields.remove(field)
        return field

    def set_field_value(
        self,
        aggregate: DocumentAggregate,
        field_id: UUID,
        signer_id: UUID | None,
        value: str | None,
        actor: Actor,
        *,
        today: date | None = None,
    ) -> DocumentField:
        """Write a field value on behalf of its signer (or the author pre-send).

        The value is normalized and format-checked; required-ness is only
        enforced when the signer completes their turn.
        """
        field = aggregate.get_field(field_id)
        document = aggregate.document

        if document.status is DocumentStatus.PENDING:
            if actor.role is not ActorRole.AUTHOR or actor.subject != document.author_id:
                raise PermissionDenied("Only the author may prefill fields before sending")
        elif not document.status.accepts_signing:
            raise WorkflowViolation(
                "field values can no longer be changed",
                expected="sent or viewed",
                actual=document.status.value,
            )
        else:
            if signer_id is None:
                raise PermissionDenied("A signer is required to write field values")
            signer = aggregate.get_signer(signer_id)
            self._roster.authorize(signer, actor)
            self._roster.ensure_turn(aggregate, signer)
            if not self._may_write(aggregate, field, signer_id):
                raise PermissionDenied(f'"{field.label}" is not assigned to you')

        normalized = validation.normalize_value(field, value)
        values = aggregate.values()
        values[field.id] = normalized
        error = validation.validate_field(field, values, enforce_required=False, today=today)
        if error is not None and error.blocking:
            raise ValidationError(error.message, [error])

        field.value = normalized
        logger.debug("Field %s on document %s set by %s", field.id, aggregate.id, actor.subject)
        return field

    def all_fields_satisfied(
        self,
        aggregate: DocumentAggregate,
        signer_id: UUID,
        *,
        today: date | None = None,
    ) -> list[FieldValidationError]:
        """Validate every active field the signer is responsible for.

        Returns all findings; the signer is satisfied when none of them is
        blocking.
        """
        owned = [f for f in aggregate.fields if self._responsible(aggregate, f, signer_id)]
        return validation.validate_fields(owned, aggregate.values(), today=today)

    def _responsible(self, aggregate: DocumentAggregate, field: DocumentField, signer_id: UUID) -> bool:
        if field.signer_id is not None:
            return field.signer_id == signer_id
        if not field.required or not aggregate.document.sequential_signing:
            return False
        # Unassigned required fields are owed by whoever signs last.
        pending = [s for s in aggregate.signers if not s.status.is_final and s.id != signer_id]
        return not pending

    def _may_write(self, aggregate: DocumentAggregate, field: DocumentField, signer_id: UUID) -> bool:
        if field.signer_id is not None:
            return field.signer_id == signer_id
        current = self._roster.current_signer(aggregate)
        return current is not None and current.id == signer_id

    def check_geometry(
        self,
        aggregate: DocumentAggregate,
        page_number: int,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        document = aggregate.document
        problems = []
        if page_number < 1 or (document.page_count is not None and page_number > document.page_count):
            problems.append(f"page {page_number} does not exist")
        if x < 0 or y < 0:
            problems.append("position must not be negative")
        if width <= 0 or height <= 0:
            problems.append("size must be positive")
        if x + width > document.page_width or y + height > document.page_height:
            problems.append("field extends beyond the page")
        if problems:
            raise ValidationError("Invalid field placement: " + "; ".join(problems))
