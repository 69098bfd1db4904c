"""Signer roster - who may act on a document, and in which order."""

import logging
import secrets
from datetime import datetime
from uuid import UUID, uuid4

from signflow.domain.entities import DocumentAggregate, Signer
from signflow.domain.exceptions import PermissionDenied, ValidationError, WorkflowViolation
from signflow.domain.value_objects import (
    Actor,
    ActorRole,
    DocumentStatus,
    SignerStatus,
    SigningProgress,
)

logger = logging.getLogger(__name__)

SIGNER_COLORS = (
    "#2563EB",
    "#DC2626",
    "#16A34A",
    "#9333EA",
    "#EA580C",
    "#0891B2",
    "#DB2777",
    "#65A30D",
)


class SignerRoster:
    """Ordered (sequential) or unordered (parallel) set of signers."""

    def current_signers(self, aggregate: DocumentAggregate) -> list[Signer]:
        """Signers entitled to act right now."""
        pending = [s for s in aggregate.ordered_signers() if not s.status.is_final]
        if not aggregate.document.sequential_signing:
            return pending
        return pending[:1]

    def current_signer(self, aggregate: DocumentAggregate) -> Signer | None:
        """Lowest-order signer not yet completed or declined.

        Parallel documents have no single current signer and return None.
        """
        if not aggregate.document.sequential_signing:
            return None
        current = self.current_signers(aggregate)
        return current[0] if current else None

    def can_act(self, aggregate: DocumentAggregate, signer_id: UUID) -> bool:
        if not aggregate.document.status.accepts_signing:
            return False
        if not aggregate.has_signer(signer_id):
            return False
        return any(s.id == signer_id for s in self.current_signers(aggregate))

    def progress(self, aggregate: DocumentAggregate) -> SigningProgress:
        completed = sum(1 for s in aggregate.signers if s.status is SignerStatus.COMPLETED)
        declined = sum(1 for s in aggregate.signers if s.status is SignerStatus.DECLINED)
        return SigningProgress(completed=completed, declined=declined, total=len(aggregate.signers))

    def ensure_turn(self, aggregate: DocumentAggregate, signer: Signer) -> None:
        """Raise WorkflowViolation unless ``signer`` may act now."""
        if signer.status is SignerStatus.COMPLETED:
            raise WorkflowViolation("already completed", expected="pending signer", actual="completed")
        if signer.status is SignerStatus.DECLINED:
            raise WorkflowViolation("already declined", expected="pending signer", actual="declined")
        if aggregate.document.sequential_signing:
            current = self.current_signer(aggregate)
            if current is None or current.id != signer.id:
                raise WorkflowViolation(
                    "not your turn",
                    expected=f"signer order {current.order}" if current else None,
                    actual=f"signer order {signer.order}",
                )

    def authorize(self, signer: Signer, actor: Actor) -> None:
        """Check the caller is the signer (or holds its access code)."""
        if actor.role is not ActorRole.SIGNER:
            raise PermissionDenied("Only the signer may perform this action")
        matches = actor.subject == str(signer.id) or (
            actor.email is not None and actor.email.lower() == signer.email.lower()
        )
        if not matches:
            raise PermissionDenied("You are not a signer on this document")
        if signer.access_code and not (
            actor.access_code and secrets.compare_digest(actor.access_code, signer.access_code)
        ):
            raise PermissionDenied("A valid access code is required")

    def add_signer(
        self,
        aggregate: DocumentAggregate,
        email: str,
        *,
        name: str | None = None,
        role: str | None = None,
        order: int | None = None,
        access_code: str | None = None,
        color: str | None = None,
    ) -> Signer:
        """Add a signer while the document is still being prepared."""
        _ensure_pending(aggregate, "add signers")
        email = email.strip()
        if any(s.email.lower() == email.lower() for s in aggregate.signers):
            raise ValidationError(f"Signer {email} is already on this document")
        if order is None:
            order = max((s.order for s in aggregate.signers), default=0) + 1
        elif order < 1:
            raise ValidationError("Signer order must be 1 or greater")
        elif aggregate.document.sequential_signing and any(s.order == order for s in aggregate.signers):
            raise ValidationError(f"Signing order {order} is already taken")

        signer = Signer(
            id=uuid4(),
            document_id=aggregate.id,
            email=email,
            order=order,
            name=name,
            role=role,
            access_code=access_code,
            color=color or SIGNER_COLORS[len(aggregate.signers) % len(SIGNER_COLORS)],
        )
        aggregate.signers.append(signer)
        logger.debug("Added signer %s to document %s at order %d", signer.id, aggregate.id, order)
        return signer

    def remove_signer(self, aggregate: DocumentAggregate, signer_id: UUID) -> Signer:
        """Remove a signer before sending; its fields become unassigned."""
        signer = aggregate.get_signer(signer_id)
        _ensure_pending(aggregate, "remove signers")
        aggregate.signers.remove(signer)
        for field in aggregate.fields_for(signer_id):
            field.signer_id = None
        return signer

    def check_sequence(self, aggregate: DocumentAggregate) -> None:
        """Sequential orders must be exactly 1..n."""
        orders = sorted(s.order for s in aggregate.signers)
        expected = list(range(1, len(orders) + 1))
        if orders != expected:
            raise WorkflowViolation(
                "signing order must be a contiguous sequence starting at 1",
                expected=",".join(map(str, expected)),
                actual=",".join(map(str, orders)),
            )

    def stamp_notified(self, signers: list[Signer], now: datetime) -> None:
        for signer in signers:
            signer.notified_at = now


def _ensure_pending(aggregate: DocumentAggregate, action: str) -> None:
    status = aggregate.document.status
    if status is not DocumentStatus.PENDING:
        raise WorkflowViolation(
            f"cannot {action} after the document has been sent",
            expected=DocumentStatus.PENDING.value,
            actual=status.value,
        )
