"""Document lifecycle state machine.

::

    PENDING -> SENT -> VIEWED -> SIGNED | DECLINED
        \\________\\_______\\____-> EXPIRED | CANCELED

Every method mutates the aggregate it is given and returns the workflow
events the change produced. Guards raise before anything is touched, so a
rejected call leaves the aggregate as it was.
"""

import logging
from datetime import date, datetime, timedelta

from signflow.domain.entities import DocumentAggregate, Signer
from signflow.domain.exceptions import PermissionDenied, ValidationError, WorkflowViolation
from signflow.domain.services.field_registry import FieldRegistry
from signflow.domain.services.signer_roster import SignerRoster
from signflow.domain.value_objects import (
    Actor,
    ActorRole,
    DeclinePolicy,
    DocumentStatus,
    SignerStatus,
    WorkflowEvent,
    WorkflowEventType,
)

logger = logging.getLogger(__name__)


class DocumentLifecycle:
    """Owns document status and sequences signer turns."""

    def __init__(
        self,
        roster: SignerRoster,
        registry: FieldRegistry,
        decline_policy: DeclinePolicy = DeclinePolicy.ALL_OR_DECLINED,
        default_expiry: timedelta | None = None,
    ) -> None:
        self._roster = roster
        self._registry = registry
        self._decline_policy = decline_policy
        self._default_expiry = default_expiry

    @property
    def roster(self) -> SignerRoster:
        return self._roster

    @property
    def registry(self) -> FieldRegistry:
        return self._registry

    def ensure_author(self, aggregate: DocumentAggregate, actor: Actor) -> None:
        if actor.role is not ActorRole.AUTHOR or actor.subject != aggregate.document.author_id:
            raise PermissionDenied("Only the document author may perform this action")

    def send(
        self,
        aggregate: DocumentAggregate,
        actor: Actor,
        now: datetime,
        expires_at: datetime | None = None,
    ) -> list[WorkflowEvent]:
        """PENDING -> SENT. Invites every signer."""
        self.ensure_author(aggregate, actor)
        document = aggregate.document
        _require(document.status is DocumentStatus.PENDING, "document has already been sent",
                 DocumentStatus.PENDING.value, document.status.value)
        if not aggregate.signers:
            raise WorkflowViolation("add a signer before sending the document",
                                    expected="at least one signer", actual="no signers")
        if document.sequential_signing:
            self._roster.check_sequence(aggregate)

        deadline = document.expires_at
        if deadline is None:
            if expires_at is not None:
                deadline = expires_at
            elif self._default_expiry is not None:
                deadline = now + self._default_expiry
        elif expires_at is not None and expires_at != deadline:
            raise WorkflowViolation("expiry date is already set and cannot change")
        if deadline is not None and deadline <= now:
            raise ValidationError("Expiry date must be in the future")

        document.expires_at = deadline
        document.status = DocumentStatus.SENT
        document.sent_at = now
        document.prepared_at = document.prepared_at or now
        for signer in aggregate.signers:
            signer.status = SignerStatus.INVITED
            signer.invited_at = now

        notified = self._roster.current_signers(aggregate)
        self._roster.stamp_notified(notified, now)
        logger.info("Document %s sent to %d signer(s)", document.id, len(aggregate.signers))
        return [
            _event(aggregate, WorkflowEventType.SENT, now, s, order=s.order)
            for s in notified
        ]

    def view(self, aggregate: DocumentAggregate, signer: Signer, now: datetime) -> list[WorkflowEvent]:
        """A signer opened the document. Idempotent."""
        document = aggregate.document
        _require(document.status is not DocumentStatus.PENDING, "document has not been sent",
                 "sent", document.status.value)
        if document.status.is_terminal:
            return []

        events = []
        if signer.viewed_at is None:
            signer.viewed_at = now
            events.append(_event(aggregate, WorkflowEventType.VIEWED, now, signer))
        if signer.status.can_advance_to(SignerStatus.VIEWED):
            signer.status = SignerStatus.VIEWED
        if document.status is DocumentStatus.SENT:
            document.status = DocumentStatus.VIEWED
        if document.viewed_at is None:
            document.viewed_at = now
        return events

    def complete_turn(
        self,
        aggregate: DocumentAggregate,
        signer: Signer,
        now: datetime,
        today: date | None = None,
    ) -> list[WorkflowEvent]:
        """Signer finishes their turn; may advance or finalize the document."""
        document = aggregate.document
        _require(document.status.accepts_signing, "document is not open for signing",
                 "sent or viewed", document.status.value)
        self._roster.ensure_turn(aggregate, signer)

        findings = self._registry.all_fields_satisfied(aggregate, signer.id, today=today)
        blocking = [f for f in findings if f.blocking]
        if blocking:
            raise ValidationError(f"Please correct {len(blocking)} field(s) with errors", blocking)

        events = self.view(aggregate, signer, now)
        signer.status = SignerStatus.COMPLETED
        signer.completed_at = now
        events.append(_event(aggregate, WorkflowEventType.COMPLETED, now, signer,
                             warnings=len(findings)))
        logger.info("Signer %s completed document %s", signer.id, document.id)

        events.extend(self._settle(aggregate, now))
        if not document.status.is_terminal and document.sequential_signing:
            following = self._roster.current_signer(aggregate)
            if following is not None:
                self._roster.stamp_notified([following], now)
                events.append(_event(aggregate, WorkflowEventType.SENT, now, following,
                                     order=following.order))
        return events

    def decline(
        self,
        aggregate: DocumentAggregate,
        signer: Signer,
        reason: str | None,
        now: datetime,
    ) -> list[WorkflowEvent]:
        """Signer refuses to sign."""
        document = aggregate.document
        _require(document.status.accepts_signing, "document is not open for signing",
                 "sent or viewed", document.status.value)
        if signer.status.is_final:
            raise WorkflowViolation(f"already {signer.status.value}",
                                    expected="pending signer", actual=signer.status.value)

        signer.status = SignerStatus.DECLINED
        signer.declined_at = now
        signer.decline_reason = reason
        events = [_event(aggregate, WorkflowEventType.DECLINED, now, signer, reason=reason)]

        if document.sequential_signing or self._decline_policy is DeclinePolicy.ANY_DECLINES:
            document.status = DocumentStatus.DECLINED
        else:
            events.extend(self._settle(aggregate, now))
        logger.info("Signer %s declined document %s (document now %s)",
                    signer.id, document.id, document.status.value)
        return events

    def expire_if_due(self, aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
        """Move a non-terminal document past its expiry to EXPIRED."""
        document = aggregate.document
        if document.status.is_terminal or document.expires_at is None or now < document.expires_at:
            return []
        previous = document.status
        document.status = DocumentStatus.EXPIRED
        logger.info("Document %s expired (was %s)", document.id, previous.value)
        return [_event(aggregate, WorkflowEventType.EXPIRED, now, None, previous=previous.value)]

    def cancel(
        self,
        aggregate: DocumentAggregate,
        actor: Actor,
        now: datetime,
        reason: str | None = None,
    ) -> list[WorkflowEvent]:
        self.ensure_author(aggregate, actor)
        document = aggregate.document
        _require(not document.status.is_terminal, "document is already finalized",
                 "non-terminal", document.status.value)
        document.status = DocumentStatus.CANCELED
        document.canceled_at = now
        return [_event(aggregate, WorkflowEventType.CANCELED, now, None, reason=reason)]

    def remind(self, aggregate: DocumentAggregate, actor: Actor, now: datetime) -> list[WorkflowEvent]:
        """Re-notify every signer who is entitled to act and has not yet."""
        self.ensure_author(aggregate, actor)
        document = aggregate.document
        _require(document.status.accepts_signing, "reminders need a document awaiting signatures",
                 "sent or viewed", document.status.value)
        targets = self._roster.current_signers(aggregate)
        if not targets:
            raise WorkflowViolation("no pending signers to remind")
        self._roster.stamp_notified(targets, now)
        return [_event(aggregate, WorkflowEventType.REMINDED, now, s) for s in targets]

    def _settle(self, aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
        """Finalize once every signer has completed or declined."""
        progress = self._roster.progress(aggregate)
        if not progress.resolved:
            return []
        document = aggregate.document
        if progress.declined == 0:
            document.status = DocumentStatus.SIGNED
            document.signed_at = now
            logger.info("Document %s fully signed", document.id)
            return [_event(aggregate, WorkflowEventType.SIGNED, now, None, signers=progress.total)]
        document.status = DocumentStatus.DECLINED
        return []


def _require(condition: bool, message: str, expected: str, actual: str) -> None:
    if not condition:
        raise WorkflowViolation(message, expected=expected, actual=actual)


def _event(
    aggregate: DocumentAggregate,
    type: WorkflowEventType,
    now: datetime,
    signer: Signer | None,
    **details,
) -> WorkflowEvent:
    return WorkflowEvent(
        type=type,
        document_id=aggregate.id,
        occurred_at=now,
        signer_id=signer.id if signer else None,
        details={k: v for k, v in details.items() if v is not None},
    )
