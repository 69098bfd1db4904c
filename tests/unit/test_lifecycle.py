"""Unit tests for DocumentLifecycle."""

from datetime import UTC, datetime, timedelta

import pytest

from signflow.domain.exceptions import PermissionDenied, ValidationError, WorkflowViolation
from signflow.domain.services import DocumentLifecycle, FieldRegistry, SignerRoster
from signflow.domain.value_objects import (
    Actor,
    ActorRole,
    DeclinePolicy,
    DocumentStatus,
    FieldType,
    SignerStatus,
    WorkflowEventType,
)

from tests.conftest import make_aggregate

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
AUTHOR = Actor(subject="author-1", role=ActorRole.AUTHOR)


def _prepared(roster: SignerRoster, emails=("a@example.com", "b@example.com"), **doc):
    aggregate = make_aggregate(**doc)
    for email in emails:
        roster.add_signer(aggregate, email)
    return aggregate


def _types(events):
    return [e.type for e in events]


def test_send_invites_everyone_and_notifies_current(lifecycle: DocumentLifecycle, roster) -> None:
    """Sequential send notifies only the first signer."""
    aggregate = _prepared(roster, sequential_signing=True)
    events = lifecycle.send(aggregate, AUTHOR, NOW)

    assert aggregate.document.status is DocumentStatus.SENT
    assert aggregate.document.sent_at == NOW
    assert all(s.status is SignerStatus.INVITED for s in aggregate.signers)
    first, second = aggregate.ordered_signers()
    assert _types(events) == [WorkflowEventType.SENT]
    assert events[0].signer_id == first.id
    assert first.notified_at == NOW
    assert second.notified_at is None


def test_send_parallel_notifies_all(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    events = lifecycle.send(aggregate, AUTHOR, NOW)
    assert {e.signer_id for e in events} == {s.id for s in aggregate.signers}


def test_send_guards(lifecycle: DocumentLifecycle, roster) -> None:
    with pytest.raises(WorkflowViolation, match="add a signer"):
        lifecycle.send(make_aggregate(), AUTHOR, NOW)

    aggregate = _prepared(roster)
    with pytest.raises(PermissionDenied):
        lifecycle.send(aggregate, Actor(subject="other", role=ActorRole.AUTHOR), NOW)
    with pytest.raises(ValidationError, match="future"):
        lifecycle.send(aggregate, AUTHOR, NOW, expires_at=NOW - timedelta(days=1))
    assert aggregate.document.status is DocumentStatus.PENDING

    lifecycle.send(aggregate, AUTHOR, NOW)
    with pytest.raises(WorkflowViolation, match="already been sent"):
        lifecycle.send(aggregate, AUTHOR, NOW)


def test_send_applies_default_expiry(roster, registry) -> None:
    lifecycle = DocumentLifecycle(roster, registry, default_expiry=timedelta(days=30))
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW)
    assert aggregate.document.expires_at == NOW + timedelta(days=30)


def test_view_is_idempotent(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW)
    signer = aggregate.signers[0]

    first = lifecycle.view(aggregate, signer, NOW)
    again = lifecycle.view(aggregate, signer, NOW + timedelta(minutes=5))
    assert _types(first) == [WorkflowEventType.VIEWED]
    assert again == []
    assert signer.status is SignerStatus.VIEWED
    assert signer.viewed_at == NOW
    assert aggregate.document.status is DocumentStatus.VIEWED
    assert aggregate.document.viewed_at == NOW


def test_view_before_send_is_violation(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    with pytest.raises(WorkflowViolation):
        lifecycle.view(aggregate, aggregate.signers[0], NOW)


def test_sequential_completion_advances_turn(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster, sequential_signing=True)
    lifecycle.send(aggregate, AUTHOR, NOW)
    first, second = aggregate.ordered_signers()

    events = lifecycle.complete_turn(aggregate, first, NOW)
    assert first.status is SignerStatus.COMPLETED
    assert first.viewed_at == NOW
    assert _types(events) == [
        WorkflowEventType.VIEWED,
        WorkflowEventType.COMPLETED,
        WorkflowEventType.SENT,
    ]
    assert events[-1].signer_id == second.id
    assert second.notified_at == NOW
    assert roster.current_signer(aggregate) is second

    events = lifecycle.complete_turn(aggregate, second, NOW)
    assert aggregate.document.status is DocumentStatus.SIGNED
    assert aggregate.document.signed_at == NOW
    assert _types(events)[-1] is WorkflowEventType.SIGNED


def test_complete_out_of_turn(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster, sequential_signing=True)
    lifecycle.send(aggregate, AUTHOR, NOW)
    with pytest.raises(WorkflowViolation, match="not your turn"):
        lifecycle.complete_turn(aggregate, aggregate.ordered_signers()[1], NOW)


def test_complete_blocked_by_required_field(lifecycle: DocumentLifecycle, roster, registry: FieldRegistry) -> None:
    aggregate = _prepared(roster, emails=("a@example.com",))
    signer = aggregate.signers[0]
    field = registry.add_field(
        aggregate, type=FieldType.TEXT, label="Name", page_number=1, x=0, y=0, width=50, height=10,
        required=True, signer_id=signer.id,
    )
    lifecycle.send(aggregate, AUTHOR, NOW)

    with pytest.raises(ValidationError) as exc_info:
        lifecycle.complete_turn(aggregate, signer, NOW)
    assert [e.field_id for e in exc_info.value.errors] == [field.id]
    assert signer.status is SignerStatus.INVITED


def test_parallel_decline_waits_for_everyone(lifecycle: DocumentLifecycle, roster) -> None:
    """Default policy: declined only once every signer has acted."""
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW)
    a, b = aggregate.signers

    lifecycle.decline(aggregate, a, "terms", NOW)
    assert a.decline_reason == "terms"
    assert aggregate.document.status is DocumentStatus.SENT

    lifecycle.complete_turn(aggregate, b, NOW)
    assert aggregate.document.status is DocumentStatus.DECLINED


def test_parallel_decline_any_policy(roster, registry) -> None:
    lifecycle = DocumentLifecycle(roster, registry, decline_policy=DeclinePolicy.ANY_DECLINES)
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW)
    lifecycle.decline(aggregate, aggregate.signers[0], None, NOW)
    assert aggregate.document.status is DocumentStatus.DECLINED


def test_sequential_decline_is_immediate(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster, sequential_signing=True)
    lifecycle.send(aggregate, AUTHOR, NOW)
    first, second = aggregate.ordered_signers()
    lifecycle.decline(aggregate, first, None, NOW)
    assert aggregate.document.status is DocumentStatus.DECLINED
    assert second.status is SignerStatus.INVITED


def test_decline_twice(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW)
    signer = aggregate.signers[0]
    lifecycle.decline(aggregate, signer, None, NOW)
    with pytest.raises(WorkflowViolation, match="already declined"):
        lifecycle.decline(aggregate, signer, None, NOW)


def test_expire_if_due(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW, expires_at=NOW + timedelta(days=1))

    assert lifecycle.expire_if_due(aggregate, NOW) == []
    events = lifecycle.expire_if_due(aggregate, NOW + timedelta(days=1))
    assert _types(events) == [WorkflowEventType.EXPIRED]
    assert events[0].details == {"previous": "sent"}
    assert aggregate.document.status is DocumentStatus.EXPIRED
    assert lifecycle.expire_if_due(aggregate, NOW + timedelta(days=2)) == []


def test_cancel(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    events = lifecycle.cancel(aggregate, AUTHOR, NOW, "wrong file")
    assert aggregate.document.status is DocumentStatus.CANCELED
    assert events[0].details == {"reason": "wrong file"}
    with pytest.raises(WorkflowViolation):
        lifecycle.cancel(aggregate, AUTHOR, NOW)


def test_remind_targets_pending_signers(lifecycle: DocumentLifecycle, roster) -> None:
    aggregate = _prepared(roster)
    lifecycle.send(aggregate, AUTHOR, NOW)
    lifecycle.complete_turn(aggregate, aggregate.signers[0], NOW)

    later = NOW + timedelta(days=2)
    events = lifecycle.remind(aggregate, AUTHOR, later)
    assert _types(events) == [WorkflowEventType.REMINDED]
    assert events[0].signer_id == aggregate.signers[1].id
    assert aggregate.signers[1].notified_at == later
