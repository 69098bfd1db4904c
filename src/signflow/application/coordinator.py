"""Workflow coordinator - single entry point for state-mutating operations.

Every mutation runs as load -> copy -> decide -> persist inside a lock keyed
by document id. Guards in the domain services raise before the working copy
is saved, and the unit of work rolls back on any exception, so a rejected
call never leaves a partially applied aggregate behind.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from uuid import UUID, uuid4

from signflow.application.dto import (
    DocumentCreateInput,
    DocumentSnapshot,
    DocumentUpdateInput,
    FieldCreateInput,
    HistoryOutput,
    SignerInput,
)
from signflow.application.locks import DocumentLocks
from signflow.application.ports import BlobStorage, Notifier, UnitOfWorkFactory
from signflow.domain.entities import (
    Document,
    DocumentAggregate,
    DocumentField,
    DocumentHistory,
    Signer,
)
from signflow.domain.exceptions import (
    DocumentBusy,
    NotFound,
    NotificationError,
    PermissionDenied,
    PersistenceError,
    ValidationError,
    WorkflowViolation,
)
from signflow.domain.services import DocumentLifecycle
from signflow.domain.value_objects import (
    Actor,
    ActorRole,
    DocumentStatus,
    FieldValidationError,
    WorkflowEvent,
)

logger = logging.getLogger(__name__)

Change = Callable[[DocumentAggregate, datetime], list[WorkflowEvent]]


def utcnow() -> datetime:
    return datetime.now(UTC)


class WorkflowCoordinator:
    """Serializes workflow operations per document."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        lifecycle: DocumentLifecycle,
        notifier: Notifier,
        blob_storage: BlobStorage,
        locks: DocumentLocks | None = None,
        clock: Callable[[], datetime] = utcnow,
        page_size: tuple[float, float] = (612.0, 792.0),
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._lifecycle = lifecycle
        self._roster = lifecycle.roster
        self._registry = lifecycle.registry
        self._notifier = notifier
        self._blob_storage = blob_storage
        self._locks = locks or DocumentLocks()
        self._clock = clock
        self._page_size = page_size
        self._deliveries: set[asyncio.Task] = set()

    # --- authoring -------------------------------------------------------

    async def create_document(self, actor: Actor, input_data: DocumentCreateInput) -> DocumentSnapshot:
        """Create a PENDING document owned by ``actor``."""
        if actor.role is not ActorRole.AUTHOR:
            raise PermissionDenied("Only authors may create documents")
        now = self._clock()
        if input_data.expires_at is not None and input_data.expires_at <= now:
            raise ValidationError("Expiry date must be in the future")

        document = Document(
            id=uuid4(),
            title=input_data.title,
            author_id=actor.subject,
            key=input_data.key,
            type=input_data.type,
            created_at=now,
            updated_at=now,
            description=input_data.description,
            file_url=self._blob_storage.url_for(input_data.key),
            sequential_signing=input_data.sequential_signing,
            enable_watermark=input_data.enable_watermark,
            watermark_text=input_data.watermark_text,
            page_count=input_data.page_count,
            page_width=input_data.page_width or self._page_size[0],
            page_height=input_data.page_height or self._page_size[1],
            expires_at=input_data.expires_at,
            extensions=input_data.extensions,
        )
        aggregate = DocumentAggregate(document=document)
        async with self._uow_factory() as uow:
            await uow.documents.create(aggregate)
        logger.info("Document %s created by %s", document.id, actor.subject)
        return self._snapshot(aggregate)

    async def update_document(
        self, actor: Actor, document_id: UUID, changes: DocumentUpdateInput
    ) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            self._lifecycle.ensure_author(aggregate, actor)
            document = aggregate.document
            if document.status is not DocumentStatus.PENDING:
                raise WorkflowViolation(
                    "document can only be edited before it is sent",
                    expected=DocumentStatus.PENDING.value,
                    actual=document.status.value,
                )
            updates = changes.model_dump(exclude_unset=True)
            expires_at = updates.pop("expires_at", None)
            if expires_at is not None:
                if document.expires_at is not None:
                    raise WorkflowViolation("expiry date cannot change once set")
                if expires_at <= now:
                    raise ValidationError("Expiry date must be in the future")
                document.expires_at = expires_at
            if "extensions" in updates:
                updates["extensions"] = changes.extensions
            for name, value in updates.items():
                if value is not None or name in ("description", "watermark_text"):
                    setattr(document, name, value)
            for f in aggregate.fields:
                self._registry.check_geometry(aggregate, f.page_number, f.x, f.y, f.width, f.height)
            return []

        return await self._mutate(document_id, actor, change)

    async def delete_document(self, actor: Actor, document_id: UUID) -> None:
        """Remove a document with its signers, fields and history."""
        async with self._locks.hold(document_id):
            async with self._uow_factory() as uow:
                aggregate = await self._load(uow, document_id)
                self._lifecycle.ensure_author(aggregate, actor)
                await uow.documents.delete(document_id)
        logger.info("Document %s deleted by %s", document_id, actor.subject)

    async def add_signer(self, actor: Actor, document_id: UUID, input_data: SignerInput) -> Signer:
        created: list[Signer] = []

        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            self._lifecycle.ensure_author(aggregate, actor)
            created.append(self._roster.add_signer(aggregate, **input_data.model_dump()))
            return []

        await self._mutate(document_id, actor, change)
        return created[0]

    async def remove_signer(self, actor: Actor, document_id: UUID, signer_id: UUID) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            self._lifecycle.ensure_author(aggregate, actor)
            self._roster.remove_signer(aggregate, signer_id)
            return []

        return await self._mutate(document_id, actor, change)

    async def add_field(self, actor: Actor, document_id: UUID, input_data: FieldCreateInput) -> DocumentField:
        created: list[DocumentField] = []

        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            self._lifecycle.ensure_author(aggregate, actor)
            field = self._registry.add_field(
                aggregate,
                type=input_data.type,
                label=input_data.label,
                page_number=input_data.page_number,
                x=input_data.x,
                y=input_data.y,
                width=input_data.width,
                height=input_data.height,
                required=input_data.required,
                signer_id=input_data.signer_id,
                value=input_data.value,
                validation_rule=input_data.validation_rule,
                conditional_logic=input_data.conditional_logic,
                options=input_data.options,
                **input_data.style(),
            )
            created.append(field)
            return []

        await self._mutate(document_id, actor, change)
        return created[0]

    async def remove_field(self, actor: Actor, document_id: UUID, field_id: UUID) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            self._lifecycle.ensure_author(aggregate, actor)
            self._registry.remove_field(aggregate, field_id)
            return []

        return await self._mutate(document_id, actor, change)

    # --- workflow --------------------------------------------------------

    async def send(
        self, actor: Actor, document_id: UUID, expires_at: datetime | None = None
    ) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            return self._lifecycle.send(aggregate, actor, now, expires_at=expires_at)

        return await self._mutate(document_id, actor, change)

    async def view(self, actor: Actor, document_id: UUID, signer_id: UUID) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            signer = aggregate.get_signer(signer_id)
            self._roster.authorize(signer, actor)
            return self._lifecycle.view(aggregate, signer, now)

        return await self._mutate(document_id, actor, change)

    async def set_field_value(
        self,
        actor: Actor,
        document_id: UUID,
        field_id: UUID,
        value: str | None,
        signer_id: UUID | None = None,
    ) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            self._registry.set_field_value(
                aggregate, field_id, signer_id, value, actor, today=now.date()
            )
            return []

        return await self._mutate(document_id, actor, change)

    async def complete_turn(
        self,
        actor: Actor,
        document_id: UUID,
        signer_id: UUID,
        values: Mapping[UUID, str | None] | None = None,
    ) -> DocumentSnapshot:
        """Write any submitted values, then complete the signer's turn."""

        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            signer = aggregate.get_signer(signer_id)
            self._roster.authorize(signer, actor)
            errors: list[FieldValidationError] = []
            for field_id, value in (values or {}).items():
                try:
                    self._registry.set_field_value(
                        aggregate, field_id, signer_id, value, actor, today=now.date()
                    )
                except ValidationError as e:
                    errors.extend(e.errors)
            if errors:
                raise ValidationError(f"Please correct {len(errors)} field(s) with errors", errors)
            return self._lifecycle.complete_turn(aggregate, signer, now, today=now.date())

        return await self._mutate(document_id, actor, change)

    async def decline(
        self,
        actor: Actor,
        document_id: UUID,
        signer_id: UUID,
        reason: str | None = None,
    ) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            signer = aggregate.get_signer(signer_id)
            self._roster.authorize(signer, actor)
            return self._lifecycle.decline(aggregate, signer, reason, now)

        return await self._mutate(document_id, actor, change)

    async def remind(self, actor: Actor, document_id: UUID) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            return self._lifecycle.remind(aggregate, actor, now)

        return await self._mutate(document_id, actor, change)

    async def cancel(self, actor: Actor, document_id: UUID, reason: str | None = None) -> DocumentSnapshot:
        def change(aggregate: DocumentAggregate, now: datetime) -> list[WorkflowEvent]:
            return self._lifecycle.cancel(aggregate, actor, now, reason)

        return await self._mutate(document_id, actor, change)

    async def expire(self, document_id: UUID) -> DocumentSnapshot:
        """Expire the document if its expiry has passed; otherwise a no-op."""
        return await self._mutate(
            document_id, Actor.system(), lambda aggregate, now: [], reject_expired=False
        )

    async def sweep_expired(self, limit: int = 100) -> int:
        """Expire every overdue document. Returns how many were expired."""
        async with self._uow_factory() as uow:
            due = await uow.documents.list_due_for_expiry(self._clock(), limit)
        expired = 0
        for document_id in due:
            try:
                snapshot = await self.expire(document_id)
            except (NotFound, DocumentBusy) as e:
                logger.info("Skipping expiry of %s: %s", document_id, e)
                continue
            except PersistenceError as e:
                logger.warning("Expiry of %s failed, retrying next sweep: %s", document_id, e)
                continue
            if snapshot.document.status is DocumentStatus.EXPIRED:
                expired += 1
        if expired:
            logger.info("Expiry sweep expired %d document(s)", expired)
        return expired

    # --- queries ---------------------------------------------------------

    async def get_document(self, document_id: UUID) -> DocumentSnapshot:
        """Read a document, persisting EXPIRED first if it is overdue."""
        async with self._uow_factory() as uow:
            aggregate = await self._load(uow, document_id)
        document = aggregate.document
        if (
            not document.status.is_terminal
            and document.expires_at is not None
            and self._clock() >= document.expires_at
        ):
            return await self.expire(document_id)
        return self._snapshot(aggregate)

    async def list_documents(
        self, actor: Actor, *, cursor: str | None = None, limit: int = 20
    ) -> tuple[list[DocumentSnapshot], str | None]:
        async with self._uow_factory() as uow:
            aggregates, next_cursor = await uow.documents.list_by_author(
                actor.subject, cursor=cursor, limit=limit
            )
        return [self._snapshot(a) for a in aggregates], next_cursor

    async def all_fields_satisfied(self, document_id: UUID, signer_id: UUID) -> list[FieldValidationError]:
        async with self._uow_factory() as uow:
            aggregate = await self._load(uow, document_id)
        aggregate.get_signer(signer_id)
        return self._registry.all_fields_satisfied(
            aggregate, signer_id, today=self._clock().date()
        )

    async def history(self, actor: Actor, document_id: UUID) -> HistoryOutput:
        async with self._uow_factory() as uow:
            aggregate = await self._load(uow, document_id)
            self._lifecycle.ensure_author(aggregate, actor)
            entries = await uow.history.list_by_document(document_id)
        return HistoryOutput(
            document_id=document_id,
            entries=tuple(sorted(entries, key=lambda e: e.timestamp)),
        )

    async def drain_notifications(self) -> None:
        """Wait for in-flight notifications (shutdown, tests)."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries))

    # --- internals -------------------------------------------------------

    async def _mutate(
        self,
        document_id: UUID,
        actor: Actor,
        change: Change,
        *,
        reject_expired: bool = True,
    ) -> DocumentSnapshot:
        async with self._locks.hold(document_id):
            task = asyncio.ensure_future(self._apply(document_id, actor, change))
            try:
                snapshot, events, expired = await asyncio.shield(task)
            except asyncio.CancelledError:
                await self._finish_after_cancel(document_id, task)
                raise
        self._dispatch(events)
        if expired and reject_expired:
            raise WorkflowViolation(
                "document has expired", expected="sent or viewed", actual=DocumentStatus.EXPIRED.value
            )
        return snapshot

    async def _finish_after_cancel(self, document_id: UUID, task: asyncio.Future) -> None:
        """Let an in-flight write finish so nothing is left half-applied."""
        while not task.done():
            try:
                await asyncio.wait([task])
            except asyncio.CancelledError:
                continue
        if task.cancelled() or task.exception() is not None:
            return
        logger.info("Operation on %s completed after caller cancelled", document_id)
        _, events, _ = task.result()
        self._dispatch(events)

    async def _apply(
        self, document_id: UUID, actor: Actor, change: Change
    ) -> tuple[DocumentSnapshot, list[WorkflowEvent], bool]:
        async with self._uow_factory() as uow:
            aggregate = await self._load(uow, document_id)
            now = self._clock()
            working = aggregate.copy()

            events = self._lifecycle.expire_if_due(working, now)
            expired = bool(events)
            if not expired:
                events = change(working, now)

            if working != aggregate:
                working.document.updated_at = now
                working = await uow.documents.save_aggregate(working)
            if events:
                await uow.history.add_batch([_history_entry(e, actor) for e in events])
        return self._snapshot(working), events, expired

    async def _load(self, uow, document_id: UUID) -> DocumentAggregate:
        aggregate = await uow.documents.load_aggregate(document_id)
        if aggregate is None:
            raise NotFound("Document", str(document_id))
        return aggregate

    def _snapshot(self, aggregate: DocumentAggregate) -> DocumentSnapshot:
        current = self._roster.current_signer(aggregate)
        return DocumentSnapshot.of(
            aggregate,
            progress=self._roster.progress(aggregate),
            current_signer_id=current.id if current else None,
        )

    def _dispatch(self, events: list[WorkflowEvent]) -> None:
        for event in events:
            task = asyncio.ensure_future(self._deliver(event))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, event: WorkflowEvent) -> None:
        try:
            await self._notifier.notify(event)
        except NotificationError as e:
            logger.warning("Notification %s for %s failed: %s", event.type, event.document_id, e)
        except Exception:
            logger.exception("Unexpected notifier error on %s for %s", event.type, event.document_id)


def _history_entry(event: WorkflowEvent, actor: Actor) -> DocumentHistory:
    return DocumentHistory(
        id=uuid4(),
        document_id=event.document_id,
        action=event.type.value,
        actor_id=actor.subject,
        actor_role=actor.role.value,
        timestamp=event.occurred_at,
        signer_id=event.signer_id,
        details=dict(event.details),
    )
