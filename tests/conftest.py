"""Pytest fixtures for SignFlow tests."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from signflow.application.coordinator import WorkflowCoordinator
from signflow.application.locks import DocumentLocks
from signflow.domain.entities import Document, DocumentAggregate, DocumentHistory
from signflow.domain.exceptions import ConflictError
from signflow.domain.services import DocumentLifecycle, FieldRegistry, SignerRoster
from signflow.domain.value_objects import (
    Actor,
    ActorRole,
    DeclinePolicy,
    DocumentStatus,
)
from signflow.infrastructure.storage.public_bucket_storage import PublicBucketStorage

AUTHOR_ID = "author-1"
BLOB_BASE_URL = "https://files.example.com/documents"


# --- Fake store ---


class FakeStore:
    """Committed state shared by every FakeUnitOfWork of a test."""

    def __init__(self) -> None:
        self.documents: dict[UUID, DocumentAggregate] = {}
        self.history: list[DocumentHistory] = []
        self.commits = 0
        self.rollbacks = 0
        self.before_save = None


class FakeDocumentRepository:
    """In-memory aggregate repository. Writes are staged until commit."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.staged: dict[UUID, DocumentAggregate | None] = {}

    def _current(self, document_id: UUID) -> DocumentAggregate | None:
        if document_id in self.staged:
            return self.staged[document_id]
        return self._store.documents.get(document_id)

    async def load_aggregate(self, document_id: UUID) -> DocumentAggregate | None:
        await asyncio.sleep(0)
        aggregate = self._current(document_id)
        return copy.deepcopy(aggregate) if aggregate else None

    async def create(self, aggregate: DocumentAggregate) -> DocumentAggregate:
        self.staged[aggregate.id] = copy.deepcopy(aggregate)
        return aggregate

    async def save_aggregate(self, aggregate: DocumentAggregate) -> DocumentAggregate:
        await asyncio.sleep(0)
        if self._store.before_save is not None:
            await self._store.before_save(aggregate)
        stored = self._current(aggregate.id)
        if stored is None or stored.document.version != aggregate.document.version:
            raise ConflictError(f"Document {aggregate.id} was modified concurrently")
        aggregate.document.version += 1
        self.staged[aggregate.id] = copy.deepcopy(aggregate)
        return aggregate

    async def delete(self, document_id: UUID) -> None:
        self.staged[document_id] = None

    async def list_by_author(
        self,
        author_id: str,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> tuple[list[DocumentAggregate], str | None]:
        items = sorted(
            (a for a in self._store.documents.values() if a.document.author_id == author_id),
            key=lambda a: a.id,
        )
        if cursor:
            items = [a for a in items if a.id > UUID(cursor)]
        page = items[: limit + 1]
        next_cursor = str(page[limit].id) if len(page) > limit else None
        return [copy.deepcopy(a) for a in page[:limit]], next_cursor

    async def list_due_for_expiry(self, now: datetime, limit: int = 100) -> list[UUID]:
        due = [
            a
            for a in self._store.documents.values()
            if a.document.expires_at is not None
            and a.document.expires_at <= now
            and not a.document.status.is_terminal
        ]
        due.sort(key=lambda a: a.document.expires_at)
        return [a.id for a in due[:limit]]


class FakeHistoryRepository:
    """In-memory audit trail."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.staged: list[DocumentHistory] = []

    async def add_batch(self, entries: list[DocumentHistory]) -> None:
        self.staged.extend(entries)

    async def list_by_document(self, document_id: UUID) -> list[DocumentHistory]:
        return [h for h in self._store.history if h.document_id == document_id]


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self, store: FakeStore | None = None) -> None:
        self.store = store or FakeStore()
        self.documents = FakeDocumentRepository(self.store)
        self.history = FakeHistoryRepository(self.store)

    async def commit(self) -> None:
        for document_id, aggregate in self.documents.staged.items():
            if aggregate is None:
                self.store.documents.pop(document_id, None)
                self.store.history = [
                    h for h in self.store.history if h.document_id != document_id
                ]
            else:
                self.store.documents[document_id] = aggregate
        self.store.history.extend(self.history.staged)
        self.documents.staged.clear()
        self.history.staged.clear()
        self.store.commits += 1

    async def rollback(self) -> None:
        self.documents.staged.clear()
        self.history.staged.clear()
        self.store.rollbacks += 1


def make_uow_factory(store: FakeStore):
    """Factory with the same commit/rollback contract as the Postgres one."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        uow = FakeUnitOfWork(store)
        try:
            yield uow
            await uow.commit()
        except BaseException:
            await uow.rollback()
            raise

    return _factory


class FakeClock:
    """Settable clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# --- Builders ---


def make_document(**overrides) -> Document:
    now = datetime(2026, 1, 15, 9, 0, tzinfo=UTC)
    values = dict(
        id=uuid4(),
        title="Lease agreement",
        author_id=AUTHOR_ID,
        key="leases/lease.pdf",
        type="pdf",
        created_at=now,
        updated_at=now,
        page_count=2,
    )
    values.update(overrides)
    return Document(**values)


def make_aggregate(**overrides) -> DocumentAggregate:
    return DocumentAggregate(document=make_document(**overrides))


def author() -> Actor:
    return Actor(subject=AUTHOR_ID, role=ActorRole.AUTHOR)


def signer_actor(signer, access_code: str | None = None) -> Actor:
    return Actor(
        subject=str(signer.id),
        role=ActorRole.SIGNER,
        email=signer.email,
        access_code=access_code,
    )


SIGNATURE = "data:image/png;base64,iVBORw0KGgo="


# --- Fixtures ---


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def uow_factory(store: FakeStore):
    """Factory returning async context manager with FakeUnitOfWork."""
    return make_uow_factory(store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 2, 12, 0, tzinfo=UTC))


@pytest.fixture
def notifier() -> AsyncMock:
    """AsyncMock standing in for the Notifier port."""
    mock = AsyncMock()
    mock.notify.return_value = None
    return mock


@pytest.fixture
def roster() -> SignerRoster:
    return SignerRoster()


@pytest.fixture
def registry(roster: SignerRoster) -> FieldRegistry:
    return FieldRegistry(roster)


@pytest.fixture
def lifecycle(roster: SignerRoster, registry: FieldRegistry) -> DocumentLifecycle:
    return DocumentLifecycle(roster, registry)


@pytest.fixture
def decline_policy() -> DeclinePolicy:
    return DeclinePolicy.ALL_OR_DECLINED


@pytest.fixture
def coordinator(uow_factory, notifier, clock, roster, registry, decline_policy) -> WorkflowCoordinator:
    return WorkflowCoordinator(
        unit_of_work_factory=uow_factory,
        lifecycle=DocumentLifecycle(roster, registry, decline_policy=decline_policy),
        notifier=notifier,
        blob_storage=PublicBucketStorage(BLOB_BASE_URL),
        locks=DocumentLocks(timeout=2.0),
        clock=clock,
    )


def status_of(store: FakeStore, document_id: UUID) -> DocumentStatus:
    return store.documents[document_id].document.status
