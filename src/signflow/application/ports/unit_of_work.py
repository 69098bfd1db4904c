"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from signflow.application.ports.repositories.document_repository import DocumentRepository
from signflow.application.ports.repositories.history_repository import HistoryRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def documents(self) -> DocumentRepository: ...

    @property
    def history(self) -> HistoryRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances.

    Commits when the context exits normally, rolls back on any exception.
    """

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
