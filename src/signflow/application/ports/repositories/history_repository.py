"""Document history repository port."""

from typing import Protocol
from uuid import UUID

from signflow.domain.entities import DocumentHistory


class HistoryRepository(Protocol):
    """Port for the append-only audit trail."""

    async def add_batch(self, entries: list[DocumentHistory]) -> None: ...

    async def list_by_document(self, document_id: UUID) -> list[DocumentHistory]: ...
