"""Document aggregate repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from signflow.domain.entities import DocumentAggregate


class DocumentRepository(Protocol):
    """Port for persisting a document together with its signers and fields."""

    async def load_aggregate(self, document_id: UUID) -> DocumentAggregate | None: ...

    async def create(self, aggregate: DocumentAggregate) -> DocumentAggregate: ...

    async def save_aggregate(self, aggregate: DocumentAggregate) -> DocumentAggregate:
        """Write document, signers and fields atomically.

        Raises ConflictError when the stored version differs from
        ``aggregate.document.version``; on success the version is bumped.
        """
        ...

    async def delete(self, document_id: UUID) -> None: ...

    async def list_by_author(
        self,
        author_id: str,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> tuple[list[DocumentAggregate], str | None]: ...

    async def list_due_for_expiry(self, now: datetime, limit: int = 100) -> list[UUID]: ...
