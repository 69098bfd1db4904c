"""PostgreSQL document history repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from signflow.domain.entities import DocumentHistory


class PostgresHistoryRepository:
    """Append-only audit trail."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def add_batch(self, entries: list[DocumentHistory]) -> None:
        """Create history entries in batch."""
        for e in entries:
            await self._conn.execute(
                "INSERT INTO document_history "
                "(id, document_id, action, actor_id, actor_role, signer_id, details, timestamp) "
                "VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
                (
                    e.id,
                    e.document_id,
                    e.action,
                    e.actor_id,
                    e.actor_role,
                    e.signer_id,
                    Jsonb(e.details),
                    e.timestamp,
                ),
            )

    async def list_by_document(self, document_id: UUID) -> list[DocumentHistory]:
        """List history for document, oldest first."""
        cur = await self._conn.execute(
            "SELECT id, document_id, action, actor_id, actor_role, signer_id, details, timestamp "
            "FROM document_history WHERE document_id = %s ORDER BY timestamp, id",
            (document_id,),
        )
        rows = await cur.fetchall()
        return [
            DocumentHistory(
                id=r[0],
                document_id=r[1],
                action=r[2],
                actor_id=r[3],
                actor_role=r[4],
                signer_id=r[5],
                details=r[6] or {},
                timestamp=r[7],
            )
            for r in rows
        ]
