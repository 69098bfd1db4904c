"""PostgreSQL document aggregate repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from signflow.domain.entities import Document, DocumentAggregate, DocumentField, Signer
from signflow.domain.exceptions import ConflictError
from signflow.domain.value_objects import (
    ConditionalLogic,
    DocumentExtensions,
    DocumentStatus,
    FieldType,
    SignerStatus,
    ValidationRule,
)

_DOCUMENT_COLUMNS = (
    "id, title, author_id, key, type, status, description, file_url, "
    "sequential_signing, enable_watermark, watermark_text, page_count, page_width, "
    "page_height, created_at, updated_at, prepared_at, sent_at, viewed_at, signed_at, "
    "expires_at, canceled_at, extensions, version"
)

_SIGNER_COLUMNS = (
    "id, document_id, email, name, role, signing_order, status, access_code, color, "
    "invited_at, viewed_at, completed_at, notified_at, declined_at, decline_reason"
)

_FIELD_COLUMNS = (
    "id, document_id, signer_id, type, label, page_number, x, y, width, height, "
    "required, value, placeholder, color, font_family, font_size, background_color, "
    "border_color, text_color, validation_rule, conditional_logic, options"
)


def _placeholders(columns: str) -> str:
    return ", ".join(["%s"] * len(columns.split(",")))


class PostgresDocumentRepository:
    """Document repository implementation.

    A document, its signers and its fields are read and written together.
    """

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def load_aggregate(self, document_id: UUID) -> DocumentAggregate | None:
        """Get document with signers and fields by id."""
        cur = await self._conn.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM document WHERE id = %s",
            (document_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return await self._assemble(_row_to_document(r))

    async def create(self, aggregate: DocumentAggregate) -> DocumentAggregate:
        """Create document (and any signers/fields already attached)."""
        d = aggregate.document
        await self._conn.execute(
            f"INSERT INTO document ({_DOCUMENT_COLUMNS}) "
            f"VALUES ({_placeholders(_DOCUMENT_COLUMNS)})",
            _document_params(d),
        )
        await self._insert_children(aggregate)
        return aggregate

    async def save_aggregate(self, aggregate: DocumentAggregate) -> DocumentAggregate:
        """Update document, replace signers and fields. Checks the version."""
        d = aggregate.document
        cur = await self._conn.execute(
            """
            UPDATE document SET
                title=%s, status=%s, description=%s, file_url=%s,
                sequential_signing=%s, enable_watermark=%s, watermark_text=%s,
                page_count=%s, page_width=%s, page_height=%s, updated_at=%s,
                prepared_at=%s, sent_at=%s, viewed_at=%s, signed_at=%s,
                expires_at=%s, canceled_at=%s, extensions=%s, version=version + 1
            WHERE id=%s AND version=%s
            """,
            (
                d.title,
                d.status.value,
                d.description,
                d.file_url,
                d.sequential_signing,
                d.enable_watermark,
                d.watermark_text,
                d.page_count,
                d.page_width,
                d.page_height,
                d.updated_at,
                d.prepared_at,
                d.sent_at,
                d.viewed_at,
                d.signed_at,
                d.expires_at,
                d.canceled_at,
                Jsonb(d.extensions.model_dump(mode="json")),
                d.id,
                d.version,
            ),
        )
        if cur.rowcount == 0:
            raise ConflictError(f"Document {d.id} was modified concurrently")
        d.version += 1

        await self._conn.execute("DELETE FROM document_field WHERE document_id = %s", (d.id,))
        await self._conn.execute("DELETE FROM signer WHERE document_id = %s", (d.id,))
        await self._insert_children(aggregate)
        return aggregate

    async def delete(self, document_id: UUID) -> None:
        """Hard delete document; signers, fields and history cascade."""
        await self._conn.execute("DELETE FROM document WHERE id = %s", (document_id,))

    async def list_by_author(
        self,
        author_id: str,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> tuple[list[DocumentAggregate], str | None]:
        """List an author's documents with cursor pagination."""
        conditions = ["author_id = %s"]
        _params: list[object] = [author_id]
        if cursor:
            conditions.append("id > %s")
            _params.append(UUID(cursor))
        where = " WHERE " + " AND ".join(conditions)
        params = tuple(_params) + (limit + 1,)
        cur = await self._conn.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM document{where} ORDER BY id LIMIT %s",
            params,
        )
        rows = await cur.fetchall()
        aggregates = [await self._assemble(_row_to_document(r)) for r in rows[:limit]]
        next_cursor = str(rows[limit][0]) if len(rows) > limit else None
        return aggregates, next_cursor

    async def list_due_for_expiry(self, now: datetime, limit: int = 100) -> list[UUID]:
        """Ids of non-terminal documents whose expiry has passed."""
        cur = await self._conn.execute(
            """
            SELECT id FROM document
            WHERE expires_at IS NOT NULL AND expires_at <= %s
              AND status IN (%s, %s, %s)
            ORDER BY expires_at
            LIMIT %s
            """,
            (
                now,
                DocumentStatus.PENDING.value,
                DocumentStatus.SENT.value,
                DocumentStatus.VIEWED.value,
                limit,
            ),
        )
        return [r[0] for r in await cur.fetchall()]

    async def _assemble(self, document: Document) -> DocumentAggregate:
        cur = await self._conn.execute(
            f"SELECT {_SIGNER_COLUMNS} FROM signer WHERE document_id = %s ORDER BY signing_order",
            (document.id,),
        )
        signers = [_row_to_signer(r) for r in await cur.fetchall()]
        cur = await self._conn.execute(
            f"SELECT {_FIELD_COLUMNS} FROM document_field WHERE document_id = %s "
            "ORDER BY page_number, y, x",
            (document.id,),
        )
        fields = [_row_to_field(r) for r in await cur.fetchall()]
        return DocumentAggregate(document=document, signers=signers, fields=fields)

    async def _insert_children(self, aggregate: DocumentAggregate) -> None:
        for s in aggregate.signers:
            await self._conn.execute(
                f"INSERT INTO signer ({_SIGNER_COLUMNS}) VALUES ({_placeholders(_SIGNER_COLUMNS)})",
                (
                    s.id,
                    s.document_id,
                    s.email,
                    s.name,
                    s.role,
                    s.order,
                    s.status.value,
                    s.access_code,
                    s.color,
                    s.invited_at,
                    s.viewed_at,
                    s.completed_at,
                    s.notified_at,
                    s.declined_at,
                    s.decline_reason,
                ),
            )
        for f in aggregate.fields:
            await self._conn.execute(
                f"INSERT INTO document_field ({_FIELD_COLUMNS}) VALUES ({_placeholders(_FIELD_COLUMNS)})",
                (
                    f.id,
                    f.document_id,
                    f.signer_id,
                    f.type.value,
                    f.label,
                    f.page_number,
                    f.x,
                    f.y,
                    f.width,
                    f.height,
                    f.required,
                    f.value,
                    f.placeholder,
                    f.color,
                    f.font_family,
                    f.font_size,
                    f.background_color,
                    f.border_color,
                    f.text_color,
                    Jsonb(f.validation_rule.to_dict()) if f.validation_rule else None,
                    Jsonb(f.conditional_logic.to_dict()) if f.conditional_logic else None,
                    Jsonb(f.options) if f.options is not None else None,
                ),
            )


def _document_params(d: Document) -> tuple:
    return (
        d.id,
        d.title,
        d.author_id,
        d.key,
        d.type,
        d.status.value,
        d.description,
        d.file_url,
        d.sequential_signing,
        d.enable_watermark,
        d.watermark_text,
        d.page_count,
        d.page_width,
        d.page_height,
        d.created_at,
        d.updated_at,
        d.prepared_at,
        d.sent_at,
        d.viewed_at,
        d.signed_at,
        d.expires_at,
        d.canceled_at,
        Jsonb(d.extensions.model_dump(mode="json")),
        d.version,
    )


def _row_to_document(r: tuple) -> Document:
    return Document(
        id=r[0],
        title=r[1],
        author_id=r[2],
        key=r[3],
        type=r[4],
        status=DocumentStatus(r[5]),
        description=r[6],
        file_url=r[7],
        sequential_signing=r[8],
        enable_watermark=r[9],
        watermark_text=r[10],
        page_count=r[11],
        page_width=r[12],
        page_height=r[13],
        created_at=r[14],
        updated_at=r[15],
        prepared_at=r[16],
        sent_at=r[17],
        viewed_at=r[18],
        signed_at=r[19],
        expires_at=r[20],
        canceled_at=r[21],
        extensions=DocumentExtensions.model_validate(r[22] or {}),
        version=r[23],
    )


def _row_to_signer(r: tuple) -> Signer:
    return Signer(
        id=r[0],
        document_id=r[1],
        email=r[2],
        name=r[3],
        role=r[4],
        order=r[5],
        status=SignerStatus(r[6]),
        access_code=r[7],
        color=r[8],
        invited_at=r[9],
        viewed_at=r[10],
        completed_at=r[11],
        notified_at=r[12],
        declined_at=r[13],
        decline_reason=r[14],
    )


def _row_to_field(r: tuple) -> DocumentField:
    return DocumentField(
        id=r[0],
        document_id=r[1],
        signer_id=r[2],
        type=FieldType(r[3]),
        label=r[4],
        page_number=r[5],
        x=r[6],
        y=r[7],
        width=r[8],
        height=r[9],
        required=r[10],
        value=r[11],
        placeholder=r[12],
        color=r[13],
        font_family=r[14],
        font_size=r[15],
        background_color=r[16],
        border_color=r[17],
        text_color=r[18],
        validation_rule=ValidationRule.from_dict(r[19]) if r[19] else None,
        conditional_logic=ConditionalLogic.from_dict(r[20]) if r[20] else None,
        options=list(r[21]) if r[21] is not None else None,
    )
