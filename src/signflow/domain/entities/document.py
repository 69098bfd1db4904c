"""Document entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from signflow.domain.value_objects import DocumentExtensions, DocumentStatus


@dataclass
class Document:
    """One signable artifact with an overall lifecycle status."""

    id: UUID
    title: str
    author_id: str
    key: str
    type: str
    created_at: datetime
    updated_at: datetime
    status: DocumentStatus = DocumentStatus.PENDING
    description: str | None = None
    file_url: str | None = None
    sequential_signing: bool = False
    enable_watermark: bool = False
    watermark_text: str | None = None
    page_count: int | None = None
    page_width: float = 612.0
    page_height: float = 792.0
    prepared_at: datetime | None = None
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    signed_at: datetime | None = None
    expires_at: datetime | None = None
    canceled_at: datetime | None = None
    extensions: DocumentExtensions = field(default_factory=DocumentExtensions)
    version: int = 0
