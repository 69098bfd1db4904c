"""Document DTOs."""

from dataclasses import dataclass
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from signflow.domain.entities import (
    Document,
    DocumentAggregate,
    DocumentField,
    DocumentHistory,
    Signer,
)
from signflow.domain.value_objects import DocumentExtensions, SigningProgress


class DocumentCreateInput(BaseModel):
    """Input for creating a document."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    key: str = Field(min_length=1, description="Blob storage key of the uploaded file")
    type: str = "pdf"
    description: str | None = None
    sequential_signing: bool = False
    enable_watermark: bool = False
    watermark_text: str | None = Field(default=None, max_length=100)
    page_count: int | None = Field(default=None, ge=1)
    page_width: float | None = Field(default=None, gt=0)
    page_height: float | None = Field(default=None, gt=0)
    expires_at: AwareDatetime | None = None
    extensions: DocumentExtensions = Field(default_factory=DocumentExtensions)


class DocumentUpdateInput(BaseModel):
    """Partial update of a document still being prepared."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    sequential_signing: bool | None = None
    enable_watermark: bool | None = None
    watermark_text: str | None = Field(default=None, max_length=100)
    page_count: int | None = Field(default=None, ge=1)
    page_width: float | None = Field(default=None, gt=0)
    page_height: float | None = Field(default=None, gt=0)
    expires_at: AwareDatetime | None = None
    extensions: DocumentExtensions | None = None


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time copy of a document aggregate returned to callers."""

    document: Document
    signers: tuple[Signer, ...]
    fields: tuple[DocumentField, ...]
    progress: SigningProgress
    current_signer_id: UUID | None

    @property
    def id(self) -> UUID:
        return self.document.id

    @classmethod
    def of(
        cls,
        aggregate: DocumentAggregate,
        progress: SigningProgress,
        current_signer_id: UUID | None,
    ) -> "DocumentSnapshot":
        frozen = aggregate.copy()
        return cls(
            document=frozen.document,
            signers=tuple(frozen.ordered_signers()),
            fields=tuple(frozen.fields),
            progress=progress,
            current_signer_id=current_signer_id,
        )


@dataclass(frozen=True)
class HistoryOutput:
    """Output DTO for the audit trail."""

    document_id: UUID
    entries: tuple[DocumentHistory, ...]
