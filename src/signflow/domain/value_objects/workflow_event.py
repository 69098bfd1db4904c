"""Events emitted by the workflow engine for notifiers."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID


class WorkflowEventType(StrEnum):
    SENT = "sent"
    VIEWED = "viewed"
    COMPLETED = "completed"
    DECLINED = "declined"
    EXPIRED = "expired"
    SIGNED = "signed"
    REMINDED = "reminded"
    CANCELED = "canceled"


@dataclass(frozen=True)
class WorkflowEvent:
    """Something that happened to a document, tagged with document and signer."""

    type: WorkflowEventType
    document_id: UUID
    occurred_at: datetime
    signer_id: UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "document_id": str(self.document_id),
            "signer_id": str(self.signer_id) if self.signer_id else None,
            "occurred_at": self.occurred_at.isoformat(),
            "details": self.details,
        }
