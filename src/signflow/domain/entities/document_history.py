"""Document history (audit trail) entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass
class DocumentHistory:
    """One recorded workflow action on a document."""

    id: UUID
    document_id: UUID
    action: str
    actor_id: str
    actor_role: str
    timestamp: datetime
    signer_id: UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)
