"""Signer entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from signflow.domain.value_objects import SignerStatus


@dataclass
class Signer:
    """A party required to act on a document."""

    id: UUID
    document_id: UUID
    email: str
    order: int
    status: SignerStatus = SignerStatus.NOT_INVITED
    name: str | None = None
    role: str | None = None
    access_code: str | None = None
    color: str | None = None
    invited_at: datetime | None = None
    viewed_at: datetime | None = None
    completed_at: datetime | None = None
    notified_at: datetime | None = None
    declined_at: datetime | None = None
    decline_reason: str | None = None
