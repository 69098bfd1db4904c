"""Document aggregate - the unit of locking and persistence."""

import copy
from dataclasses import dataclass, field
from uuid import UUID

from signflow.domain.entities.document import Document
from signflow.domain.entities.document_field import DocumentField
from signflow.domain.entities.signer import Signer
from signflow.domain.exceptions import NotFound


@dataclass
class DocumentAggregate:
    """A document together with the signers and fields it owns."""

    document: Document
    signers: list[Signer] = field(default_factory=list)
    fields: list[DocumentField] = field(default_factory=list)

    @property
    def id(self) -> UUID:
        return self.document.id

    def copy(self) -> "DocumentAggregate":
        return copy.deepcopy(self)

    def get_signer(self, signer_id: UUID) -> Signer:
        for signer in self.signers:
            if signer.id == signer_id:
                return signer
        raise NotFound("Signer", str(signer_id))

    def get_field(self, field_id: UUID) -> DocumentField:
        for f in self.fields:
            if f.id == field_id:
                return f
        raise NotFound("Field", str(field_id))

    def has_signer(self, signer_id: UUID) -> bool:
        return any(s.id == signer_id for s in self.signers)

    def ordered_signers(self) -> list[Signer]:
        return sorted(self.signers, key=lambda s: s.order)

    def fields_for(self, signer_id: UUID) -> list[DocumentField]:
        return [f for f in self.fields if f.signer_id == signer_id]

    def values(self) -> dict[UUID, str | None]:
        """Current value of every field, keyed by field id."""
        return {f.id: f.value for f in self.fields}
