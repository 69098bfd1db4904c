"""Domain entities."""

from signflow.domain.entities.document import Document
from signflow.domain.entities.document_aggregate import DocumentAggregate
from signflow.domain.entities.document_field import DocumentField
from signflow.domain.entities.document_history import DocumentHistory
from signflow.domain.entities.signer import Signer

__all__ = [
    "Document",
    "DocumentAggregate",
    "DocumentField",
    "DocumentHistory",
    "Signer",
]
