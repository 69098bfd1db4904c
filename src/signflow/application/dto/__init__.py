"""Application DTOs."""

from signflow.application.dto.document_dto import (
    DocumentCreateInput,
    DocumentSnapshot,
    DocumentUpdateInput,
    HistoryOutput,
)
from signflow.application.dto.field_dto import FieldCreateInput
from signflow.application.dto.signer_dto import SignerInput
from signflow.application.dto.workflow_dto import (
    CompleteInput,
    FieldValueInput,
    ReasonInput,
    SendInput,
)

__all__ = [
    "CompleteInput",
    "DocumentCreateInput",
    "DocumentSnapshot",
    "DocumentUpdateInput",
    "FieldCreateInput",
    "FieldValueInput",
    "HistoryOutput",
    "ReasonInput",
    "SendInput",
    "SignerInput",
]
