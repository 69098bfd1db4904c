"""Repository ports."""

from signflow.application.ports.repositories.document_repository import (
    DocumentRepository,
)
from signflow.application.ports.repositories.history_repository import (
    HistoryRepository,
)

__all__ = [
    "DocumentRepository",
    "HistoryRepository",
]
