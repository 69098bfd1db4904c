"""Application ports - interfaces for external adapters."""

from signflow.application.ports.blob_storage import BlobStorage
from signflow.application.ports.notifier import Notifier
from signflow.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "BlobStorage",
    "Notifier",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
