"""Document lifecycle states."""

from enum import StrEnum


class DocumentStatus(StrEnum):
    """Lifecycle status of a document."""

    PENDING = "pending"
    SENT = "sent"
    VIEWED = "viewed"
    SIGNED = "signed"
    DECLINED = "declined"
    EXPIRED = "expired"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def accepts_signing(self) -> bool:
        """Signers may write fields and complete turns."""
        return self in (DocumentStatus.SENT, DocumentStatus.VIEWED)


_TERMINAL = frozenset(
    {
        DocumentStatus.SIGNED,
        DocumentStatus.DECLINED,
        DocumentStatus.EXPIRED,
        DocumentStatus.CANCELED,
    }
)
