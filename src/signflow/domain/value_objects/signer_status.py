"""Signer progress states."""

from enum import StrEnum


class SignerStatus(StrEnum):
    """Per-signer status. Only ever moves forward."""

    NOT_INVITED = "not_invited"
    INVITED = "invited"
    VIEWED = "viewed"
    COMPLETED = "completed"
    DECLINED = "declined"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @property
    def is_final(self) -> bool:
        return self in (SignerStatus.COMPLETED, SignerStatus.DECLINED)

    def can_advance_to(self, other: "SignerStatus") -> bool:
        if self.is_final:
            return False
        return other.rank > self.rank


_RANK = {
    SignerStatus.NOT_INVITED: 0,
    SignerStatus.INVITED: 1,
    SignerStatus.VIEWED: 2,
    SignerStatus.COMPLETED: 3,
    SignerStatus.DECLINED: 3,
}
