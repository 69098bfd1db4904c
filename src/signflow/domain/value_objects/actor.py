"""Caller identity passed explicitly into every workflow operation."""

from dataclasses import dataclass
from enum import StrEnum


class ActorRole(StrEnum):
    AUTHOR = "author"
    SIGNER = "signer"
    SYSTEM = "system"


@dataclass(frozen=True)
class Actor:
    """Pre-validated principal acting on a document.

    ``subject`` is the author's user id, or for signers either the account
    id or the signer id the signing link was issued for.
    """

    subject: str
    role: ActorRole
    email: str | None = None
    access_code: str | None = None

    @classmethod
    def system(cls) -> "Actor":
        return cls(subject="system", role=ActorRole.SYSTEM)
