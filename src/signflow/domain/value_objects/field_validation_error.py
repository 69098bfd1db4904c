"""Structured field validation outcome."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class Severity(StrEnum):
    """Errors block turn completion; warnings do not."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class FieldValidationError:
    """Why a single field is not acceptable."""

    field_id: UUID
    message: str
    code: str
    severity: Severity = Severity.ERROR

    @property
    def blocking(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict:
        return {
            "field_id": str(self.field_id),
            "message": self.message,
            "code": self.code,
            "severity": self.severity.value,
        }
