"""Declarative validation rules attached to document fields.

Rules are stored as JSON objects and may also be parsed from the compact
text notation used by older templates::

    required
    email
    range:1,100          numeric range (date range on date fields)
    range:today,none     date bounds, ``today`` and ``none`` are keywords
    length:2,40
    min_length:3
    max_length:10
    pattern:/^[A-Z]{2}\\d+$/i

A rule whose kind is not recognized is kept as-is so that validation can
fail closed on it.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from signflow.domain.value_objects.field_validation_error import Severity


class RuleKind(StrEnum):
    """Rule kinds understood by the validation engine."""

    REQUIRED = "required"
    EMAIL = "email"
    RANGE = "range"
    PATTERN = "pattern"
    LENGTH = "length"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"


@dataclass(frozen=True)
class ValidationRule:
    """One constraint a field value must satisfy."""

    kind: str
    minimum: str | None = None
    maximum: str | None = None
    pattern: str | None = None
    message: str | None = None
    severity: Severity = Severity.ERROR

    @property
    def known(self) -> bool:
        return self.kind in _KNOWN_KINDS

    @classmethod
    def parse(cls, text: str) -> "ValidationRule":
        """Parse the compact ``kind:args`` notation."""
        kind, _, args = text.strip().partition(":")
        kind = kind.strip().lower()
        if kind == RuleKind.PATTERN:
            return cls(kind=kind, pattern=args)
        if kind in (RuleKind.RANGE, RuleKind.LENGTH):
            low, _, high = args.partition(",")
            return cls(kind=kind, minimum=low.strip() or None, maximum=high.strip() or None)
        if kind == RuleKind.MIN_LENGTH:
            return cls(kind=kind, minimum=args.strip() or None)
        if kind == RuleKind.MAX_LENGTH:
            return cls(kind=kind, maximum=args.strip() or None)
        return cls(kind=kind)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationRule":
        def _opt(key: str) -> str | None:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            kind=str(data["kind"]).lower(),
            minimum=_opt("minimum"),
            maximum=_opt("maximum"),
            pattern=_opt("pattern"),
            message=_opt("message"),
            severity=Severity(data.get("severity", Severity.ERROR)),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "severity": self.severity.value}
        for key in ("minimum", "maximum", "pattern", "message"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


_KNOWN_KINDS = frozenset(kind.value for kind in RuleKind)
