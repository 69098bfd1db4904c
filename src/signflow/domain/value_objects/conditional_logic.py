"""Conditional visibility logic for document fields.

A field with conditional logic is *active* only while its condition holds.
Conditions reference other fields of the same document by id::

    {"condition": {"type": "equals", "field_id": "...", "value": "yes"}}
    {"condition": {"operator": "and", "conditions": [...]}}

The camelCase operator names of older documents (``notEquals``,
``greaterThan``, ``isChecked``) are accepted as aliases.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from uuid import UUID


class ConditionOperator(StrEnum):
    """Comparison applied to the referenced field's value."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    PRESENT = "present"
    ABSENT = "absent"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    MATCHES = "matches"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    CHECKED = "checked"
    UNCHECKED = "unchecked"

    @property
    def needs_value(self) -> bool:
        return self not in _VALUELESS_OPERATORS


class Combinator(StrEnum):
    AND = "and"
    OR = "or"


_OPERATOR_ALIASES = {
    "notEquals": ConditionOperator.NOT_EQUALS,
    "isNotEmpty": ConditionOperator.PRESENT,
    "isEmpty": ConditionOperator.ABSENT,
    "notContains": ConditionOperator.NOT_CONTAINS,
    "startsWith": ConditionOperator.STARTS_WITH,
    "endsWith": ConditionOperator.ENDS_WITH,
    "matchesRegex": ConditionOperator.MATCHES,
    "greaterThan": ConditionOperator.GREATER_THAN,
    "greaterThanOrEqual": ConditionOperator.GREATER_THAN_OR_EQUAL,
    "lessThan": ConditionOperator.LESS_THAN,
    "lessThanOrEqual": ConditionOperator.LESS_THAN_OR_EQUAL,
    "isChecked": ConditionOperator.CHECKED,
    "isNotChecked": ConditionOperator.UNCHECKED,
}

_VALUELESS_OPERATORS = frozenset(
    {
        ConditionOperator.PRESENT,
        ConditionOperator.ABSENT,
        ConditionOperator.CHECKED,
        ConditionOperator.UNCHECKED,
    }
)


@dataclass(frozen=True)
class Condition:
    """Simple condition on one other field."""

    field_id: UUID
    operator: ConditionOperator
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.operator.value, "field_id": str(self.field_id)}
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class CompoundCondition:
    """All (``and``) or any (``or``) of nested conditions."""

    combinator: Combinator
    conditions: tuple[Condition | CompoundCondition, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "operator": self.combinator.value,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass(frozen=True)
class ConditionalLogic:
    """Predicate deciding whether a field is currently active."""

    condition: Condition | CompoundCondition

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConditionalLogic:
        """Build from the stored JSON shape. Raises ValueError when malformed."""
        if "condition" not in data:
            raise ValueError("conditional logic requires a condition")
        return cls(condition=_parse_condition(data["condition"]))

    def to_dict(self) -> dict[str, Any]:
        return {"condition": self.condition.to_dict()}

    def referenced_fields(self) -> set[UUID]:
        found: set[UUID] = set()
        stack: list[Condition | CompoundCondition] = [self.condition]
        while stack:
            node = stack.pop()
            if isinstance(node, CompoundCondition):
                stack.extend(node.conditions)
            else:
                found.add(node.field_id)
        return found


def _parse_condition(data: Any) -> Condition | CompoundCondition:
    if not isinstance(data, dict):
        raise ValueError("condition must be an object")
    if "conditions" in data:
        try:
            combinator = Combinator(str(data.get("operator", "and")).lower())
        except ValueError:
            raise ValueError(f"unknown combinator: {data.get('operator')}") from None
        nested = data["conditions"]
        if not isinstance(nested, list) or not nested:
            raise ValueError("compound condition requires a non-empty list of conditions")
        return CompoundCondition(
            combinator=combinator,
            conditions=tuple(_parse_condition(c) for c in nested),
        )

    raw_operator = data.get("type") or data.get("operator")
    operator = _OPERATOR_ALIASES.get(raw_operator)
    if operator is None:
        try:
            operator = ConditionOperator(raw_operator)
        except ValueError:
            raise ValueError(f"unknown condition operator: {raw_operator}") from None
    try:
        field_id = UUID(str(data.get("field_id") or data.get("fieldId")))
    except ValueError:
        raise ValueError("condition requires a valid field_id") from None
    value = data.get("value")
    if operator.needs_value and value is None:
        raise ValueError(f"{operator} condition requires a value")
    return Condition(
        field_id=field_id,
        operator=operator,
        value=None if value is None else str(value),
    )
