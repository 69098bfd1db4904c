"""Field validation engine.

Pure functions: given a field and the current values of every field on the
document, decide whether the field is active and whether its value is
acceptable. Nothing here reads a clock unless ``today`` is omitted.
"""

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from uuid import UUID

from signflow.domain.entities import DocumentField
from signflow.domain.value_objects import (
    Combinator,
    CompoundCondition,
    Condition,
    ConditionOperator,
    FieldType,
    FieldValidationError,
    RuleKind,
    Severity,
    ValidationRule,
)

Values = Mapping[UUID, str | None]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[\d\s\-+()]{7,20}$")
_CHECKBOX_VALUES = frozenset({"true", "false", "checked", "unchecked"})
_REGEX_LITERAL = re.compile(r"^/(.+)/([a-z]*)$", re.DOTALL)
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


def is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def evaluate_condition(condition: Condition | CompoundCondition, values: Values) -> bool:
    """Evaluate a (possibly compound) condition against field values."""
    if isinstance(condition, CompoundCondition):
        results = (evaluate_condition(c, values) for c in condition.conditions)
        if condition.combinator is Combinator.AND:
            return all(results)
        return any(results)

    current = values.get(condition.field_id)
    match condition.operator:
        case ConditionOperator.PRESENT:
            return not is_blank(current)
        case ConditionOperator.ABSENT:
            return is_blank(current)
        case ConditionOperator.UNCHECKED:
            return is_blank(current) or current.strip().lower() not in ("true", "checked")
    if is_blank(current):
        return False

    expected = condition.value or ""
    match condition.operator:
        case ConditionOperator.EQUALS:
            return current == expected
        case ConditionOperator.NOT_EQUALS:
            return current != expected
        case ConditionOperator.CONTAINS:
            return expected in current
        case ConditionOperator.NOT_CONTAINS:
            return expected not in current
        case ConditionOperator.STARTS_WITH:
            return current.startswith(expected)
        case ConditionOperator.ENDS_WITH:
            return current.endswith(expected)
        case ConditionOperator.CHECKED:
            return current.strip().lower() in ("true", "checked")
        case ConditionOperator.MATCHES:
            regex = _compile_pattern(expected)
            return regex is not None and regex.search(current) is not None
        case (
            ConditionOperator.GREATER_THAN
            | ConditionOperator.GREATER_THAN_OR_EQUAL
            | ConditionOperator.LESS_THAN
            | ConditionOperator.LESS_THAN_OR_EQUAL
        ):
            return _compare_numbers(condition.operator, current, expected)
    return False


def is_field_active(field: DocumentField, values: Values) -> bool:
    """A field without conditional logic is always active."""
    if field.conditional_logic is None:
        return True
    return evaluate_condition(field.conditional_logic.condition, values)


def validate_field(
    field: DocumentField,
    values: Values,
    *,
    enforce_required: bool = True,
    today: date | None = None,
) -> FieldValidationError | None:
    """Validate one field. Returns None when valid or inactive."""
    if not is_field_active(field, values):
        return None

    value = values.get(field.id, field.value)
    label = field.label or "Field"
    rule = field.validation_rule
    if rule is not None and not rule.known:
        return _error(field, f'"{label}" has an unsupported validation rule', "unknown_rule")

    if is_blank(value):
        rule_requires = rule is not None and rule.kind == RuleKind.REQUIRED
        if not enforce_required or not (field.required or rule_requires):
            return None
        # A required flag on the field always blocks; a lone rule keeps its own severity.
        severity = Severity.ERROR if field.required else rule.severity
        message = rule.message if rule_requires and rule.message else f'"{label}" is required'
        return _error(field, message, "required", severity)

    error = _check_type(field, value, label)
    if error is not None:
        return error
    if rule is not None:
        return _check_rule(field, rule, value, label, today or date.today())
    return None


def validate_fields(
    fields: Iterable[DocumentField],
    values: Values,
    *,
    today: date | None = None,
) -> list[FieldValidationError]:
    """Validate every active field; returns all errors and warnings found."""
    today = today or date.today()
    found = []
    for field in fields:
        error = validate_field(field, values, today=today)
        if error is not None:
            found.append(error)
    return found


def normalize_value(field: DocumentField, value: str | None) -> str | None:
    """Canonical stored form: checkboxes become true/false, dates ISO."""
    if value is None:
        return None
    if field.type is FieldType.CHECKBOX and value.strip():
        return "true" if value.strip().lower() in ("true", "checked") else "false"
    if field.type is FieldType.DATE and value.strip():
        parsed = parse_date(value)
        return parsed.isoformat() if parsed else value
    return value


def parse_date(value: str) -> date | None:
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _error(field: DocumentField, message: str, code: str, severity: Severity = Severity.ERROR):
    return FieldValidationError(field_id=field.id, message=message, code=code, severity=severity)


def _check_type(field: DocumentField, value: str, label: str) -> FieldValidationError | None:
    match field.type:
        case FieldType.EMAIL:
            if not _EMAIL_RE.match(value):
                return _error(field, f'"{label}" must be a valid email address', "format")
        case FieldType.PHONE:
            if not _PHONE_RE.match(value):
                return _error(field, f'"{label}" must be a valid phone number', "format")
        case FieldType.NUMBER:
            if _to_number(value) is None:
                return _error(field, f'"{label}" must be a valid number', "format")
        case FieldType.DATE:
            if parse_date(value) is None:
                return _error(field, f'"{label}" must be a valid date', "format")
        case FieldType.CHECKBOX:
            if value.strip().lower() not in _CHECKBOX_VALUES:
                return _error(field, f'"{label}" must be checked or unchecked', "format")
        case FieldType.DROPDOWN | FieldType.RADIO:
            if field.options and value not in field.options:
                return _error(field, f'"{label}" must be one of the offered options', "option")
        case FieldType.SIGNATURE | FieldType.INITIALS:
            if not value.startswith("data:image"):
                return _error(field, f'"{label}" must be a captured image', "format")
    return None


def _check_rule(
    field: DocumentField,
    rule: ValidationRule,
    value: str,
    label: str,
    today: date,
) -> FieldValidationError | None:
    def fail(default_message: str, code: str) -> FieldValidationError:
        return _error(field, rule.message or default_message, code, rule.severity)

    match rule.kind:
        case RuleKind.REQUIRED:
            return None
        case RuleKind.EMAIL:
            if not _EMAIL_RE.match(value):
                return fail(f'"{label}" must be a valid email address', "format")
        case RuleKind.RANGE if field.type is FieldType.DATE:
            return _check_date_range(field, rule, value, label, today)
        case RuleKind.RANGE:
            number = _to_number(value)
            if number is None:
                return fail(f'"{label}" must be a valid number', "format")
            low, high = _to_number(rule.minimum), _to_number(rule.maximum)
            if (rule.minimum is not None and low is None) or (
                rule.maximum is not None and high is None
            ):
                return _error(field, f'"{label}" has a malformed range rule', "invalid_rule")
            if (low is not None and number < low) or (high is not None and number > high):
                return fail(f'"{label}" must be between {rule.minimum} and {rule.maximum}', "range")
        case RuleKind.PATTERN:
            regex = _compile_pattern(rule.pattern)
            if regex is None:
                return _error(field, f'"{label}" has a malformed pattern rule', "invalid_rule")
            if not regex.search(value):
                return fail(f'"{label}" does not match the required format', "pattern")
        case RuleKind.LENGTH | RuleKind.MIN_LENGTH | RuleKind.MAX_LENGTH:
            low, high = _to_int(rule.minimum), _to_int(rule.maximum)
            if (rule.minimum is not None and low is None) or (
                rule.maximum is not None and high is None
            ):
                return _error(field, f'"{label}" has a malformed length rule', "invalid_rule")
            if low is not None and len(value) < low:
                return fail(f'"{label}" must be at least {low} characters', "length")
            if high is not None and len(value) > high:
                return fail(f'"{label}" cannot exceed {high} characters', "length")
    return None


def _check_date_range(
    field: DocumentField,
    rule: ValidationRule,
    value: str,
    label: str,
    today: date,
) -> FieldValidationError | None:
    actual = parse_date(value)
    if actual is None:
        return _error(field, f'"{label}" must be a valid date', "format")
    bounds = []
    for raw in (rule.minimum, rule.maximum):
        if raw is None or raw == "none":
            bounds.append(None)
        elif raw == "today":
            bounds.append(today)
        else:
            parsed = parse_date(raw)
            if parsed is None:
                return _error(field, f'"{label}" has a malformed date range rule', "invalid_rule")
            bounds.append(parsed)
    low, high = bounds
    if low is not None and actual < low:
        return _error(
            field, rule.message or f'"{label}" must be on or after {low.isoformat()}', "range", rule.severity
        )
    if high is not None and actual > high:
        return _error(
            field, rule.message or f'"{label}" must be on or before {high.isoformat()}', "range", rule.severity
        )
    return None


def _compile_pattern(pattern: str | None) -> re.Pattern[str] | None:
    if not pattern:
        return None
    body, flags = pattern, 0
    literal = _REGEX_LITERAL.match(pattern)
    if literal:
        body = literal.group(1)
        for flag in literal.group(2):
            flags |= _REGEX_FLAGS.get(flag, 0)
    try:
        return re.compile(body, flags)
    except re.error:
        return None


def _to_number(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _compare_numbers(operator: ConditionOperator, current: str, expected: str) -> bool:
    left, right = _to_number(current), _to_number(expected)
    if left is None or right is None:
        return False
    match operator:
        case ConditionOperator.GREATER_THAN:
            return left > right
        case ConditionOperator.GREATER_THAN_OR_EQUAL:
            return left >= right
        case ConditionOperator.LESS_THAN:
            return left < right
        case ConditionOperator.LESS_THAN_OR_EQUAL:
            return left <= right
    return False


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
