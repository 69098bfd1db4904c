"""Field DTOs."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from signflow.domain.value_objects import ConditionalLogic, FieldType, ValidationRule

_STYLE_KEYS = (
    "placeholder",
    "color",
    "font_family",
    "font_size",
    "background_color",
    "border_color",
    "text_color",
)


class FieldCreateInput(BaseModel):
    """Input for placing a field on a document."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    type: FieldType
    label: str = Field(min_length=1, max_length=255)
    page_number: int = Field(ge=1)
    x: float = Field(ge=0)
    y: float = Field(ge=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    required: bool = False
    signer_id: UUID | None = None
    value: str | None = None
    placeholder: str | None = None
    color: str | None = None
    font_family: str | None = None
    font_size: float | None = Field(default=None, gt=0)
    background_color: str | None = None
    border_color: str | None = None
    text_color: str | None = None
    validation_rule: ValidationRule | None = None
    conditional_logic: ConditionalLogic | None = None
    options: list[str] | None = None

    @field_validator("validation_rule", mode="before")
    @classmethod
    def _parse_rule(cls, value: Any) -> ValidationRule | None:
        if value is None or isinstance(value, ValidationRule):
            rule = value
        elif isinstance(value, str):
            rule = ValidationRule.parse(value) if value.strip() else None
        elif isinstance(value, dict):
            if "kind" not in value:
                raise ValueError("validation_rule requires a kind")
            rule = ValidationRule.from_dict(value)
        else:
            raise ValueError("validation_rule must be a string or an object")
        if rule is not None and not rule.known:
            raise ValueError(f"unknown validation rule kind: {rule.kind}")
        return rule

    @field_validator("conditional_logic", mode="before")
    @classmethod
    def _parse_logic(cls, value: Any) -> ConditionalLogic | None:
        if value is None or isinstance(value, ConditionalLogic):
            return value
        if isinstance(value, dict):
            return ConditionalLogic.from_dict(value)
        raise ValueError("conditional_logic must be an object")

    def style(self) -> dict[str, Any]:
        return {key: getattr(self, key) for key in _STYLE_KEYS if getattr(self, key) is not None}
