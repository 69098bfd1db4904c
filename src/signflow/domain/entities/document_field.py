"""Document field entity."""

from dataclasses import dataclass
from uuid import UUID

from signflow.domain.value_objects import ConditionalLogic, FieldType, ValidationRule


@dataclass
class DocumentField:
    """A placed, typed region on a document page capturing one value."""

    id: UUID
    document_id: UUID
    type: FieldType
    label: str
    page_number: int
    x: float
    y: float
    width: float
    height: float
    required: bool = False
    value: str | None = None
    signer_id: UUID | None = None
    placeholder: str | None = None
    color: str | None = None
    font_family: str | None = None
    font_size: float | None = None
    background_color: str | None = None
    border_color: str | None = None
    text_color: str | None = None
    validation_rule: ValidationRule | None = None
    conditional_logic: ConditionalLogic | None = None
    options: list[str] | None = None
