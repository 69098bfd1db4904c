"""Document field types."""

from enum import StrEnum


class FieldType(StrEnum):
    """Kinds of fillable regions placed on a document."""

    SIGNATURE = "signature"
    INITIALS = "initials"
    TEXT = "text"
    TEXTAREA = "textarea"
    DATE = "date"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    RADIO = "radio"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"

    @property
    def has_options(self) -> bool:
        return self in (FieldType.DROPDOWN, FieldType.RADIO)

    @property
    def is_image(self) -> bool:
        return self in (FieldType.SIGNATURE, FieldType.INITIALS)
