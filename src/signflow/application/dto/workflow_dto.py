"""Workflow action DTOs."""

from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class SendInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    expires_at: AwareDatetime | None = None


class FieldValueInput(BaseModel):
    """Write one field value. ``signer_id`` is omitted for author prefill."""

    model_config = ConfigDict(extra="forbid")

    value: str | None = None
    signer_id: UUID | None = None


class CompleteInput(BaseModel):
    """Finish a signer's turn, optionally writing values in the same step."""

    model_config = ConfigDict(extra="forbid")

    values: dict[UUID, str | None] = Field(default_factory=dict)


class ReasonInput(BaseModel):
    """Body for decline and cancel."""

    model_config = ConfigDict(extra="forbid")

    reason: str | None = Field(default=None, max_length=1000)
