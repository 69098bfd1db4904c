"""Versioned extension attributes for documents."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DocumentExtensions(BaseModel):
    """Fixed set of optional extension keys, validated at the boundary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Literal[1] = 1
    completion_message: str | None = Field(default=None, max_length=2000)
    reminder_interval_days: int | None = Field(default=None, ge=1, le=365)
    locale: str | None = Field(default=None, pattern=r"^[a-z]{2}(-[A-Z]{2})?$")
    external_reference: str | None = Field(default=None, max_length=255)
