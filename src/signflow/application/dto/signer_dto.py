"""Signer DTOs."""

from pydantic import BaseModel, ConfigDict, Field


class SignerInput(BaseModel):
    """Input for adding a signer to a document."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$", max_length=320)
    name: str | None = Field(default=None, max_length=255)
    role: str | None = Field(default=None, max_length=100)
    order: int | None = Field(default=None, ge=1)
    access_code: str | None = Field(default=None, min_length=4, max_length=64)
    color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
