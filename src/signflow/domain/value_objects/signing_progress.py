"""Signing progress summary."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SigningProgress:
    completed: int
    declined: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.completed - self.declined

    @property
    def resolved(self) -> bool:
        return self.total > 0 and self.remaining == 0

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "declined": self.declined,
            "total": self.total,
            "remaining": self.remaining,
        }
