"""Wire models for control-plane responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MinuteWindow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    used: int = 0
    limit: int = 0
    remaining: int = 0
    resets_in: int = 0


class DayWindow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    used: int = 0
    limit: int = 0
    remaining: int = 0
    date: str = ""


class RateLimitStatus(BaseModel):
    """``GET /me/limits`` response: per-key usage for the minute and day windows."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    key_id: str
    name: str | None = None
    status: str | None = None
    minute: MinuteWindow = Field(default_factory=MinuteWindow)
    day: DayWindow = Field(default_factory=DayWindow)

    @property
    def message(self) -> str:
        """Human-readable remaining-quota summary."""
        if self.minute.remaining > 0:
            return f"OK: {self.minute.remaining} requests remaining this minute"
        return f"Warning: Rate limit reached. Resets in {self.minute.resets_in}s"

    def to_output(self) -> dict[str, object]:
        return {
            "key_id": self.key_id,
            "name": self.name,
            "status": self.status,
            "minute": {
                "used": self.minute.used,
                "limit": self.minute.limit,
                "remaining": self.minute.remaining,
                "resets_in_seconds": self.minute.resets_in,
            },
            "day": {
                "used": self.day.used,
                "limit": self.day.limit,
                "remaining": self.day.remaining,
                "date": self.day.date,
            },
            "message": self.message,
        }
