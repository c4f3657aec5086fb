"""Pydantic models shared across logic/application layers."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict


class UsageDecision(BaseModel):
    """Outcome of asking whether one more message may be sent today."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    remaining: float


class UsageSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: date
    count: int
    limit: float
    remaining: float

    @property
    def is_over_limit(self) -> bool:
        return self.count >= self.limit


DENIED = UsageDecision(allowed=False, remaining=0)

__all__ = ["DENIED", "UsageDecision", "UsageSnapshot"]
