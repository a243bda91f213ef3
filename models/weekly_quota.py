from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


AdmissionKind = Literal["denied", "full", "partial"]


class WeeklyQuota(BaseModel):
    """Persisted weekly counter: {currentWeek, dealsProcessed, lastUpdate}."""

    current_week: str = Field(alias="currentWeek")
    deals_processed: int = Field(default=0, ge=0, alias="dealsProcessed")
    last_update: str | None = Field(default=None, alias="lastUpdate")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


@dataclass(frozen=True)
class AdmissionResult:
    kind: AdmissionKind
    admitted: int = 0
    remaining: int = 0

    @property
    def denied(self) -> bool:
        return self.kind == "denied"
