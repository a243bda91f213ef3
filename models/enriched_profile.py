from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class NormalizedProfile(BaseModel):
    """Canonical profile shape; every field is a (possibly empty) string."""

    name: str = ""
    first_name: str = ""
    last_name: str = ""
    position: str = ""
    company: str = ""
    location: str = ""
    profile_url: str = ""
    about: str = ""

    model_config = ConfigDict(extra="forbid")

    def summary_text(self) -> str:
        return " ".join(p for p in (self.name, self.position, self.company) if p).strip()


class EnrichedProfile(BaseModel):
    raw: Dict[str, Any] = Field(default_factory=dict)
    normalized: NormalizedProfile = Field(default_factory=NormalizedProfile)

    model_config = ConfigDict(extra="forbid")

    @property
    def experience_count(self) -> int:
        value = self.raw.get("experience") or self.raw.get("experiences") or []
        return len(value) if isinstance(value, list) else 0

    @property
    def education_count(self) -> int:
        value = self.raw.get("education") or self.raw.get("educations") or []
        return len(value) if isinstance(value, list) else 0
