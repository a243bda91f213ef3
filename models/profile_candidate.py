from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ProfileCandidate(BaseModel):
    """A normalized profile URL and every record that mentioned it, in first-seen order."""

    url: str
    record_ids: List[str] = Field(default_factory=list)
    record_names: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def add_source(self, record_id: str, record_name: str) -> None:
        if record_id in self.record_ids:
            return
        self.record_ids.append(record_id)
        self.record_names.append(record_name)
