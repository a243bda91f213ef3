from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


ReconcileAction = Literal["skipped", "linked", "updated", "created", "errored"]
ProfileType = Literal["person", "company", "unknown"]


class ReconcileOutcome(BaseModel):
    url: str
    action: ReconcileAction
    contact_id: Optional[str] = None
    associated_record_ids: List[str] = Field(default_factory=list)
    failed_record_ids: List[str] = Field(default_factory=list)
    reason: Optional[str] = None
    profile_type: Optional[ProfileType] = None

    model_config = ConfigDict(extra="forbid")
