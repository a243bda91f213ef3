from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class SourceRecord(BaseModel):
    """CRM deal as seen by the workflow; only `stage` is ever written back."""

    id: str
    name: str = ""
    description: str = ""
    external_link: str | None = None
    stage: str | None = None
    pipeline: str | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def display_name(self) -> str:
        return self.name or f"Deal {self.id}"

    @classmethod
    def from_crm(cls, obj: Dict[str, Any], link_property: str = "link_original_de_la_noticia") -> "SourceRecord":
        props = obj.get("properties") or {}
        description = props.get("description") or ""
        # Some portals return property payloads as {"value": ...}
        if isinstance(description, dict):
            description = description.get("value") or ""
        return cls(
            id=str(obj.get("id")),
            name=props.get("dealname") or "",
            description=str(description),
            external_link=props.get(link_property) or None,
            stage=props.get("dealstage"),
            pipeline=props.get("pipeline"),
        )
