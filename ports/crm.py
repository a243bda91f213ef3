from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from models import SourceRecord


class PartialFetchError(RuntimeError):
    """A later search page failed; `records` holds everything fetched before it."""

    def __init__(self, message: str, records: List[SourceRecord], cause: Exception) -> None:
        super().__init__(message)
        self.records = records
        self.cause = cause
        self.status_code = getattr(cause, "status_code", None)


class RecordStorePort(Protocol):
    def search_records(
        self,
        *,
        pipeline_id: str,
        stage_id: str,
        name_prefix: Optional[str],
        max_count: Optional[int] = None,
    ) -> List[SourceRecord]:
        """Records in a stage, in CRM order. Raises PartialFetchError when paging breaks midway."""
        ...

    def update_record_stage(self, record_id: str, stage_id: str) -> None:
        ...


class ContactStorePort(Protocol):
    def find_contact_by_profile_url(self, profile_url: str) -> Optional[Dict[str, Any]]:
        ...

    def create_contact(self, properties: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update_contact(self, contact_id: str, properties: Dict[str, Any]) -> None:
        ...

    def associate_contact(self, record_id: str, contact_id: str) -> None:
        ...
