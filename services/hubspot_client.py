"""
HubSpot CRM v3 REST integration: deal search and stage updates, contact
lookup/create/update, deal-contact associations and pipeline listing.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from config.settings import Settings, get_settings
from models import SourceRecord
from ports.crm import PartialFetchError


logger = logging.getLogger(__name__)

DEAL_PROPERTIES = ["dealname", "dealstage", "pipeline", "description"]
CONTACT_PROPERTIES = ["firstname", "lastname"]


class HubSpotError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class HubSpotClient:
    """Thin HubSpot client implementing the record-store and contact-store ports."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.hubapi.com",
        timeout: int = 30,
        page_delay_seconds: float = 3.0,
        page_size: int = 100,
        link_property: str = "link_original_de_la_noticia",
        profile_property: str = "linkedin_profile_link",
        association_type_id: int = 3,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token:
            raise ValueError("HubSpot token must be set")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_delay_seconds = page_delay_seconds
        self.page_size = page_size
        self.link_property = link_property
        self.profile_property = profile_property
        self.association_type_id = association_type_id
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        })
        self.api_calls_made = 0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> "HubSpotClient":
        settings = settings or get_settings()
        config = settings.pipeline_config()
        return cls(
            token=settings.hubspot_token or "",
            base_url=settings.hubspot_base_url,
            timeout=settings.request_timeout_seconds,
            page_delay_seconds=settings.page_delay_seconds,
            link_property=config.link_property,
            profile_property=config.profile_property,
            association_type_id=config.association_type_id,
            session=session,
        )

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise HubSpotError(f"{method} {path} failed: {e}") from e
        self.api_calls_made += 1

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            message = body.get("message") if isinstance(body, dict) else None
            raise HubSpotError(
                f"{method} {path} returned {response.status_code}: {message or body}",
                status_code=response.status_code,
                body=body,
            )
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    # --- Records (deals) ---

    def search_records(
        self,
        *,
        pipeline_id: str,
        stage_id: str,
        name_prefix: Optional[str],
        max_count: Optional[int] = None,
    ) -> List[SourceRecord]:
        """Page through deals in a pipeline stage whose name carries `name_prefix`."""
        filters = [
            {"propertyName": "dealstage", "operator": "EQ", "value": stage_id},
            {"propertyName": "pipeline", "operator": "EQ", "value": pipeline_id},
        ]
        if name_prefix:
            filters.append({"propertyName": "dealname", "operator": "CONTAINS_TOKEN", "value": name_prefix})

        if max_count is not None and max_count <= 0:
            return []
        records: List[SourceRecord] = []
        after: Optional[str] = None
        page = 0
        while True:
            body: Dict[str, Any] = {
                "limit": self.page_size,
                "properties": DEAL_PROPERTIES + [self.link_property],
                "filterGroups": [{"filters": filters}],
            }
            if after:
                body["after"] = after
            try:
                data = self._request("POST", "/crm/v3/objects/deals/search", body)
            except HubSpotError as e:
                if not records:
                    raise
                raise PartialFetchError(
                    f"Deal search failed after {len(records)} records: {e}", records, e
                ) from e

            page += 1
            results = data.get("results") or []
            records.extend(SourceRecord.from_crm(obj, self.link_property) for obj in results)
            logger.debug(f"Deal search page {page}: {len(results)} deals (total: {len(records)})")

            if max_count is not None and len(records) >= max_count:
                logger.info(f"Reached max of {max_count} deals, stopping pagination")
                return records[:max_count]

            after = ((data.get("paging") or {}).get("next") or {}).get("after")
            if not after:
                break
            if self.page_delay_seconds > 0:
                time.sleep(self.page_delay_seconds)

        logger.info(f"Deal search complete: {len(records)} deals in {page} pages")
        return records

    def update_record_stage(self, record_id: str, stage_id: str) -> None:
        self._request(
            "PATCH",
            f"/crm/v3/objects/deals/{record_id}",
            {"properties": {"dealstage": stage_id}},
        )

    # --- Contacts ---

    def find_contact_by_profile_url(self, profile_url: str) -> Optional[Dict[str, Any]]:
        if not profile_url:
            return None
        body = {
            "filterGroups": [
                {"filters": [{"propertyName": self.profile_property, "operator": "EQ", "value": profile_url}]}
            ],
            "properties": CONTACT_PROPERTIES + [self.profile_property],
            "limit": 1,
        }
        try:
            data = self._request("POST", "/crm/v3/objects/contacts/search", body)
        except HubSpotError as e:
            if e.status_code == 404:
                return None
            raise
        results = data.get("results") or []
        return results[0] if results else None

    def create_contact(self, properties: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/crm/v3/objects/contacts", {"properties": properties})

    def update_contact(self, contact_id: str, properties: Dict[str, Any]) -> None:
        self._request("PATCH", f"/crm/v3/objects/contacts/{contact_id}", {"properties": properties})

    def associate_contact(self, record_id: str, contact_id: str) -> None:
        self._request(
            "PUT",
            f"/crm/v3/objects/deals/{record_id}/associations/contacts/{contact_id}/{self.association_type_id}",
            {},
        )

    # --- Pipelines ---

    def list_pipelines(self, object_type: str = "deals") -> List[Dict[str, Any]]:
        data = self._request("GET", f"/crm/v3/pipelines/{object_type}")
        return data.get("results") or []
