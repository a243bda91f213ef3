from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from apify_client import ApifyClient

from config.settings import Settings, get_settings


logger = logging.getLogger(__name__)


class EnrichmentError(RuntimeError):
    """The scraping batch failed as a whole; no partial results are available."""


class ApifyProfileEnricher:
    """Scrapes LinkedIn profiles with a single Apify actor run per batch."""

    def __init__(
        self,
        token: str,
        actor_id: str,
        scraper_mode: str,
        client: Optional[Any] = None,
    ) -> None:
        if not token and client is None:
            raise ValueError("Apify token must be set")
        self.actor_id = actor_id
        self.scraper_mode = scraper_mode
        self.client = client or ApifyClient(token)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ApifyProfileEnricher":
        settings = settings or get_settings()
        return cls(
            token=settings.apify_token or "",
            actor_id=settings.apify_profile_actor_id,
            scraper_mode=settings.apify_scraper_mode,
        )

    @staticmethod
    def _status(run: Any) -> Optional[str]:
        if isinstance(run, dict):
            status = run.get("status")
        else:
            status = getattr(run, "status", None)
        return getattr(status, "value", status)

    @staticmethod
    def _dataset_id(run: Any) -> Optional[str]:
        if isinstance(run, dict):
            return run.get("defaultDatasetId")
        return getattr(run, "default_dataset_id", None)

    def enrich(self, urls: Sequence[str]) -> List[Dict[str, Any]]:
        if not urls:
            return []
        run_input = {
            "profileScraperMode": self.scraper_mode,
            "queries": list(urls),
        }
        logger.info(f"Submitting {len(urls)} profiles to Apify actor {self.actor_id}")
        t0 = time.time()
        try:
            run = self.client.actor(self.actor_id).call(run_input=run_input)
            if run is None:
                raise EnrichmentError(f"Apify actor {self.actor_id} returned no run")
            status = self._status(run)
            if status != "SUCCEEDED":
                raise EnrichmentError(f"Apify run for actor {self.actor_id} ended with status {status}")
            dataset_id = self._dataset_id(run)
            if not dataset_id:
                raise EnrichmentError(f"Apify run for actor {self.actor_id} has no dataset")
            items = list(self.client.dataset(dataset_id).iterate_items())
        except EnrichmentError:
            raise
        except Exception as e:
            raise EnrichmentError(f"Apify enrichment failed: {e}") from e
        duration_ms = int((time.time() - t0) * 1000)
        logger.info(
            f"Apify returned {len(items)} profiles",
            extra={"step": "enrich_profiles", "status": "ok", "duration_ms": duration_ms},
        )
        return items
