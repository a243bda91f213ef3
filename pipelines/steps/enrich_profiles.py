from __future__ import annotations

import logging
from typing import Dict

from models import EnrichedProfile
from pipelines.runner import RunContext
from ports import EnrichmentPort
from services.linkedin_urls import normalize_profile_url
from services.mapping import to_enriched_profiles


logger = logging.getLogger(__name__)

# Raw fields that may carry the URL the scraper was asked for
_ECHO_FIELDS = ("inputUrl", "query", "linkedinUrl", "url", "profileUrl")


class EnrichProfiles:
    """Scrapes all new candidate URLs in one batch and pairs results back by URL.

    Enrichment failures propagate: the run aborts rather than creating
    contacts from partial data.
    """

    def __init__(self, enricher: EnrichmentPort) -> None:
        self.enricher = enricher

    def run(self, ctx: RunContext) -> RunContext:
        if not ctx.new:
            ctx.meta["enriched_profiles"] = 0
            return ctx

        items = self.enricher.enrich([c.url for c in ctx.new])
        wanted = {c.url for c in ctx.new}
        matched: Dict[str, EnrichedProfile] = {}
        unmatched = 0
        for profile in to_enriched_profiles(items):
            keys = [profile.normalized.profile_url] + [profile.raw.get(f) for f in _ECHO_FIELDS]
            url = None
            for key in keys:
                if not isinstance(key, str):
                    continue
                normalized = normalize_profile_url(key)
                if normalized in wanted and normalized not in matched:
                    url = normalized
                    break
            if url is None:
                unmatched += 1
                logger.warning(f"Enriched profile {profile.normalized.name or '?'} matches no candidate URL")
                continue
            matched[url] = profile

        ctx.profiles = matched
        ctx.meta["enriched_profiles"] = len(items)
        ctx.meta["unmatched_profiles"] = unmatched
        return ctx
