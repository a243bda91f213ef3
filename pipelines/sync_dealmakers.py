from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from config.settings import PipelineConfig, Settings, get_settings
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import (
    AdmitQuota,
    AdvanceRecords,
    CommitQuota,
    EnrichProfiles,
    ExtractCandidates,
    FetchRecords,
    FilterExisting,
    ReconcileContacts,
)
from ports import ContactStorePort, EnrichmentPort, ProfileClassifierPort, RecordStorePort
from services.contact_filter import ExistingContactFilter
from services.rate_tracker import WeeklyRateTracker
from services.reconciler import ContactReconciler


logger = logging.getLogger(__name__)


@dataclass
class SyncDependencies:
    records: RecordStorePort
    contacts: ContactStorePort
    enricher: Optional[EnrichmentPort]
    classifier: ProfileClassifierPort
    tracker: WeeklyRateTracker


@dataclass(frozen=True)
class SyncOptions:
    max_records: Optional[int] = None
    dry_run: bool = False
    lookup_delay_seconds: float = 0.1
    write_delay_seconds: float = 0.5


def build_default_dependencies(settings: Optional[Settings] = None, *, dry_run: bool = False) -> SyncDependencies:
    """Wire the production HubSpot/Apify/OpenAI collaborators from settings."""
    from services.enrichment_client import ApifyProfileEnricher
    from services.hubspot_client import HubSpotClient
    from services.profile_classifier import build_classifier

    settings = settings or get_settings()
    hubspot = HubSpotClient.from_settings(settings)
    return SyncDependencies(
        records=hubspot,
        contacts=hubspot,
        enricher=None if dry_run else ApifyProfileEnricher.from_settings(settings),
        classifier=build_classifier(settings),
        tracker=WeeklyRateTracker(settings.weekly_tracking_file, settings.max_deals_per_week),
    )


def build_sync_pipeline(config: PipelineConfig, deps: SyncDependencies, options: SyncOptions) -> Pipeline:
    steps = [
        AdmitQuota(deps.tracker, options.max_records),
        FetchRecords(deps.records, config),
        ExtractCandidates(),
        FilterExisting(ExistingContactFilter(deps.contacts, options.lookup_delay_seconds)),
    ]
    if options.dry_run:
        return Pipeline(steps)
    if deps.enricher is None:
        raise ValueError("An enrichment client is required unless dry_run is set")
    reconciler = ContactReconciler(deps.contacts, deps.classifier, config.profile_property)
    steps += [
        EnrichProfiles(deps.enricher),
        ReconcileContacts(reconciler, options.write_delay_seconds),
        AdvanceRecords(deps.records, config.target_stage_id, options.write_delay_seconds),
        CommitQuota(deps.tracker),
    ]
    return Pipeline(steps)


def run_sync(config: PipelineConfig, deps: SyncDependencies, options: Optional[SyncOptions] = None) -> RunContext:
    """Run the full dealmaker reconciliation once and return the final context."""
    options = options or SyncOptions()
    config.validate()
    ctx = RunContext(dry_run=options.dry_run)
    ctx.meta["classifier"] = getattr(deps.classifier, "name", type(deps.classifier).__name__)
    logger.info(
        f"Starting sync: pipeline={config.pipeline_id} source={config.source_stage_id} "
        f"target={config.target_stage_id} weekly_limit={deps.tracker.weekly_limit}"
    )
    t0 = time.time()
    try:
        return build_sync_pipeline(config, deps, options).run(ctx)
    finally:
        ctx.meta["duration_seconds"] = round(time.time() - t0, 1)
