import argparse
import logging
import os
import sys
import time
import uuid as _uuid
from typing import List, Optional

from config.settings import ConfigurationError, Settings, get_settings
from pipelines.sync_dealmakers import SyncOptions, build_default_dependencies, run_sync
from ports import PartialFetchError
from services.enrichment_client import EnrichmentError
from services.hubspot_client import HubSpotClient, HubSpotError
from services.rate_tracker import WeeklyRateTracker
from services.reporting import print_dry_run_plan, print_quota_status, print_summary
from utils.logging_setup import init_logging


logger = logging.getLogger("cli")


def _tracker(args, settings: Settings) -> WeeklyRateTracker:
    path = getattr(args, "tracking_file", None) or settings.weekly_tracking_file
    return WeeklyRateTracker(path, settings.max_deals_per_week)


def _hubspot(settings: Settings) -> HubSpotClient:
    return HubSpotClient.from_settings(settings)


def cmd_run(args, settings: Settings) -> int:
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex
    settings.require_credentials(enrichment=not args.dry_run)
    config = settings.pipeline_config()
    if args.max_records is not None and args.max_records <= 0:
        raise ConfigurationError("--max-records must be greater than 0")

    deps = build_default_dependencies(settings, dry_run=args.dry_run)
    deps.tracker = _tracker(args, settings)
    options = SyncOptions(
        max_records=args.max_records,
        dry_run=args.dry_run,
        lookup_delay_seconds=settings.lookup_delay_seconds,
        write_delay_seconds=settings.write_delay_seconds,
    )
    try:
        ctx = run_sync(config, deps, options)
    except PartialFetchError as e:
        logger.error(
            f"Run aborted after fetching {len(e.records)} deals: {e}",
            extra={"step": "fetch_records", "status": "aborted", "error": str(e)},
        )
        print(f"Run aborted: deal search failed after {len(e.records)} deals were fetched; nothing was written. ({e})")
        return 1
    except (EnrichmentError, HubSpotError) as e:
        logger.error(f"Run aborted: {e}", extra={"status": "aborted", "error": str(e)})
        print(f"Run aborted: {e}")
        return 1

    print_summary(ctx)
    if ctx.dry_run:
        print_dry_run_plan(ctx)
    if ctx.meta.get("quota_commit_error"):
        return 1
    return 0


def cmd_quota(args, settings: Settings) -> int:
    tracker = _tracker(args, settings)
    if args.action == "reset":
        quota = tracker.reset()
        print(f"Weekly counter reset to 0 for {quota.current_week}")
        return 0
    if args.action == "set":
        if args.count is None or args.count < 0:
            print("Usage: quota set <non-negative count>")
            return 1
        quota = tracker.set_count(args.count)
        print(f"Weekly counter set to {quota.deals_processed} for {quota.current_week}")
        return 0
    print_quota_status(tracker.load(), tracker.weekly_limit, tracker.current_week_id())
    return 0


def cmd_move_records(args, settings: Settings) -> int:
    settings.require_credentials(enrichment=False)
    config = settings.pipeline_config()
    if args.from_stage == args.to_stage:
        raise ConfigurationError("--from-stage and --to-stage must differ")
    hubspot = _hubspot(settings)
    records = hubspot.search_records(
        pipeline_id=args.pipeline or config.pipeline_id,
        stage_id=args.from_stage,
        name_prefix=args.name_prefix,
        max_count=args.limit,
    )
    print(f"Found {len(records)} deals in stage {args.from_stage}")
    for record in records:
        print(f"  {record.id}  {record.display_name}")
    if not records:
        return 0
    if not args.confirm:
        print(f"\nPreview only. Re-run with --confirm to move {len(records)} deals to stage {args.to_stage}.")
        return 0

    moved = 0
    errors = 0
    for idx, record in enumerate(records):
        if idx and settings.write_delay_seconds > 0:
            time.sleep(settings.write_delay_seconds)
        try:
            hubspot.update_record_stage(record.id, args.to_stage)
            moved += 1
        except HubSpotError as e:
            errors += 1
            logger.error(f"Failed to move deal {record.id}: {e}", extra={"record_id": record.id, "error": str(e)})
    print(f"Moved {moved} deals to stage {args.to_stage} ({errors} errors)")
    return 1 if errors else 0


def cmd_list_pipelines(args, settings: Settings) -> int:
    settings.require_credentials(enrichment=False)
    hubspot = _hubspot(settings)
    pipelines = hubspot.list_pipelines(args.object_type)
    if not pipelines:
        print(f"No pipelines for {args.object_type}")
        return 0
    for i, pipeline in enumerate(pipelines, start=1):
        print(f"{i}. {pipeline.get('label')} (ID: {pipeline.get('id')})")
        for j, stage in enumerate(pipeline.get("stages") or [], start=1):
            print(f"     {j}. {stage.get('label')} (ID: {stage.get('id')})")
    return 0


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync LinkedIn dealmakers from CRM deals into contacts")
    parser.add_argument("--tracking-file", default=None, help=f"Weekly quota JSON file (default: {settings.weekly_tracking_file})")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Extract, enrich and reconcile dealmakers from source-stage deals")
    p_run.add_argument("--max-records", "-m", type=int, default=None, help="Max deals to pull this run (default: remaining weekly quota)")
    p_run.add_argument("--dry-run", action="store_true", help="Read-only preview: no enrichment, CRM writes or quota update")
    p_run.set_defaults(func=cmd_run)

    p_quota = sub.add_parser("quota", help="Show or manage the weekly deal counter")
    p_quota.add_argument("action", nargs="?", choices=["show", "reset", "set"], default="show")
    p_quota.add_argument("count", nargs="?", type=int, default=None, help="New count for 'set'")
    p_quota.set_defaults(func=cmd_quota)

    p_move = sub.add_parser("move-records", help="Move deals between stages (preview unless --confirm)")
    p_move.add_argument("--from-stage", required=True)
    p_move.add_argument("--to-stage", required=True)
    p_move.add_argument("--pipeline", default=None, help="Pipeline id (default from settings)")
    p_move.add_argument("--name-prefix", default=None, help="Only deals whose name contains this token")
    p_move.add_argument("--limit", type=int, default=None)
    p_move.add_argument("--confirm", action="store_true", help="Actually move the deals")
    p_move.set_defaults(func=cmd_move_records)

    p_pipes = sub.add_parser("list-pipelines", help="List CRM pipelines and their stages")
    p_pipes.add_argument("--object-type", default="deals", choices=["deals", "contacts", "companies", "tickets"])
    p_pipes.set_defaults(func=cmd_list_pipelines)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 1
    init_logging(settings.log_level)
    args = build_parser(settings).parse_args(argv)
    try:
        return args.func(args, settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}", extra={"status": "config_error", "error": str(e)})
        print(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Fatal error: {e}", extra={"status": "fatal", "error": str(e)})
        return 1


if __name__ == "__main__":
    sys.exit(main())
