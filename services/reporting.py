from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Optional

from models import WeeklyQuota


def summarize_outcomes(outcomes: List[Any]) -> Dict[str, int]:
    counts = Counter(o.action for o in outcomes)
    return {
        "created": counts.get("created", 0),
        "updated": counts.get("updated", 0),
        "linked": counts.get("linked", 0),
        "skipped": counts.get("skipped", 0),
        "errors": counts.get("errored", 0),
    }


def print_summary(ctx: Any) -> None:
    """Print the end-of-run summary of a sync run."""
    meta = ctx.meta
    totals = summarize_outcomes(ctx.outcomes)
    skip_reasons = Counter(o.reason for o in ctx.outcomes if o.action == "skipped")

    print("\n" + "=" * 60)
    print("DEALMAKER SYNC - SUMMARY" + (" (DRY RUN)" if ctx.dry_run else ""))
    print("=" * 60)
    if ctx.stop_reason and ctx.stop_reason != "dry_run":
        print(f"Stopped early: {ctx.stop_reason}")
    print(f"Deals fetched: {len(ctx.records)}")
    print(f"Deals without profile URLs: {len(meta.get('records_without_urls') or [])}")
    print(f"Unique profile URLs: {len(ctx.candidates)}")
    print(f"  Existing contacts: {len(ctx.existing)}")
    print(f"  New profiles: {len(ctx.new)}")
    if meta.get("lookup_errors"):
        print(f"  Lookup errors (treated as new): {meta['lookup_errors']}")
    if not ctx.dry_run:
        print(f"Profiles returned by enrichment: {meta.get('enriched_profiles', 0)}")
        print()
        print("Contacts:")
        print(f"  Created: {totals['created']}")
        print(f"  Updated: {totals['updated']}")
        print(f"  Linked only (existing, not refreshed): {totals['linked']}")
        print(f"  Skipped: {totals['skipped']}")
        for reason, count in sorted(skip_reasons.items(), key=lambda kv: str(kv[0])):
            print(f"    {reason}: {count}")
        print(f"  Errors: {totals['errors']}")
        print(f"Deals moved to target stage: {len(ctx.advanced)}")
        if meta.get("advance_errors"):
            print(f"  Stage update errors: {meta['advance_errors']}")
        if "quota_total" in meta:
            print(f"Weekly counter: +{meta['quota_committed']} (total {meta['quota_total']})")
        if meta.get("quota_commit_error"):
            print(f"Weekly counter NOT saved: {meta['quota_commit_error']}")
    print(f"Classifier: {meta.get('classifier', '-')}")
    if "duration_seconds" in meta:
        print(f"Duration: {meta['duration_seconds']}s")
    print("=" * 60)


def print_dry_run_plan(ctx: Any) -> None:
    """List what a real run would touch, without any writes having happened."""
    print("\nPlanned actions (preview only, nothing was written):")
    for candidate, contact_id in ctx.existing:
        print(f"  LINK   {candidate.url} -> contact {contact_id} ({len(candidate.record_ids)} deals)")
    for candidate in ctx.new:
        names = ", ".join(candidate.record_names[:3])
        print(f"  ENRICH {candidate.url} (from: {names})")


def print_quota_status(quota: WeeklyQuota, weekly_limit: int, current_week: Optional[str] = None) -> None:
    processed = quota.deals_processed if (current_week is None or quota.current_week == current_week) else 0
    remaining = max(0, weekly_limit - processed)
    print("WEEKLY DEAL LIMIT")
    print("=" * 50)
    print(f"Current week: {current_week or quota.current_week}")
    if current_week and quota.current_week != current_week:
        print(f"Stored week: {quota.current_week} (resets on next run)")
    print(f"Deals processed: {processed}/{weekly_limit}")
    print(f"Deals remaining: {remaining}")
    print(f"Last update: {quota.last_update or 'never'}")
    if remaining <= 0:
        print("WEEKLY LIMIT REACHED")
    elif remaining < 10:
        print("Fewer than 10 deals left this week")
