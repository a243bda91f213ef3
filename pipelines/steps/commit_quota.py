from __future__ import annotations

import logging

from pipelines.runner import RunContext
from services.rate_tracker import WeeklyRateTracker


logger = logging.getLogger(__name__)


class CommitQuota:
    """Counts records that reached the terminal stage against the weekly quota."""

    def __init__(self, tracker: WeeklyRateTracker) -> None:
        self.tracker = tracker

    def run(self, ctx: RunContext) -> RunContext:
        processed = len(ctx.advanced)
        try:
            quota = self.tracker.commit(processed)
        except OSError as e:
            # CRM state is already written; report the failure instead of losing the run summary
            ctx.meta["quota_commit_error"] = str(e)
            logger.error(
                f"Could not persist weekly counter to {self.tracker.path}",
                extra={"step": "commit_quota", "status": "error", "error": str(e)},
            )
            return ctx
        ctx.meta["quota_committed"] = processed
        ctx.meta["quota_total"] = quota.deals_processed
        return ctx
