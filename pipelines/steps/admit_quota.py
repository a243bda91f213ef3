from __future__ import annotations

from typing import Optional

from pipelines.runner import RunContext
from services.rate_tracker import WeeklyRateTracker


class AdmitQuota:
    """Caps how many records this run may pull; stops the run when the week is used up."""

    def __init__(self, tracker: WeeklyRateTracker, requested: Optional[int] = None) -> None:
        self.tracker = tracker
        self.requested = requested

    def run(self, ctx: RunContext) -> RunContext:
        requested = self.requested if self.requested is not None else self.tracker.weekly_limit
        admission = self.tracker.admit(requested)
        ctx.meta["admission"] = admission.kind
        ctx.meta["quota_remaining"] = admission.remaining
        if admission.denied:
            return ctx.stop("weekly_limit_reached")
        ctx.admitted = admission.admitted
        return ctx
