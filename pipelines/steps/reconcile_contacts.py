from __future__ import annotations

import time

from pipelines.runner import RunContext
from services.reconciler import ContactReconciler


class ReconcileContacts:
    def __init__(self, reconciler: ContactReconciler, write_delay_seconds: float = 0.5) -> None:
        self.reconciler = reconciler
        self.write_delay_seconds = write_delay_seconds

    def _pause(self) -> None:
        if self.write_delay_seconds > 0:
            time.sleep(self.write_delay_seconds)

    def run(self, ctx: RunContext) -> RunContext:
        for candidate, contact_id in ctx.existing:
            outcome = self.reconciler.reconcile(candidate, ctx.profiles.get(candidate.url), contact_id)
            ctx.outcomes.append(outcome)
            self._pause()
        for candidate in ctx.new:
            outcome = self.reconciler.reconcile(candidate, ctx.profiles.get(candidate.url))
            ctx.outcomes.append(outcome)
            if outcome.action != "skipped":
                self._pause()
        return ctx
