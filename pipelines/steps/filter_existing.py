from __future__ import annotations

from pipelines.runner import RunContext
from services.contact_filter import ExistingContactFilter


class FilterExisting:
    def __init__(self, contact_filter: ExistingContactFilter) -> None:
        self.contact_filter = contact_filter

    def run(self, ctx: RunContext) -> RunContext:
        partition = self.contact_filter.partition(ctx.candidates)
        ctx.existing = partition.existing
        ctx.new = partition.new
        ctx.meta["lookup_errors"] = partition.lookup_errors
        if ctx.dry_run:
            return ctx.stop("dry_run")
        return ctx
