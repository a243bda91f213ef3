from __future__ import annotations

from typing import Optional

from pipelines.runner import RunContext
from services.url_extractor import ProfileUrlExtractor


class ExtractCandidates:
    def __init__(self, extractor: Optional[ProfileUrlExtractor] = None) -> None:
        self.extractor = extractor or ProfileUrlExtractor()

    def run(self, ctx: RunContext) -> RunContext:
        ctx.candidates = self.extractor.extract(ctx.records)
        referenced = {rid for c in ctx.candidates for rid in c.record_ids}
        ctx.meta["records_without_urls"] = [r.id for r in ctx.records if r.id not in referenced]
        if not ctx.candidates:
            return ctx.stop("no_candidates")
        return ctx
