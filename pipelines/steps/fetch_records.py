from __future__ import annotations

import logging

from config.settings import PipelineConfig
from pipelines.runner import RunContext
from ports import PartialFetchError, RecordStorePort


logger = logging.getLogger(__name__)


class FetchRecords:
    def __init__(self, records: RecordStorePort, config: PipelineConfig) -> None:
        self.records = records
        self.config = config

    def run(self, ctx: RunContext) -> RunContext:
        try:
            ctx.records = self.records.search_records(
                pipeline_id=self.config.pipeline_id,
                stage_id=self.config.source_stage_id,
                name_prefix=self.config.name_prefix,
                max_count=ctx.admitted,
            )
        except PartialFetchError as e:
            # The run aborts; fetched records stay visible to the caller
            ctx.records = list(e.records)
            ctx.meta["partial_fetch"] = True
            raise
        logger.info(
            f"Fetched {len(ctx.records)} records from stage {self.config.source_stage_id}",
            extra={"step": "fetch_records", "status": "ok"},
        )
        if not ctx.records:
            return ctx.stop("no_records")
        return ctx
