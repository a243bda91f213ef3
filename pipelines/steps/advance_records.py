from __future__ import annotations

import logging
import time
from typing import List, Set

from pipelines.runner import RunContext
from ports import RecordStorePort


logger = logging.getLogger(__name__)


def records_ready_to_advance(ctx: RunContext) -> List[str]:
    """Records linked to at least one contact with no failed or errored link attempt.

    Skipped candidates (company pages, nameless profiles) do not hold a record
    back; an errored candidate or failed association does, so the record is
    retried on the next run.
    """
    blocked: Set[str] = set()
    associated: Set[str] = set()
    by_url = {c.url: c for c in ctx.candidates}
    for outcome in ctx.outcomes:
        associated.update(outcome.associated_record_ids)
        blocked.update(outcome.failed_record_ids)
        if outcome.action == "errored" and outcome.url in by_url:
            blocked.update(by_url[outcome.url].record_ids)
    return [r.id for r in ctx.records if r.id in associated and r.id not in blocked]


class AdvanceRecords:
    def __init__(self, records: RecordStorePort, target_stage_id: str, write_delay_seconds: float = 0.5) -> None:
        self.records = records
        self.target_stage_id = target_stage_id
        self.write_delay_seconds = write_delay_seconds

    def run(self, ctx: RunContext) -> RunContext:
        ready = records_ready_to_advance(ctx)
        errors = 0
        for idx, record_id in enumerate(ready):
            if idx and self.write_delay_seconds > 0:
                time.sleep(self.write_delay_seconds)
            try:
                self.records.update_record_stage(record_id, self.target_stage_id)
                ctx.advanced.append(record_id)
            except Exception as e:
                errors += 1
                logger.error(
                    f"Failed to move deal {record_id} to stage {self.target_stage_id}",
                    extra={"step": "advance_records", "status": "error", "record_id": record_id, "error": str(e)},
                )
        ctx.meta["advance_errors"] = errors
        logger.info(
            f"Moved {len(ctx.advanced)}/{len(ready)} deals to stage {self.target_stage_id}",
            extra={"step": "advance_records", "status": "ok"},
        )
        return ctx
