from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

from models import EnrichedProfile, ProfileCandidate, ReconcileOutcome, SourceRecord
from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    dry_run: bool = False
    admitted: Optional[int] = None
    records: List[SourceRecord] = field(default_factory=list)
    candidates: List[ProfileCandidate] = field(default_factory=list)
    existing: List[Tuple[ProfileCandidate, str]] = field(default_factory=list)
    new: List[ProfileCandidate] = field(default_factory=list)
    profiles: Dict[str, EnrichedProfile] = field(default_factory=dict)
    outcomes: List[ReconcileOutcome] = field(default_factory=list)
    advanced: List[str] = field(default_factory=list)
    # Set by a step to end the run early without error (e.g. nothing to do)
    stop_reason: Optional[str] = None
    meta: dict = field(default_factory=dict)

    def stop(self, reason: str) -> "RunContext":
        self.stop_reason = reason
        return self


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = step.run(ctx)
            if ctx.stop_reason:
                logger.info(
                    f"Run stopped after {type(step).__name__}: {ctx.stop_reason}",
                    extra={"step": type(step).__name__, "status": "stopped"},
                )
                break
        return ctx
