from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from models import AdmissionResult, WeeklyQuota


logger = logging.getLogger(__name__)


def week_id_for(day: date) -> str:
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


class WeeklyRateTracker:
    """Weekly processed-record counter persisted to a single JSON file.

    The file is read whole and written whole; concurrent runs are not
    supported. Reads fail open to an empty quota for the current week.
    """

    def __init__(
        self,
        path: str | Path,
        weekly_limit: int,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.path = Path(path)
        self.weekly_limit = weekly_limit
        self._now = now or (lambda: datetime.now(timezone.utc))

    def current_week_id(self) -> str:
        return week_id_for(self._now().date())

    def _fresh(self) -> WeeklyQuota:
        return WeeklyQuota(
            current_week=self.current_week_id(),
            deals_processed=0,
            last_update=self._now().isoformat(),
        )

    def load(self) -> WeeklyQuota:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return WeeklyQuota.model_validate(data)
        except FileNotFoundError:
            return self._fresh()
        except (OSError, ValueError) as e:
            logger.warning("Unreadable quota file %s, starting from zero: %s", self.path, e)
            return self._fresh()

    def _current(self) -> WeeklyQuota:
        quota = self.load()
        week = self.current_week_id()
        if quota.current_week != week:
            logger.info(
                "New week detected: %s (previous: %s), resetting count %d -> 0",
                week,
                quota.current_week,
                quota.deals_processed,
            )
            return WeeklyQuota(current_week=week, deals_processed=0, last_update=quota.last_update)
        return quota

    def save(self, quota: WeeklyQuota) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = quota.model_dump(by_alias=True)
        self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    def remaining(self) -> int:
        return max(0, self.weekly_limit - self._current().deals_processed)

    def admit(self, requested: int) -> AdmissionResult:
        """Decide how many of `requested` records may still be processed this week."""
        remaining = self.remaining()
        if remaining <= 0:
            logger.warning(
                "Weekly limit reached: %d/%d", self.weekly_limit - remaining, self.weekly_limit
            )
            return AdmissionResult(kind="denied", admitted=0, remaining=0)
        if requested <= remaining:
            return AdmissionResult(kind="full", admitted=requested, remaining=remaining)
        logger.warning("Only %d more records can be processed this week", remaining)
        return AdmissionResult(kind="partial", admitted=remaining, remaining=remaining)

    def commit(self, processed: int) -> WeeklyQuota:
        if processed < 0:
            raise ValueError("processed count cannot be negative")
        quota = self._current()
        quota.deals_processed += processed
        quota.last_update = self._now().isoformat()
        self.save(quota)
        logger.info("Weekly counter updated: %d/%d", quota.deals_processed, self.weekly_limit)
        return quota

    def reset(self) -> WeeklyQuota:
        quota = self._fresh()
        self.save(quota)
        return quota

    def set_count(self, count: int) -> WeeklyQuota:
        if count < 0:
            raise ValueError("count cannot be negative")
        quota = self._current()
        quota.deals_processed = count
        quota.last_update = self._now().isoformat()
        self.save(quota)
        return quota
