"""
The Roll-Forward Adjuster.

When someone logs more actual hours on a day than were planned, the surplus
is absorbed by shrinking that person's future planned cells on the same
initiative, earliest first. Nothing is borrowed from other initiatives and no
cell goes below zero; whatever cannot be absorbed is simply not reduced.
"""

import logging
from datetime import date as date_type, timedelta
from typing import List, Optional

from models import EPSILON, HOUR_QUANTUM, MAX_DAY_HOURS, AdjustmentRow
from .config import AllocatorSettings, MinDaysPolicy, is_step_multiple
from .errors import InvalidRange, NegativeInput
from .state import AllocationSnapshot

logger = logging.getLogger(__name__)


class RollForwardAdjuster:

    def __init__(self, snapshot: AllocationSnapshot, settings: Optional[AllocatorSettings] = None):
        self.snapshot = snapshot
        self.settings = settings or AllocatorSettings()

    def adjust(
        self,
        initiative_id: int,
        person_id: int,
        day: date_type,
        actual_hours: float,
        step: Optional[float] = None,
        min_days: Optional[int] = None,
    ) -> List[AdjustmentRow]:
        step = self.settings.step if step is None else step
        min_days = self.settings.min_days if min_days is None else min_days

        if actual_hours < 0:
            raise NegativeInput(f"Actual hours must not be negative: {actual_hours}")
        if actual_hours > MAX_DAY_HOURS:
            raise InvalidRange(f"Actual hours cannot exceed {MAX_DAY_HOURS}: {actual_hours}")
        if not is_step_multiple(actual_hours):
            raise InvalidRange(f"Actual hours must be a multiple of {HOUR_QUANTUM}: {actual_hours}")
        if step <= 0:
            raise NegativeInput(f"Step must be positive: {step}")
        if not is_step_multiple(step):
            raise InvalidRange(f"Step must be a multiple of {HOUR_QUANTUM}: {step}")
        if min_days < 0:
            raise NegativeInput(f"min_days must not be negative: {min_days}")

        initiative = self.snapshot.get_initiative(initiative_id)
        self.snapshot.get_person(person_id)
        if not initiative.contains(day):
            raise InvalidRange(f"{day} is outside {initiative.name} ({initiative.start_date} .. {initiative.end_date})")

        planned = self.snapshot.cell_hours(initiative.id, person_id, day)
        overrun = max(0.0, actual_hours - planned)
        if overrun <= EPSILON:
            logger.debug("No overrun for person %s on %s (planned %.1f, actual %.1f)", person_id, day, planned, actual_hours)
            return []

        # Future cells of this pair that still carry hours, in-window, ascending
        future = [
            c for c in self.snapshot.cells_for(initiative.id, person_id)
            if c.date > day and c.date <= initiative.end_date and c.hours > EPSILON
        ]
        future = self._protect_near_term(future, day, min_days)

        remaining = overrun
        rows = []
        for cell in future:
            if remaining <= EPSILON:
                break
            reduced = min(remaining, cell.hours)
            after = cell.hours - reduced
            self.snapshot.upsert_cell(initiative.id, person_id, cell.date, after)
            rows.append(AdjustmentRow(date=cell.date, before_hours=cell.hours, after_hours=after, reduced=reduced))
            remaining -= reduced

        absorbed = overrun - max(0.0, remaining)
        if remaining > EPSILON:
            logger.warning(
                "Overrun of %.1fh for person %s on %s only partly absorbed (%.1fh left)",
                overrun, person_id, day, remaining,
            )
        logger.info("Rolled forward %.1fh across %d future days for person %s", absorbed, len(rows), person_id)
        return rows

    def _protect_near_term(self, future, day: date_type, min_days: int):
        """Drop the cells inside the min_days protection window."""
        if min_days <= 0:
            return future
        if self.settings.min_days_policy is MinDaysPolicy.ALLOCATED:
            return future[min_days:]
        first_reducible = day + timedelta(days=min_days + 1)
        return [c for c in future if c.date >= first_reducible]
