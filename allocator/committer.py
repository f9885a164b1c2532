"""
The Allocation Committer.

Reconciles a plan against the persisted cells of its initiative under one of
two policies:
- fill-only (overwrite=False): only empty cells are written.
- overwrite (overwrite=True): differing cells are replaced, equal ones skipped.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Union

from models import EPSILON, HOUR_QUANTUM, ApplyAction, ApplyResultRow, PreviewRow
from .config import is_step_multiple
from .errors import InvalidRange, NegativeInput, PlanMismatch
from .state import AllocationSnapshot

logger = logging.getLogger(__name__)

PlanRow = Union[PreviewRow, Mapping[str, Any]]


class AllocationCommitter:

    def __init__(self, snapshot: AllocationSnapshot):
        self.snapshot = snapshot

    def apply(self, initiative_id: int, plan: Iterable[PlanRow], overwrite: bool = False) -> List[ApplyResultRow]:
        """
        Write the plan into the snapshot and return one audit row per plan row.
        Re-applying an unchanged plan only ever yields 'skipped'.
        """
        initiative = self.snapshot.get_initiative(initiative_id)
        rows = [self._coerce_row(row) for row in plan]

        # Validate everything before the first write
        for row in rows:
            if row.initiative_id != initiative.id:
                raise PlanMismatch(
                    f"Plan row for initiative {row.initiative_id} passed to apply on {initiative.id}"
                )
            if not initiative.contains(row.date):
                raise InvalidRange(f"{row.date} is outside {initiative.name} ({initiative.start_date} .. {initiative.end_date})")
            if not is_step_multiple(row.hours):
                raise InvalidRange(f"Plan row hours must be a multiple of {HOUR_QUANTUM}: {row.hours}")
            self.snapshot.get_person(row.person_id)

        results = []
        for row in rows:
            previous = self.snapshot.cell_hours(initiative.id, row.person_id, row.date)
            action = self._decide(previous, row.hours, overwrite)

            if action is not ApplyAction.SKIPPED:
                self.snapshot.upsert_cell(initiative.id, row.person_id, row.date, row.hours)
            logger.debug("%s person=%s %s: %.1f -> %.1f", action.value, row.person_id, row.date, previous, row.hours)

            results.append(ApplyResultRow(
                initiative_id=initiative.id,
                person_id=row.person_id,
                date=row.date,
                hours=row.hours,
                previous_hours=previous,
                action=action,
            ))

        summary = summarize(results)
        logger.info(
            "Applied %d rows to %s (overwrite=%s): inserted %d, updated %d, skipped %d",
            len(results), initiative.name, overwrite,
            summary["inserted"], summary["updated"], summary["skipped"],
        )
        return results

    @staticmethod
    def _decide(previous: float, proposed: float, overwrite: bool) -> ApplyAction:
        if previous <= EPSILON:
            return ApplyAction.INSERTED
        if not overwrite:
            return ApplyAction.SKIPPED
        if abs(previous - proposed) <= EPSILON:
            return ApplyAction.SKIPPED
        return ApplyAction.UPDATED

    @staticmethod
    def _coerce_row(row: PlanRow) -> PreviewRow:
        """Accept rows from a previously returned (possibly serialised) preview."""
        if isinstance(row, PreviewRow):
            return row
        hours = row.get("hours")
        if hours is not None and float(hours) < 0:
            raise NegativeInput(f"Plan row has negative hours: {hours}")
        return PreviewRow.model_validate(row)


def summarize(results: Iterable[ApplyResultRow]) -> Dict[str, int]:
    """Count of each action, keyed by its string value."""
    counts = {action.value: 0 for action in ApplyAction}
    for r in results:
        counts[r.action.value] += 1
    return counts
