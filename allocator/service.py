"""
Allocation Service.

The entry point the surrounding CRUD/UI code calls into. Each operation works
against the snapshot the service was built with; writes land in that snapshot
and the returned audit rows tell the caller what to persist.
"""

import logging
from datetime import date as date_type
from typing import Iterable, List, Mapping, Optional, Union

from models import AdjustmentRow, ApplyResultRow, PreviewRow, RoleDemand
from .calendar import BlockStatus, EligibilityCalendar
from .capacity import (
    AvailabilityRow,
    CapacityLedger,
    RoleCapacityRow,
    UtilizationRow,
    availability_grid,
    role_capacity_vs_demand,
    weekly_utilization,
)
from .committer import AllocationCommitter, PlanRow
from .config import AllocatorSettings
from .engine import AllocationPlanner
from .rollforward import RollForwardAdjuster
from .state import AllocationPlan, AllocationSnapshot, CoverageRow

logger = logging.getLogger(__name__)


class AllocationService:

    def __init__(self, snapshot: AllocationSnapshot, settings: Optional[AllocatorSettings] = None):
        self.snapshot = snapshot
        self.settings = settings or AllocatorSettings()

    # --- Core Operations ---

    def plan(self, initiative_id: int, person_ids: Optional[Iterable[int]] = None) -> AllocationPlan:
        return AllocationPlanner(self.snapshot, self.settings).plan(initiative_id, person_ids)

    def preview(self, initiative_id: int, person_ids: Optional[Iterable[int]] = None) -> List[PreviewRow]:
        """Read-only. Never touches the snapshot."""
        return self.plan(initiative_id, person_ids).rows

    def apply(
        self,
        initiative_id: int,
        person_ids: Optional[Iterable[int]] = None,
        overwrite: bool = False,
        plan: Optional[Iterable[PlanRow]] = None,
    ) -> List[ApplyResultRow]:
        """
        Commit a previously returned preview, or re-derive the plan when none
        is given. Re-deriving is safe: the planner ignores this initiative's
        own cells, so applying twice plans the same rows both times.
        """
        if plan is None:
            plan = self.preview(initiative_id, person_ids)
        return AllocationCommitter(self.snapshot).apply(initiative_id, plan, overwrite=overwrite)

    def adjust(
        self,
        initiative_id: int,
        person_id: int,
        day: date_type,
        actual_hours: float,
        step: Optional[float] = None,
        min_days: Optional[int] = None,
    ) -> List[AdjustmentRow]:
        return RollForwardAdjuster(self.snapshot, self.settings).adjust(
            initiative_id, person_id, day, actual_hours, step=step, min_days=min_days,
        )

    # --- Reports ---

    def coverage(self, initiative_id: int, person_ids: Optional[Iterable[int]] = None) -> List[CoverageRow]:
        """Planned vs previewed hours per role."""
        plan = self.plan(initiative_id, person_ids)
        return plan.coverage(self.snapshot.demand_for(initiative_id))

    def is_blocked(self, person_id: int, day: date_type) -> BlockStatus:
        return EligibilityCalendar(self.snapshot.unavailability).is_blocked(person_id, day)

    def availability(self, person_ids: Iterable[int], start: date_type, end: date_type) -> List[AvailabilityRow]:
        person_ids = list(person_ids)
        for person_id in person_ids:
            self.snapshot.get_person(person_id)
        return availability_grid(
            self._ledger(), EligibilityCalendar(self.snapshot.unavailability), person_ids, start, end,
        )

    def utilization(self, week_start: date_type) -> List[UtilizationRow]:
        return weekly_utilization(self._ledger(), week_start)

    def role_capacity(self, start: date_type, end: date_type) -> List[RoleCapacityRow]:
        """Per-role weekly capacity vs demand of initiatives inside [start, end]."""
        demand = [row for rows in self.snapshot.role_demand.values() for row in rows.values()]
        return role_capacity_vs_demand(
            self.snapshot.people.values(), self.snapshot.initiatives.values(), demand,
            start, end, self.settings.role_priority,
        )

    # --- Team & Demand Maintenance ---

    def set_team(self, initiative_id: int, person_ids: Iterable[int]) -> None:
        self.snapshot.replace_team(initiative_id, person_ids)
        logger.info("Team for initiative %s replaced (%d members)", initiative_id, len(self.snapshot.team_for(initiative_id)))

    def set_role_demand(self, initiative_id: int, demand: Union[Mapping[str, float], Iterable[RoleDemand]]) -> None:
        if isinstance(demand, Mapping):
            demand = [
                RoleDemand(initiative_id=initiative_id, role=role, planned_hours=hours)
                for role, hours in demand.items()
            ]
        self.snapshot.upsert_role_demand(initiative_id, demand)

    def _ledger(self) -> CapacityLedger:
        return CapacityLedger(self.snapshot.people, self.snapshot.cells.values(), self.settings.default_daily_capacity)
