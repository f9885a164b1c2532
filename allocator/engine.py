"""
The Allocation Planner.

This module turns an initiative's role demand into a day-by-day hour plan.
It combines three strategies:
1. Fixed Role Priority (PM first, TESTER last) - one deterministic total order.
2. Round-Robin Passes (step hours per person-day per pass) - spreads work
   evenly across the calendar instead of front-loading the first days.
3. Soft Capacity Overflow - when headroom runs out everywhere, keep planning
   past capacity and flag every overbooked day rather than drop demand.
"""

import logging
from datetime import date as date_type
from typing import Dict, Iterable, List, Optional, Tuple

from models import EPSILON, MAX_DAY_HOURS, Initiative, Person, PreviewRow, RoleCode, floor_to_step
from .calendar import EligibilityCalendar
from .capacity import CapacityLedger
from .config import AllocatorSettings
from .state import (
    GAP_BELOW_STEP,
    GAP_EXHAUSTED,
    GAP_NO_ELIGIBLE_PEOPLE,
    GAP_UNKNOWN_ROLE,
    AllocationPlan,
    AllocationSnapshot,
    DemandGap,
)

logger = logging.getLogger(__name__)


def person_sort_key(person: Person) -> Tuple[str, int]:
    return (person.full_name.casefold(), person.id)


class AllocationPlanner:
    """
    Main planning engine.
    Ingests Demand (RoleDemand) and Supply (team, calendar, capacity), outputs a plan.
    A pure function of the snapshot: the same snapshot always yields the same rows.
    """

    def __init__(self, snapshot: AllocationSnapshot, settings: Optional[AllocatorSettings] = None):
        self.snapshot = snapshot
        self.settings = settings or AllocatorSettings()
        self.calendar = EligibilityCalendar(snapshot.unavailability)

    def preview(self, initiative_id: int, eligible_people: Optional[Iterable[int]] = None) -> List[PreviewRow]:
        return self.plan(initiative_id, eligible_people).rows

    def plan(self, initiative_id: int, eligible_people: Optional[Iterable[int]] = None) -> AllocationPlan:
        """
        Build a full plan for one initiative.
        Independent of any other initiative's pending runs.
        """
        initiative = self.snapshot.get_initiative(initiative_id)
        logger.info("Planning initiative %s (%s .. %s)", initiative.name, initiative.start_date, initiative.end_date)

        plan = AllocationPlan(initiative, self.settings.role_priority)
        ledger = CapacityLedger(
            self.snapshot.people,
            self.snapshot.cells.values(),
            self.settings.default_daily_capacity,
        )

        # 1. Resolve and partition the pool
        pool = self._resolve_pool(initiative, eligible_people)
        by_role = self._partition_by_role(initiative, pool)
        dates = self.calendar.candidate_dates(initiative)

        # 2. Collect demand we know how to match
        demand: Dict[RoleCode, float] = {}
        for row in self.snapshot.demand_for(initiative.id):
            if row.planned_hours <= 0:
                continue
            code = row.role_code
            if code is None or code not in self.settings.role_priority:
                self._record_gap(plan, DemandGap(
                    role=row.role,
                    planned_hours=row.planned_hours,
                    allocated_hours=0.0,
                    reason=GAP_UNKNOWN_ROLE,
                    detail=f"Role '{row.role}' is not in the role enumeration",
                ))
                continue
            demand[code] = row.planned_hours

        # 3. Main Loop: one role at a time, in priority order
        for role in self.settings.role_priority:
            planned = demand.get(role)
            if not planned:
                continue
            self._allocate_role(plan, ledger, initiative, role, planned, by_role.get(role, []), dates)

        stats = plan.get_statistics()
        logger.info(
            "Plan for %s: %d rows, %.1fh, %d gaps, %d overbooked days",
            initiative.name, stats["total_rows"], stats["total_hours"], stats["gaps"], stats["overbooked_days"],
        )
        return plan

    def _resolve_pool(self, initiative: Initiative, eligible_people: Optional[Iterable[int]]) -> List[Person]:
        """Explicit selection if non-empty, else the initiative's team. Inactive people drop out."""
        ids = list(dict.fromkeys(eligible_people or ()))
        if not ids:
            ids = [m.person_id for m in self.snapshot.team_for(initiative.id)]

        pool = []
        for person_id in ids:
            person = self.snapshot.get_person(person_id)
            if not person.active:
                logger.debug("Skipping inactive person %s", person.full_name)
                continue
            pool.append(person)
        return pool

    def _partition_by_role(self, initiative: Initiative, pool: List[Person]) -> Dict[RoleCode, List[Person]]:
        by_role: Dict[RoleCode, List[Person]] = {}
        for person in pool:
            role = self.snapshot.effective_role(initiative.id, person.id)
            if role is None:
                logger.debug("Person %s has unmapped role '%s'; excluded", person.full_name, person.role_code)
                continue
            by_role.setdefault(role, []).append(person)

        for people in by_role.values():
            people.sort(key=person_sort_key)
        return by_role

    def _allocate_role(
        self,
        plan: AllocationPlan,
        ledger: CapacityLedger,
        initiative: Initiative,
        role: RoleCode,
        planned: float,
        people: List[Person],
        dates: List[date_type],
    ) -> None:
        # Never plan more than asked; the sub-step remainder is reported as a gap
        target = floor_to_step(planned, self.settings.step)

        if not people:
            self._record_gap(plan, DemandGap(
                role.value, planned, 0.0, GAP_NO_ELIGIBLE_PEOPLE,
                f"No eligible {role.value} in the pool",
            ))
            return

        # Candidate grid: dates ascending, people in name order, blocked pairs dropped
        grid = [
            (day, person)
            for day in dates
            for person in people
            if not self.calendar.is_blocked(person.id, day).blocked
        ]
        if not grid:
            self._record_gap(plan, DemandGap(
                role.value, planned, 0.0, GAP_EXHAUSTED,
                f"Every candidate date is blocked for all {role.value} people",
            ))
            return

        remaining = self._fill(plan, ledger, initiative, role, grid, target, respect_capacity=True)

        if remaining > EPSILON and self.settings.allow_overbooking:
            logger.warning(
                "%s on %s: %.1fh left after headroom ran out, planning past capacity",
                role.value, initiative.name, remaining,
            )
            remaining = self._fill(plan, ledger, initiative, role, grid, remaining, respect_capacity=False)

        if remaining > EPSILON:
            self._record_gap(plan, DemandGap(
                role.value, planned, target - remaining, GAP_EXHAUSTED,
                f"Calendar and capacity exhausted with {remaining:.1f}h unplanned",
            ))
        elif target < planned - EPSILON:
            self._record_gap(plan, DemandGap(
                role.value, planned, target, GAP_BELOW_STEP,
                f"{planned - target:.2f}h is below the {self.settings.step}h planning step",
            ))

    def _fill(
        self,
        plan: AllocationPlan,
        ledger: CapacityLedger,
        initiative: Initiative,
        role: RoleCode,
        grid: List[Tuple[date_type, Person]],
        target: float,
        respect_capacity: bool,
    ) -> float:
        """
        Hand out 'step' hours per person-day per pass until the target is met
        or a full pass places nothing. Returns the hours still unplanned.
        """
        step = self.settings.step
        remaining = target

        while remaining > EPSILON:
            progressed = False
            for day, person in grid:
                if remaining <= EPSILON:
                    break

                amount = min(step, remaining)
                if respect_capacity:
                    room = ledger.headroom(person.id, day, exclude_initiative=initiative.id)
                else:
                    # Overflow never uses people with no capacity at all
                    if ledger.capacity(person.id) <= 0:
                        continue
                    room = MAX_DAY_HOURS - ledger.load(person.id, day, exclude_initiative=initiative.id)

                if room + EPSILON < amount:
                    continue

                ledger.reserve(person.id, day, amount)
                plan.add_hours(person, role, day, amount)
                remaining -= amount
                progressed = True

                if not respect_capacity:
                    load = ledger.load(person.id, day, exclude_initiative=initiative.id)
                    capacity = ledger.capacity(person.id)
                    if load > capacity + EPSILON:
                        plan.record_overbooking(person.id, day, load, capacity)

            if not progressed:
                break

        return max(0.0, remaining)

    def _record_gap(self, plan: AllocationPlan, gap: DemandGap) -> None:
        logger.warning(
            "Unmet demand on %s: %s %.1fh of %.1fh (%s)",
            plan.initiative.name, gap.role, gap.shortfall, gap.planned_hours, gap.reason,
        )
        plan.record_gap(gap)
