"""
Allocator State.

This module acts as the 'Memory' of the system. It holds:
1. AllocationSnapshot - the caller-supplied records, indexed for keyed lookups.
   Writes made by the committer and adjuster land here; the caller persists them.
2. AllocationPlan - the planner's output plus its gap and overbooking reports.
"""

from datetime import date as date_type
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from collections import defaultdict
from dataclasses import dataclass
from pydantic import ValidationError

from models import (
    DailyAllocationCell,
    Initiative,
    Person,
    PreviewRow,
    RoleCode,
    RoleDemand,
    TeamMembership,
    UnavailabilityWindow,
    normalize_role_code,
)
from .errors import InvalidRange, UnknownEntity

CellKey = Tuple[int, int, date_type]


def demand_key(role: str) -> str:
    """Uniqueness key of a role demand row within its initiative."""
    code = normalize_role_code(role)
    return code.value if code else (role or "").strip().upper()


class AllocationSnapshot:
    """
    Consistent view of the records relevant to one call.
    Never queries anything; every lookup is against already-fetched data.
    """

    def __init__(
        self,
        people: Iterable[Person] = (),
        initiatives: Iterable[Initiative] = (),
        role_demand: Iterable[RoleDemand] = (),
        team: Iterable[TeamMembership] = (),
        cells: Iterable[DailyAllocationCell] = (),
        unavailability: Iterable[UnavailabilityWindow] = (),
    ):
        self.people: Dict[int, Person] = {p.id: p for p in people}
        self.initiatives: Dict[int, Initiative] = {i.id: i for i in initiatives}

        # initiative_id -> role key -> demand row (unique on the pair)
        self.role_demand: Dict[int, Dict[str, RoleDemand]] = defaultdict(dict)
        for row in role_demand:
            self.role_demand[row.initiative_id][demand_key(row.role)] = row

        # initiative_id -> person_id -> membership
        self.team: Dict[int, Dict[int, TeamMembership]] = defaultdict(dict)
        for member in team:
            self.team[member.initiative_id][member.person_id] = member

        self.cells: Dict[CellKey, DailyAllocationCell] = {}
        for cell in cells:
            self.cells[cell.key] = cell

        self.unavailability: List[UnavailabilityWindow] = list(unavailability)

    # --- Keyed Lookups ---

    def get_initiative(self, initiative_id: int) -> Initiative:
        try:
            return self.initiatives[initiative_id]
        except KeyError:
            raise UnknownEntity("initiative", initiative_id) from None

    def get_person(self, person_id: int) -> Person:
        try:
            return self.people[person_id]
        except KeyError:
            raise UnknownEntity("person", person_id) from None

    def demand_for(self, initiative_id: int) -> List[RoleDemand]:
        return list(self.role_demand.get(initiative_id, {}).values())

    def team_for(self, initiative_id: int) -> List[TeamMembership]:
        return list(self.team.get(initiative_id, {}).values())

    def membership(self, initiative_id: int, person_id: int) -> Optional[TeamMembership]:
        return self.team.get(initiative_id, {}).get(person_id)

    def effective_role(self, initiative_id: int, person_id: int) -> Optional[RoleCode]:
        """Role a person fills on an initiative: a valid override wins over role_code."""
        member = self.membership(initiative_id, person_id)
        if member is not None and member.override_role is not None:
            return member.override_role
        return self.get_person(person_id).role

    def get_cell(self, initiative_id: int, person_id: int, day: date_type) -> Optional[DailyAllocationCell]:
        return self.cells.get((initiative_id, person_id, day))

    def cell_hours(self, initiative_id: int, person_id: int, day: date_type) -> float:
        cell = self.get_cell(initiative_id, person_id, day)
        return cell.hours if cell else 0.0

    def cells_for(self, initiative_id: int, person_id: int) -> List[DailyAllocationCell]:
        """All cells of one (initiative, person) pair, ascending by date."""
        found = [c for (i, p, _), c in self.cells.items() if i == initiative_id and p == person_id]
        return sorted(found, key=lambda c: c.date)

    # --- Mutations (mirrored by the persistence collaborator) ---

    def upsert_cell(self, initiative_id: int, person_id: int, day: date_type, hours: float) -> float:
        """Write a cell and return the hours it held before. Zeroing never deletes."""
        previous = self.cell_hours(initiative_id, person_id, day)
        cell = DailyAllocationCell(initiative_id=initiative_id, person_id=person_id, date=day, hours=hours)
        self.cells[cell.key] = cell
        return previous

    def replace_team(self, initiative_id: int, members: Iterable[Union[int, TeamMembership]]) -> None:
        """Replace-all membership. The new set is built first, then swapped in."""
        self.get_initiative(initiative_id)
        new_team: Dict[int, TeamMembership] = {}
        for member in members:
            if not isinstance(member, TeamMembership):
                member = TeamMembership(initiative_id=initiative_id, person_id=member)
            self.get_person(member.person_id)
            new_team[member.person_id] = member
        self.team[initiative_id] = new_team

    def upsert_role_demand(self, initiative_id: int, rows: Iterable[RoleDemand]) -> None:
        self.get_initiative(initiative_id)
        for row in rows:
            self.role_demand[initiative_id][demand_key(row.role)] = row

    # --- Serialisation ---

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllocationSnapshot":
        """Re-hydrate pydantic records from plain JSON-compatible dicts."""
        return cls(
            people=_load_records(Person, data.get("people", [])),
            initiatives=_load_records(Initiative, data.get("initiatives", [])),
            role_demand=_load_records(RoleDemand, data.get("role_demand", [])),
            team=_load_records(TeamMembership, data.get("team", [])),
            cells=_load_records(DailyAllocationCell, data.get("cells", [])),
            unavailability=_load_records(UnavailabilityWindow, data.get("unavailability", [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        def dump(items):
            return [item.model_dump(mode='json') for item in items]

        return {
            "people": dump(self.people.values()),
            "initiatives": dump(self.initiatives.values()),
            "role_demand": dump(r for rows in self.role_demand.values() for r in rows.values()),
            "team": dump(m for members in self.team.values() for m in members.values()),
            "cells": dump(sorted(self.cells.values(), key=lambda c: c.key)),
            "unavailability": dump(self.unavailability),
        }


def _load_records(model, items) -> list:
    """
    Validate raw records. A reversed date window raises InvalidRange; any other
    malformed record propagates pydantic's ValidationError.
    """
    records = []
    for item in items:
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            # Model-level validators (empty loc) only check start/end ordering
            if any(err["type"] == "value_error" and not err["loc"] for err in exc.errors()):
                raise InvalidRange(f"{model.__name__} ends before it starts: {item}") from exc
            raise
    return records


# --- Planner Output ---

GAP_NO_ELIGIBLE_PEOPLE = "NoEligiblePeople"
GAP_UNKNOWN_ROLE = "UnknownRole"
GAP_EXHAUSTED = "Exhausted"
GAP_BELOW_STEP = "BelowStep"


@dataclass
class DemandGap:
    """Demand the planner could not cover. Reported, never raised."""
    role: str
    planned_hours: float
    allocated_hours: float
    reason: str  # one of the GAP_* constants
    detail: str

    @property
    def shortfall(self) -> float:
        return max(0.0, self.planned_hours - self.allocated_hours)


@dataclass
class CapacityWarning:
    """A planned person-day that goes past the person's soft daily capacity."""
    person_id: int
    date: date_type
    committed_hours: float
    capacity: float

    @property
    def excess(self) -> float:
        return max(0.0, self.committed_hours - self.capacity)


@dataclass
class CoverageRow:
    role: str
    planned_hours: float
    previewed_hours: float

    @property
    def met(self) -> bool:
        return self.planned_hours > 0 and self.previewed_hours >= self.planned_hours


class AllocationPlan:
    """
    Mutable result of one planner run for one initiative.
    """

    def __init__(self, initiative: Initiative, role_priority: List[RoleCode]):
        self.initiative = initiative
        self.role_priority = list(role_priority)

        # (person_id, date) -> hours, plus the bits needed to render a row
        self.hours: Dict[Tuple[int, date_type], float] = defaultdict(float)
        self.roles: Dict[int, RoleCode] = {}
        self.names: Dict[int, str] = {}

        self.gaps: List[DemandGap] = []
        self.warnings: Dict[Tuple[int, date_type], CapacityWarning] = {}

    def add_hours(self, person: Person, role: RoleCode, day: date_type, hours: float) -> None:
        self.hours[(person.id, day)] += hours
        self.roles[person.id] = role
        self.names[person.id] = person.full_name

    def record_gap(self, gap: DemandGap) -> None:
        self.gaps.append(gap)

    def record_overbooking(self, person_id: int, day: date_type, committed: float, capacity: float) -> None:
        """Keep the latest committed figure for each overbooked person-day."""
        self.warnings[(person_id, day)] = CapacityWarning(person_id, day, committed, capacity)

    # --- Query Methods ---

    @property
    def rows(self) -> List[PreviewRow]:
        """Preview rows in a total order: role priority, date, person name, person id."""
        rank = {role: i for i, role in enumerate(self.role_priority)}

        def order(key):
            person_id, day = key
            return (rank.get(self.roles[person_id], len(rank)), day,
                    self.names[person_id].casefold(), person_id)

        return [
            PreviewRow(
                initiative_id=self.initiative.id,
                initiative_name=self.initiative.name,
                person_id=person_id,
                person_name=self.names[person_id],
                role_code=self.roles[person_id].value,
                date=day,
                hours=hours,
            )
            for (person_id, day), hours in sorted(self.hours.items(), key=lambda kv: order(kv[0]))
            if hours > 0
        ]

    def hours_for_role(self, role: RoleCode) -> float:
        return sum(h for (pid, _), h in self.hours.items() if self.roles.get(pid) == role)

    @property
    def total_hours(self) -> float:
        return sum(self.hours.values())

    def coverage(self, demand: Iterable[RoleDemand]) -> List[CoverageRow]:
        """Planned vs previewed hours for every role, in priority order."""
        planned: Dict[RoleCode, float] = defaultdict(float)
        for row in demand:
            if row.role_code is not None:
                planned[row.role_code] += row.planned_hours
        return [
            CoverageRow(role.value, planned.get(role, 0.0), self.hours_for_role(role))
            for role in self.role_priority
        ]

    # --- Reporting Methods ---

    def get_statistics(self) -> Dict[str, Any]:
        rows = self.rows
        if not rows:
            return {
                "total_rows": 0,
                "total_hours": 0.0,
                "people": 0,
                "gaps": len(self.gaps),
                "overbooked_days": len(self.warnings),
            }

        dates = [r.date for r in rows]
        hours_by_role: Dict[str, float] = defaultdict(float)
        for r in rows:
            hours_by_role[r.role_code] += r.hours

        return {
            "total_rows": len(rows),
            "total_hours": round(sum(r.hours for r in rows), 2),
            "people": len({r.person_id for r in rows}),
            "date_range": (min(dates), max(dates)),
            "hours_by_role": dict(hours_by_role),
            "gaps": len(self.gaps),
            "unmet_hours": round(sum(g.shortfall for g in self.gaps), 2),
            "overbooked_days": len(self.warnings),
        }

    def get_gap_report(self) -> List[Dict[str, Any]]:
        """Unmet demand, largest shortfall first."""
        report = [
            {
                "role": g.role,
                "reason": g.reason,
                "planned_hours": g.planned_hours,
                "allocated_hours": g.allocated_hours,
                "shortfall": g.shortfall,
                "detail": g.detail,
            }
            for g in self.gaps
        ]
        report.sort(key=lambda x: x["shortfall"], reverse=True)
        return report
