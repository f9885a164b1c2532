"""
Capacity Ledger.

Soft capacity bookkeeping: how many hours a person already carries on a day
(across every initiative) and how much room is left under their daily capacity.
Headroom is advisory. Going past it is flagged, never refused.
"""

from datetime import date as date_type, timedelta
from typing import Dict, Iterable, List, Optional, Tuple
from collections import defaultdict
from dataclasses import dataclass

from models import DEFAULT_DAILY_CAPACITY, ROLE_PRIORITY, DailyAllocationCell, Initiative, Person, RoleCode, RoleDemand
from .calendar import EligibilityCalendar, each_day
from .errors import InvalidRange


def headroom(
    person: Person,
    day: date_type,
    cells: Iterable[DailyAllocationCell],
    default_capacity: float = DEFAULT_DAILY_CAPACITY,
) -> float:
    """Capacity minus every hour the person has on that day, floored at 0."""
    committed = sum(c.hours for c in cells if c.person_id == person.id and c.date == day)
    return max(0.0, person.capacity(default_capacity) - committed)


class CapacityLedger:
    """
    Per person-day view of committed hours, with scratch reservations for a
    plan that is still being built.
    """

    def __init__(
        self,
        people: Dict[int, Person],
        cells: Iterable[DailyAllocationCell],
        default_capacity: float = DEFAULT_DAILY_CAPACITY,
    ):
        self.people = people
        self.default_capacity = default_capacity

        # (person_id, date) -> initiative_id -> hours
        self.committed_index: Dict[Tuple[int, date_type], Dict[int, float]] = defaultdict(dict)
        for cell in cells:
            if cell.hours > 0:
                self.committed_index[(cell.person_id, cell.date)][cell.initiative_id] = cell.hours

        # Hours reserved by an in-progress plan
        self.reserved: Dict[Tuple[int, date_type], float] = defaultdict(float)

    def capacity(self, person_id: int) -> float:
        person = self.people.get(person_id)
        if person is None:
            return self.default_capacity
        return person.capacity(self.default_capacity)

    def committed(self, person_id: int, day: date_type, exclude_initiative: Optional[int] = None) -> float:
        """Persisted hours on that day, optionally ignoring one initiative's cells."""
        by_initiative = self.committed_index.get((person_id, day), {})
        return sum(h for i, h in by_initiative.items() if i != exclude_initiative)

    def load(self, person_id: int, day: date_type, exclude_initiative: Optional[int] = None) -> float:
        """Committed plus reserved hours."""
        return self.committed(person_id, day, exclude_initiative) + self.reserved.get((person_id, day), 0.0)

    def headroom(self, person_id: int, day: date_type, exclude_initiative: Optional[int] = None) -> float:
        return max(0.0, self.capacity(person_id) - self.load(person_id, day, exclude_initiative))

    def reserve(self, person_id: int, day: date_type, hours: float) -> None:
        self.reserved[(person_id, day)] += hours

    def record(self, cell: DailyAllocationCell) -> None:
        """Keep the index in step with a cell written after construction."""
        self.committed_index[(cell.person_id, cell.date)][cell.initiative_id] = cell.hours


# --- Read Models (availability grid and dashboard charts) ---

@dataclass
class AvailabilityRow:
    person_id: int
    person_name: str
    date: date_type
    committed_hours: float
    capacity: float
    blocked: bool
    reason: str

    @property
    def free_hours(self) -> float:
        return max(0.0, self.capacity - self.committed_hours)

    @property
    def over_capacity(self) -> bool:
        return self.committed_hours > self.capacity


@dataclass
class UtilizationRow:
    person_id: int
    person_name: str
    allocated_hours: float
    weekly_capacity_hours: Optional[float]

    @property
    def utilization_pct(self) -> float:
        if not self.weekly_capacity_hours:
            return 0.0
        return round(self.allocated_hours / self.weekly_capacity_hours * 100, 1)


@dataclass
class RoleCapacityRow:
    role: str
    capacity_hours: float
    demand_hours: float

    @property
    def balance(self) -> float:
        return self.capacity_hours - self.demand_hours


def availability_grid(
    ledger: CapacityLedger,
    calendar: EligibilityCalendar,
    person_ids: Iterable[int],
    start: date_type,
    end: date_type,
) -> List[AvailabilityRow]:
    """One row per person per day, people in the order given."""
    days = each_day(start, end)
    rows = []
    for person_id in person_ids:
        person = ledger.people[person_id]
        for day in days:
            status = calendar.is_blocked(person_id, day)
            rows.append(AvailabilityRow(
                person_id=person_id,
                person_name=person.full_name,
                date=day,
                committed_hours=ledger.committed(person_id, day),
                capacity=ledger.capacity(person_id),
                blocked=status.blocked,
                reason=status.reason,
            ))
    return rows


def weekly_utilization(ledger: CapacityLedger, week_start: date_type) -> List[UtilizationRow]:
    """Allocated vs weekly capacity for every active person, Monday to Sunday."""
    if week_start.weekday() != 0:
        raise InvalidRange(f"Week must start on a Monday, got {week_start}")
    days = [week_start + timedelta(days=i) for i in range(7)]

    people = sorted((p for p in ledger.people.values() if p.active), key=lambda p: (p.full_name.casefold(), p.id))
    return [
        UtilizationRow(
            person_id=p.id,
            person_name=p.full_name,
            allocated_hours=sum(ledger.committed(p.id, d) for d in days),
            weekly_capacity_hours=p.weekly_capacity_hours,
        )
        for p in people
    ]


def role_capacity_vs_demand(
    people: Iterable[Person],
    initiatives: Iterable[Initiative],
    demand: Iterable[RoleDemand],
    start: date_type,
    end: date_type,
    role_priority: Iterable[RoleCode] = ROLE_PRIORITY,
) -> List[RoleCapacityRow]:
    """
    Weekly capacity of active people per role against the role demand of
    initiatives lying entirely inside [start, end]. One row per role, in
    priority order, zeros included.
    """
    if start > end:
        raise InvalidRange(f"Range start {start} is after its end {end}")

    capacity: Dict[RoleCode, float] = defaultdict(float)
    for person in people:
        if person.active and person.role is not None:
            capacity[person.role] += person.weekly_capacity_hours or 0.0

    inside = {i.id for i in initiatives if i.start_date >= start and i.end_date <= end}
    planned: Dict[RoleCode, float] = defaultdict(float)
    for row in demand:
        if row.initiative_id in inside and row.role_code is not None:
            planned[row.role_code] += row.planned_hours

    return [
        RoleCapacityRow(role=role.value, capacity_hours=capacity[role], demand_hours=planned[role])
        for role in role_priority
    ]
