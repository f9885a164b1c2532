"""Shared fixtures for the allocator tests."""

from datetime import date, timedelta

import pytest

from allocator import AllocationSnapshot
from models import (
    DailyAllocationCell,
    Initiative,
    Person,
    PreviewRow,
    RoleDemand,
    TeamMembership,
    UnavailabilityWindow,
)

# 2025-01-06 is a Monday
MONDAY = date(2025, 1, 6)


@pytest.fixture
def make_person():
    def _make(pid, name, role="DEVELOPER", **kwargs):
        return Person(id=pid, full_name=name, role_code=role, **kwargs)
    return _make


@pytest.fixture
def make_snapshot(make_person):
    """
    Build a snapshot around initiative 10 ("Portal").

    people: list of Person (default: developers Alice and Bob)
    demand: {role: hours}
    team: person ids (default: every person)
    cells: list of (initiative_id, person_id, date, hours)
    leave: list of (person_id, start, end, reason)
    """
    def _make(
        people=None,
        demand=None,
        team=None,
        cells=(),
        leave=(),
        start=MONDAY,
        end=None,
        extra_initiatives=(),
    ):
        if people is None:
            people = [make_person(1, "Alice"), make_person(2, "Bob")]
        if team is None:
            team = [p.id for p in people]
        initiatives = [Initiative(id=10, name="Portal", start_date=start, end_date=end or start + timedelta(days=4))]
        initiatives += list(extra_initiatives)
        return AllocationSnapshot(
            people=people,
            initiatives=initiatives,
            role_demand=[
                RoleDemand(initiative_id=10, role=role, planned_hours=hours)
                for role, hours in (demand or {}).items()
            ],
            team=[TeamMembership(initiative_id=10, person_id=pid) for pid in team],
            cells=[
                DailyAllocationCell(initiative_id=i, person_id=p, date=d, hours=h)
                for i, p, d, h in cells
            ],
            unavailability=[
                UnavailabilityWindow(person_id=p, start_date=s, end_date=e, reason=r)
                for p, s, e, r in leave
            ],
        )
    return _make


@pytest.fixture
def preview_row():
    def _make(person_id, on, hours, initiative_id=10):
        return PreviewRow(
            initiative_id=initiative_id,
            initiative_name="Portal",
            person_id=person_id,
            person_name=f"Person {person_id}",
            role_code="DEVELOPER",
            date=on,
            hours=hours,
        )
    return _make
