"""
Sample data generator for the Initiative Staffing Allocator.
Builds a small, realistic snapshot so the driver script can run without an
export from the people directory.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from models import (
    DailyAllocationCell,
    Initiative,
    Methodology,
    Person,
    RoleDemand,
    TeamMembership,
    UnavailabilityWindow,
)
from allocator import AllocationSnapshot

logger = logging.getLogger(__name__)

# (name, role_code, daily_capacity)
SAMPLE_PEOPLE = [
    ("Amara Okafor", "PM", 6.5),
    ("Ben Lindqvist", "SA", 6.5),
    ("Chloe Marchetti", "BA", 6.0),
    ("Dev Raman", "BUSINESS_ANALYST", 6.5),
    ("Elena Petrova", "DESIGNER", 5.0),
    ("Farid Haddad", "DEVELOPER", 6.5),
    ("Grace Liu", "DEV", 6.5),
    ("Hugo Brandt", "DEVELOPER", 7.5),
    ("Isla McKenzie", "TESTER", 6.5),
    ("Jonah Weiss", "INTERN", 4.0),
]


def monday_on_or_after(day: date) -> date:
    return day + timedelta(days=(7 - day.weekday()) % 7)


def build_sample_snapshot(start: Optional[date] = None) -> AllocationSnapshot:
    """
    Two overlapping initiatives sharing part of their team, a week of leave,
    and some manual cells on the first initiative.
    """
    start = monday_on_or_after(start or date.today())

    people = [
        Person(id=i, full_name=name, role_code=role, daily_capacity=cap, weekly_capacity_hours=cap * 5)
        for i, (name, role, cap) in enumerate(SAMPLE_PEOPLE, start=1)
    ]

    portal = Initiative(
        id=1, name="Claims Portal Revamp", methodology=Methodology.HYBRID,
        start_date=start, end_date=start + timedelta(days=27),
    )
    billing = Initiative(
        id=2, name="Billing Migration", methodology=Methodology.WATERFALL,
        start_date=start + timedelta(days=7), end_date=start + timedelta(days=41),
    )

    demand = [
        RoleDemand(initiative_id=1, role="PM", planned_hours=40),
        RoleDemand(initiative_id=1, role="BA", planned_hours=60),
        RoleDemand(initiative_id=1, role="DESIGNER", planned_hours=30),
        RoleDemand(initiative_id=1, role="DEVELOPER", planned_hours=220),
        RoleDemand(initiative_id=1, role="TESTER", planned_hours=80),
        RoleDemand(initiative_id=2, role="SA", planned_hours=50),
        RoleDemand(initiative_id=2, role="DEVELOPER", planned_hours=160),
        RoleDemand(initiative_id=2, role="TESTER", planned_hours=40),
    ]

    team = [TeamMembership(initiative_id=1, person_id=pid) for pid in (1, 3, 4, 5, 6, 7, 9, 10)]
    team += [TeamMembership(initiative_id=2, person_id=pid) for pid in (2, 7, 8, 9)]
    # Amara covers business analysis on the migration
    team.append(TeamMembership(initiative_id=2, person_id=1, role_override="BA"))

    leave = [
        UnavailabilityWindow(person_id=6, start_date=start + timedelta(days=8),
                             end_date=start + timedelta(days=12), reason="Annual leave"),
        UnavailabilityWindow(person_id=9, start_date=start + timedelta(days=2),
                             end_date=start + timedelta(days=2), reason="Training"),
    ]

    cells = [
        DailyAllocationCell(initiative_id=1, person_id=7, date=start, hours=3.0),
        DailyAllocationCell(initiative_id=1, person_id=7, date=start + timedelta(days=1), hours=4.0),
    ]

    logger.info("Built sample snapshot starting %s: %d people, 2 initiatives", start, len(people))
    return AllocationSnapshot(
        people=people,
        initiatives=[portal, billing],
        role_demand=demand,
        team=team,
        cells=cells,
        unavailability=leave,
    )
