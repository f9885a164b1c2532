"""Tests for the capacity ledger and its read models."""

from datetime import date

import pytest

from allocator import CapacityLedger, EligibilityCalendar, InvalidRange, headroom
from allocator.capacity import availability_grid, role_capacity_vs_demand, weekly_utilization
from models import DailyAllocationCell, Initiative, Person, RoleDemand

MONDAY = date(2025, 1, 6)


def cell(initiative_id, person_id, on, hours):
    return DailyAllocationCell(initiative_id=initiative_id, person_id=person_id, date=on, hours=hours)


@pytest.fixture
def people():
    return {
        1: Person(id=1, full_name="Alice", role_code="DEVELOPER", weekly_capacity_hours=32.5),
        2: Person(id=2, full_name="Bob", role_code="DEVELOPER", daily_capacity=None),
        3: Person(id=3, full_name="Cara", role_code="TESTER", active=False, weekly_capacity_hours=30),
    }


class TestHeadroom:
    def test_sums_across_initiatives(self, people):
        cells = [cell(10, 1, MONDAY, 2.0), cell(20, 1, MONDAY, 3.0), cell(10, 2, MONDAY, 6.0)]
        assert headroom(people[1], MONDAY, cells) == 1.5

    def test_floors_at_zero(self, people):
        cells = [cell(10, 1, MONDAY, 5.0), cell(20, 1, MONDAY, 4.0)]
        assert headroom(people[1], MONDAY, cells) == 0.0

    def test_unset_capacity_uses_default(self, people):
        assert headroom(people[2], MONDAY, []) == 6.5


class TestCapacityLedger:
    def test_exclude_initiative(self, people):
        ledger = CapacityLedger(people, [cell(10, 1, MONDAY, 4.0), cell(20, 1, MONDAY, 1.0)])
        assert ledger.committed(1, MONDAY) == 5.0
        assert ledger.committed(1, MONDAY, exclude_initiative=10) == 1.0
        assert ledger.headroom(1, MONDAY, exclude_initiative=10) == 5.5

    def test_reservations_count_against_headroom(self, people):
        ledger = CapacityLedger(people, [])
        ledger.reserve(1, MONDAY, 6.0)
        assert ledger.load(1, MONDAY) == 6.0
        assert ledger.headroom(1, MONDAY) == 0.5

    def test_record_updates_index(self, people):
        ledger = CapacityLedger(people, [cell(10, 1, MONDAY, 4.0)])
        ledger.record(cell(10, 1, MONDAY, 1.0))
        assert ledger.committed(1, MONDAY) == 1.0


class TestAvailabilityGrid:
    def test_over_capacity_flag_and_blocked_days(self, people):
        ledger = CapacityLedger(people, [cell(10, 1, MONDAY, 4.0), cell(20, 1, MONDAY, 3.0)])
        rows = availability_grid(ledger, EligibilityCalendar([]), [1], MONDAY, date(2025, 1, 11))

        assert len(rows) == 6
        monday = rows[0]
        assert monday.committed_hours == 7.0
        assert monday.over_capacity is True
        assert monday.free_hours == 0.0

        saturday = rows[-1]
        assert saturday.blocked is True
        assert saturday.reason == "weekend"
        assert saturday.free_hours == 6.5


class TestWeeklyUtilization:
    def test_percentage_per_active_person(self, people):
        ledger = CapacityLedger(people, [
            cell(10, 1, MONDAY, 6.0),
            cell(10, 1, date(2025, 1, 8), 4.0),
            cell(10, 1, date(2025, 1, 13), 6.0),  # next week
        ])
        rows = weekly_utilization(ledger, MONDAY)

        assert [r.person_name for r in rows] == ["Alice", "Bob"]
        assert rows[0].allocated_hours == 10.0
        assert rows[0].utilization_pct == 30.8
        assert rows[1].utilization_pct == 0.0

    def test_week_must_start_on_monday(self, people):
        with pytest.raises(InvalidRange):
            weekly_utilization(CapacityLedger(people, []), date(2025, 1, 7))


class TestRoleCapacityVsDemand:
    JANUARY = (date(2025, 1, 1), date(2025, 1, 31))

    def initiatives(self):
        return [
            Initiative(id=10, name="Portal", start_date=MONDAY, end_date=date(2025, 1, 24)),
            Initiative(id=20, name="Billing", start_date=date(2025, 1, 20), end_date=date(2025, 2, 14)),
        ]

    def test_capacity_and_demand_per_role(self, people):
        demand = [
            RoleDemand(initiative_id=10, role="DEV", planned_hours=40),
            RoleDemand(initiative_id=10, role="TESTER", planned_hours=12),
            RoleDemand(initiative_id=20, role="DEVELOPER", planned_hours=100),  # runs into February
        ]
        rows = {r.role: r for r in role_capacity_vs_demand(people.values(), self.initiatives(), demand, *self.JANUARY)}

        assert list(rows) == ["PM", "SA", "BA", "DESIGNER", "DEVELOPER", "TESTER"]
        # Bob has no weekly capacity, Cara is inactive
        assert rows["DEVELOPER"].capacity_hours == 32.5
        assert rows["DEVELOPER"].demand_hours == 40
        assert rows["TESTER"].capacity_hours == 0.0
        assert rows["TESTER"].balance == -12
        assert rows["PM"].demand_hours == 0.0

    def test_reversed_range(self, people):
        with pytest.raises(InvalidRange):
            role_capacity_vs_demand(people.values(), [], [], date(2025, 2, 1), date(2025, 1, 1))
