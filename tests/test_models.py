"""Tests for the pydantic data models."""

from datetime import date

import pytest
from pydantic import ValidationError

from models import (
    DailyAllocationCell,
    Initiative,
    Person,
    RoleCode,
    RoleDemand,
    TeamMembership,
    UnavailabilityWindow,
    floor_to_step,
    normalize_role_code,
)


class TestNormalizeRoleCode:
    @pytest.mark.parametrize("raw,expected", [
        ("DEVELOPER", RoleCode.DEVELOPER),
        (" developer ", RoleCode.DEVELOPER),
        ("DEV", RoleCode.DEVELOPER),
        ("business_analyst", RoleCode.BA),
        ("pm", RoleCode.PM),
    ])
    def test_known_codes(self, raw, expected):
        assert normalize_role_code(raw) == expected

    @pytest.mark.parametrize("raw", ["INTERN", "", None, "ARCHITECT"])
    def test_unknown_codes(self, raw):
        assert normalize_role_code(raw) is None


class TestPerson:
    def test_default_capacity(self):
        person = Person(id=1, full_name="Alice", role_code="DEV")
        assert person.daily_capacity == 6.5
        assert person.role == RoleCode.DEVELOPER

    def test_unset_capacity_falls_back(self):
        person = Person(id=1, full_name="Alice", role_code="PM", daily_capacity=None)
        assert person.capacity() == 6.5
        assert person.capacity(default=8.0) == 8.0

    def test_capacity_out_of_range(self):
        with pytest.raises(ValidationError):
            Person(id=1, full_name="Alice", role_code="PM", daily_capacity=25)


class TestInitiative:
    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            Initiative(id=1, name="X", start_date=date(2025, 1, 10), end_date=date(2025, 1, 9))

    def test_single_day_window(self):
        init = Initiative(id=1, name="X", start_date=date(2025, 1, 6), end_date=date(2025, 1, 6))
        assert init.days() == [date(2025, 1, 6)]
        assert init.contains(date(2025, 1, 6))
        assert not init.contains(date(2025, 1, 7))


class TestCellAndDemand:
    def test_hours_must_be_half_hour_steps(self):
        with pytest.raises(ValidationError):
            DailyAllocationCell(initiative_id=1, person_id=1, date=date(2025, 1, 6), hours=1.25)

    def test_hours_upper_bound(self):
        with pytest.raises(ValidationError):
            DailyAllocationCell(initiative_id=1, person_id=1, date=date(2025, 1, 6), hours=24.5)

    def test_negative_planned_hours_rejected(self):
        with pytest.raises(ValidationError):
            RoleDemand(initiative_id=1, role="PM", planned_hours=-1)

    def test_role_override(self):
        member = TeamMembership(initiative_id=1, person_id=2, role_override="dev")
        assert member.override_role == RoleCode.DEVELOPER
        assert TeamMembership(initiative_id=1, person_id=2).override_role is None

    def test_window_dates_validated(self):
        with pytest.raises(ValidationError):
            UnavailabilityWindow(person_id=1, start_date=date(2025, 1, 8), end_date=date(2025, 1, 7))

    def test_window_default_reason(self):
        window = UnavailabilityWindow(person_id=1, start_date=date(2025, 1, 8), end_date=date(2025, 1, 8))
        assert window.display_reason == "Unavailable"


class TestFloorToStep:
    def test_rounds_down(self):
        assert floor_to_step(1.4) == 1.0
        assert floor_to_step(10.25) == 10.0
        assert floor_to_step(0.2) == 0.0

    def test_exact_multiples_kept(self):
        assert floor_to_step(2.0) == 2.0
        assert floor_to_step(1.5, step=0.5) == 1.5
        assert floor_to_step(1.5, step=1.0) == 1.0
