"""
People and availability data models for the Initiative Staffing Allocator.

This module defines the 'Supply' side of the allocator:
1. People (human resources with a role and a soft daily capacity)
2. Unavailability windows (leave, training, anything that blocks a day)
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator, ConfigDict
from datetime import date


DEFAULT_DAILY_CAPACITY = 6.5
DEFAULT_UNAVAILABLE_REASON = "Unavailable"


class RoleCode(str, Enum):
    """The fixed role enumeration people and role demand are matched on."""
    PM = "PM"
    SA = "SA"
    BA = "BA"
    DESIGNER = "DESIGNER"
    DEVELOPER = "DEVELOPER"
    TESTER = "TESTER"


# Planner walks roles in this order
ROLE_PRIORITY: List[RoleCode] = [
    RoleCode.PM,
    RoleCode.SA,
    RoleCode.BA,
    RoleCode.DESIGNER,
    RoleCode.DEVELOPER,
    RoleCode.TESTER,
]

# Legacy spellings still present in older people records
_ROLE_ALIASES = {
    "DEV": RoleCode.DEVELOPER,
    "BUSINESS_ANALYST": RoleCode.BA,
}


def normalize_role_code(raw: Optional[str]) -> Optional[RoleCode]:
    """Map a raw role string onto a RoleCode. Unknown codes return None."""
    value = (raw or "").strip().upper()
    if value in _ROLE_ALIASES:
        return _ROLE_ALIASES[value]
    try:
        return RoleCode(value)
    except ValueError:
        return None


class Person(BaseModel):
    """
    Human resource that can receive daily allocations.
    Owned by the people directory; the allocator only reads it.
    """
    id: int = Field(description="Unique identifier")
    full_name: str = Field(min_length=1, description="Display name, also the planner tie-break")
    role_code: str = Field(description="Raw role code as stored (may be a legacy alias)")
    email: Optional[str] = Field(default=None)
    active: bool = Field(default=True, description="Inactive people are never auto-allocated")

    # Capacity Constraint (soft)
    daily_capacity: Optional[float] = Field(
        default=DEFAULT_DAILY_CAPACITY,
        ge=0,
        le=24,
        description="Advisory ceiling of hours per day across all initiatives"
    )
    weekly_capacity_hours: Optional[float] = Field(
        default=None,
        ge=0,
        description="Used for weekly utilisation reporting only"
    )

    @property
    def role(self) -> Optional[RoleCode]:
        return normalize_role_code(self.role_code)

    def capacity(self, default: float = DEFAULT_DAILY_CAPACITY) -> float:
        """Effective daily capacity, falling back to the default when unset."""
        if self.daily_capacity is None:
            return default
        return self.daily_capacity

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": 7,
            "full_name": "Priya Natarajan",
            "role_code": "DEVELOPER",
            "active": True,
            "daily_capacity": 6.5,
            "weekly_capacity_hours": 32.5
        }
    })


class UnavailabilityWindow(BaseModel):
    """Inclusive date range during which a person cannot be allocated."""
    person_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = Field(default=None, description="e.g. 'Annual leave'")

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("Unavailability end date cannot be before start date")
        return self

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def display_reason(self) -> str:
        return self.reason or DEFAULT_UNAVAILABLE_REASON
