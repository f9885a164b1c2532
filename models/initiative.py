"""
Initiative and demand data models for the Initiative Staffing Allocator.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator, ConfigDict
from datetime import date, timedelta

from .person import RoleCode, normalize_role_code


class Methodology(str, Enum):
    """Delivery methodology tag. Informational only."""
    AGILE = "AGILE"
    WATERFALL = "WATERFALL"
    HYBRID = "HYBRID"


class Initiative(BaseModel):
    """
    A time-boxed piece of work.
    The inclusive [start_date, end_date] window bounds all allocation activity.
    """
    id: int = Field(description="Unique identifier")
    name: str = Field(min_length=1)
    methodology: Methodology = Field(default=Methodology.AGILE)
    start_date: date
    end_date: date

    @model_validator(mode='after')
    def validate_window(self):
        if self.start_date > self.end_date:
            raise ValueError("Initiative start date must not be after its end date")
        return self

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def days(self) -> List[date]:
        """Every date of the window, ascending."""
        span = (self.end_date - self.start_date).days
        return [self.start_date + timedelta(days=i) for i in range(span + 1)]

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": 12,
            "name": "Claims Portal Revamp",
            "methodology": "HYBRID",
            "start_date": "2025-01-06",
            "end_date": "2025-02-28"
        }
    })


class RoleDemand(BaseModel):
    """Total target hours an initiative needs from one role over its life."""
    initiative_id: int
    role: str = Field(description="Role code; normalised when matched")
    planned_hours: float = Field(ge=0)

    @property
    def role_code(self) -> Optional[RoleCode]:
        return normalize_role_code(self.role)


class TeamMembership(BaseModel):
    """
    Membership of a person in an initiative's eligible pool.
    'role_override' lets a person fill a different role on this initiative only.
    """
    initiative_id: int
    person_id: int
    role_override: Optional[str] = Field(default=None)

    @property
    def override_role(self) -> Optional[RoleCode]:
        if self.role_override is None:
            return None
        return normalize_role_code(self.role_override)
