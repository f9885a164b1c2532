"""
Allocation data models for the Initiative Staffing Allocator.

This module defines the 'Output' of the allocator:
1. DailyAllocationCell - the persisted unit of planned work
2. PreviewRow - one proposed cell from the planner
3. ApplyResultRow / AdjustmentRow - audit rows from the committer and adjuster
"""

import math
from enum import Enum
from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import date as date_type


HOUR_QUANTUM = 0.5
MAX_DAY_HOURS = 24.0
EPSILON = 1e-9


def floor_to_step(hours: float, step: float = HOUR_QUANTUM) -> float:
    return math.floor(hours / step + EPSILON) * step


class DailyAllocationCell(BaseModel):
    """Hours one person spends on one initiative on one day."""
    initiative_id: int
    person_id: int
    date: date_type
    hours: float = Field(ge=0, le=MAX_DAY_HOURS)

    @field_validator('hours')
    @classmethod
    def validate_quantum(cls, v):
        if abs(v / HOUR_QUANTUM - round(v / HOUR_QUANTUM)) > 1e-6:
            raise ValueError(f"Hours must be a multiple of {HOUR_QUANTUM}")
        return v

    @property
    def key(self):
        return (self.initiative_id, self.person_id, self.date)


class PreviewRow(BaseModel):
    """A proposed allocation cell, as returned by a preview."""
    initiative_id: int
    initiative_name: str
    person_id: int
    person_name: str
    role_code: str
    date: date_type
    hours: float = Field(gt=0, le=MAX_DAY_HOURS)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "initiative_id": 12,
            "initiative_name": "Claims Portal Revamp",
            "person_id": 7,
            "person_name": "Priya Natarajan",
            "role_code": "DEVELOPER",
            "date": "2025-01-06",
            "hours": 1.0
        }
    })


class ApplyAction(str, Enum):
    """What the committer did with one plan row."""
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"


class ApplyResultRow(BaseModel):
    initiative_id: int
    person_id: int
    date: date_type
    hours: float = Field(description="Hours proposed by the plan")
    previous_hours: float = Field(default=0.0, description="Cell value before apply")
    action: ApplyAction


class AdjustmentRow(BaseModel):
    """One future cell shrunk by the roll-forward adjuster."""
    date: date_type
    before_hours: float
    after_hours: float = Field(ge=0)
    reduced: float = Field(ge=0)
