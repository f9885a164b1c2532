"""
Allocator tunables.

Defaults match the product's behaviour; every value can be overridden from the
environment through AllocatorSettings.from_env().
"""

import os
from enum import Enum
from typing import List, Mapping, Optional
from pydantic import BaseModel, Field, field_validator

from models import DEFAULT_DAILY_CAPACITY, HOUR_QUANTUM, ROLE_PRIORITY, RoleCode


def is_step_multiple(value: float) -> bool:
    """True when value lies on the cell grid (multiples of HOUR_QUANTUM)."""
    return abs(value / HOUR_QUANTUM - round(value / HOUR_QUANTUM)) <= 1e-6


class MinDaysPolicy(str, Enum):
    """How the adjuster's min_days protection window is counted."""
    CALENDAR = "calendar"    # skip the N calendar days right after the overrun day
    ALLOCATED = "allocated"  # skip the first N future days that carry hours


class AllocatorSettings(BaseModel):
    step: float = Field(default=HOUR_QUANTUM, gt=0, le=24, description="Planning/reduction increment")
    min_days: int = Field(default=2, ge=0, description="Near-term days the adjuster leaves alone")
    min_days_policy: MinDaysPolicy = Field(default=MinDaysPolicy.CALENDAR)
    default_daily_capacity: float = Field(default=DEFAULT_DAILY_CAPACITY, ge=0, le=24)

    # Soft capacity: overflow past headroom rather than leave demand unmet
    allow_overbooking: bool = Field(default=True)

    role_priority: List[RoleCode] = Field(default_factory=lambda: list(ROLE_PRIORITY))

    @field_validator('step')
    @classmethod
    def validate_step(cls, v):
        if not is_step_multiple(v):
            raise ValueError(f"Step must be a multiple of {HOUR_QUANTUM}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AllocatorSettings":
        env = os.environ if environ is None else environ
        values = {}
        if env.get("ALLOCATOR_STEP"):
            values["step"] = float(env["ALLOCATOR_STEP"])
        if env.get("ALLOCATOR_MIN_DAYS"):
            values["min_days"] = int(env["ALLOCATOR_MIN_DAYS"])
        if env.get("ALLOCATOR_MIN_DAYS_POLICY"):
            values["min_days_policy"] = env["ALLOCATOR_MIN_DAYS_POLICY"].strip().lower()
        if env.get("ALLOCATOR_DEFAULT_CAPACITY"):
            values["default_daily_capacity"] = float(env["ALLOCATOR_DEFAULT_CAPACITY"])
        if env.get("ALLOCATOR_ALLOW_OVERBOOKING"):
            values["allow_overbooking"] = env["ALLOCATOR_ALLOW_OVERBOOKING"].strip().lower() in ("1", "true", "yes", "on")
        return cls(**values)
