"""
Data models package for the Initiative Staffing Allocator.

This package exports the three core pillars of the data architecture:
1. Demand (Initiative, RoleDemand, TeamMembership)
2. Supply (Person, RoleCode, UnavailabilityWindow)
3. Output (DailyAllocationCell, PreviewRow, ApplyResultRow, AdjustmentRow)
"""

from .person import (
    DEFAULT_DAILY_CAPACITY,
    DEFAULT_UNAVAILABLE_REASON,
    ROLE_PRIORITY,
    Person,
    RoleCode,
    UnavailabilityWindow,
    normalize_role_code
)

from .initiative import (
    Initiative,
    Methodology,
    RoleDemand,
    TeamMembership
)

from .allocation import (
    EPSILON,
    HOUR_QUANTUM,
    MAX_DAY_HOURS,
    AdjustmentRow,
    ApplyAction,
    ApplyResultRow,
    DailyAllocationCell,
    PreviewRow,
    floor_to_step,
)

__all__ = [
    # --- Demand Models ---
    "Initiative",
    "Methodology",
    "RoleDemand",
    "TeamMembership",

    # --- Supply Models ---
    "DEFAULT_DAILY_CAPACITY",
    "DEFAULT_UNAVAILABLE_REASON",
    "ROLE_PRIORITY",
    "Person",
    "RoleCode",
    "UnavailabilityWindow",
    "normalize_role_code",

    # --- Output Models ---
    "EPSILON",
    "HOUR_QUANTUM",
    "MAX_DAY_HOURS",
    "AdjustmentRow",
    "ApplyAction",
    "ApplyResultRow",
    "DailyAllocationCell",
    "PreviewRow",
    "floor_to_step",
]
