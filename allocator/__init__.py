"""
Core of the Initiative Staffing Allocator.

Five components, leaf-first:
1. EligibilityCalendar - blocked days and candidate dates
2. CapacityLedger - committed hours and soft headroom
3. AllocationPlanner - role demand to a day-by-day preview
4. AllocationCommitter - fill-only / overwrite reconciliation
5. RollForwardAdjuster - absorbs overruns into future cells
"""

from .calendar import BlockStatus, EligibilityCalendar, each_day
from .capacity import CapacityLedger, RoleCapacityRow, headroom, role_capacity_vs_demand
from .committer import AllocationCommitter, summarize
from .config import AllocatorSettings, MinDaysPolicy
from .engine import AllocationPlanner
from .errors import AllocationError, InvalidRange, NegativeInput, PlanMismatch, UnknownEntity
from .rollforward import RollForwardAdjuster
from .service import AllocationService
from .state import AllocationPlan, AllocationSnapshot, CapacityWarning, CoverageRow, DemandGap

__all__ = [
    "AllocationCommitter",
    "AllocationError",
    "AllocationPlan",
    "AllocationPlanner",
    "AllocationService",
    "AllocationSnapshot",
    "AllocatorSettings",
    "BlockStatus",
    "CapacityLedger",
    "CapacityWarning",
    "CoverageRow",
    "DemandGap",
    "EligibilityCalendar",
    "InvalidRange",
    "MinDaysPolicy",
    "NegativeInput",
    "PlanMismatch",
    "RoleCapacityRow",
    "RollForwardAdjuster",
    "UnknownEntity",
    "each_day",
    "headroom",
    "role_capacity_vs_demand",
    "summarize",
]
