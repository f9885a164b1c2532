"""
Failure taxonomy for the allocator.

Raised errors are structural: the call cannot produce a meaningful result.
Unmet demand is never raised; see DemandGap in state.py.
"""


class AllocationError(Exception):
    """Base class for every error the allocator raises."""


class InvalidRange(AllocationError, ValueError):
    """A date or hour value falls outside the range it must sit in."""


class NegativeInput(AllocationError, ValueError):
    """Hours, step or day counts that must not be negative (or zero) were."""


class UnknownEntity(AllocationError, LookupError):
    """An initiative or person id is not present in the snapshot."""

    def __init__(self, kind: str, entity_id) -> None:
        super().__init__(f"Unknown {kind}: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class PlanMismatch(AllocationError, ValueError):
    """A plan row targets another initiative than the one being applied."""
