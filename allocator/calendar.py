"""
Calendar & Eligibility Filter.

This module answers the binary question: "Can Person X receive hours on Date Y?"
A day is blocked on weekends and inside any registered unavailability window.
"""

from datetime import date as date_type, timedelta
from typing import Dict, Iterable, List, NamedTuple
from collections import defaultdict

from models import Initiative, UnavailabilityWindow
from .errors import InvalidRange

WEEKEND_REASON = "weekend"
SATURDAY = 5


class BlockStatus(NamedTuple):
    blocked: bool
    reason: str = ""


UNBLOCKED = BlockStatus(False, "")


def each_day(start: date_type, end: date_type) -> List[date_type]:
    """Dates from start to end inclusive, ascending."""
    if start > end:
        raise InvalidRange(f"Start date {start} is after end date {end}")
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def is_weekend(day: date_type) -> bool:
    return day.weekday() >= SATURDAY


class EligibilityCalendar:
    """
    Pure lookup over the supplied unavailability windows.
    """

    def __init__(self, windows: Iterable[UnavailabilityWindow]):
        # Index windows per person for cheap lookups
        self.windows: Dict[int, List[UnavailabilityWindow]] = defaultdict(list)
        for window in windows:
            self.windows[window.person_id].append(window)
        for person_windows in self.windows.values():
            person_windows.sort(key=lambda w: (w.start_date, w.end_date))

    def is_blocked(self, person_id: int, day: date_type) -> BlockStatus:
        """
        Weekend wins over any window; among overlapping windows the earliest
        starting one supplies the reason.
        """
        if is_weekend(day):
            return BlockStatus(True, WEEKEND_REASON)

        for window in self.windows.get(person_id, ()):
            if window.start_date > day:
                break
            if window.covers(day):
                return BlockStatus(True, window.display_reason)

        return UNBLOCKED

    def candidate_dates(self, initiative: Initiative) -> List[date_type]:
        return each_day(initiative.start_date, initiative.end_date)

    def open_dates(self, person_id: int, initiative: Initiative) -> List[date_type]:
        """Candidate dates on which the person is not blocked."""
        return [d for d in self.candidate_dates(initiative) if not self.is_blocked(person_id, d).blocked]
