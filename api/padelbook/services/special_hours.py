"""Recurring weekly windows that are not open for booking.

Weekdays follow the club calendar convention: 0=Sunday .. 6=Saturday.
A slot belongs to a window when its start falls in [start, end).
"""

from dataclasses import dataclass
from datetime import date, time

BOOKABLE = "BOOKABLE"


@dataclass(frozen=True)
class SpecialRule:
    status: str
    message: str
    days: frozenset[int]
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute


@dataclass(frozen=True)
class SpecialStatus:
    status: str
    message: str = ""

    @property
    def is_bookable(self) -> bool:
        return self.status == BOOKABLE


SPECIAL_RULES: tuple[SpecialRule, ...] = (
    SpecialRule(
        status="FCFS",
        message="First Come First Serve Hours",
        days=frozenset({2, 4}),  # Tue, Thu
        start_hour=12, start_minute=0,
        end_hour=16, end_minute=0,
    ),
    SpecialRule(
        status="AMERICANO",
        message="Americano Group Play",
        days=frozenset({3, 5}),  # Wed, Fri
        start_hour=9, start_minute=30,
        end_hour=13, end_minute=30,
    ),
)


def sunday_weekday(day: date) -> int:
    """date.weekday() is 0=Monday; rules use 0=Sunday."""
    return day.isoweekday() % 7


def classify(day: date, slot_start: time, rules: tuple[SpecialRule, ...] = SPECIAL_RULES) -> SpecialStatus:
    """Return the special status of a slot starting at slot_start on day.

    Rules are assumed not to overlap; the first match wins.
    """
    weekday = sunday_weekday(day)
    minutes = slot_start.hour * 60 + slot_start.minute

    for rule in rules:
        if weekday in rule.days and rule.start_minutes <= minutes < rule.end_minutes:
            return SpecialStatus(rule.status, rule.message)

    return SpecialStatus(BOOKABLE)
