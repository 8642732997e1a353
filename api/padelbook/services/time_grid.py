"""The day's grid of bookable 30-minute slots.

Pure calculation module: no database, no async, no FastAPI dependencies.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from functools import cache

from padelbook.core.errors import SelectionRuleViolation

OPEN_TIME = time(6, 0)  # first slot starts 06:00
CLOSE_TIME = time(21, 0)  # last slot ends 21:00
SLOT_MINUTES = 30


@dataclass(frozen=True)
class Slot:
    index: int
    start: time
    end: time

    @property
    def label(self) -> str:
        """Display label, also the slot reference stored on reservations."""
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"

    @property
    def id(self) -> str:
        """Path-safe identifier, e.g. "06-00-06-30"."""
        return self.label.replace(":", "-").replace(" ", "")

    @property
    def start_minutes(self) -> int:
        return self.start.hour * 60 + self.start.minute


@cache
def _grid() -> tuple[Slot, ...]:
    slots = []
    current = datetime.combine(date.min, OPEN_TIME)
    end_of_day = datetime.combine(date.min, CLOSE_TIME)
    step = timedelta(minutes=SLOT_MINUTES)

    while current + step <= end_of_day:
        slots.append(Slot(index=len(slots), start=current.time(), end=(current + step).time()))
        current += step

    return tuple(slots)


def generate_slots() -> list[Slot]:
    """Return the ordered slots of the operating day (30 slots, 06:00-21:00)."""
    return list(_grid())


def index_of(slot: Slot) -> int:
    """Grid position of a slot, used for adjacency and ordering."""
    return _grid().index(slot)


def slot_by_id(slot_id: str) -> Slot:
    for slot in _grid():
        if slot.id == slot_id:
            return slot
    raise SelectionRuleViolation(f"Unknown time slot {slot_id!r}.", rule="unknown_slot")


def slot_by_label(label: str) -> Slot:
    for slot in _grid():
        if slot.label == label:
            return slot
    raise SelectionRuleViolation(f"Unknown time slot {label!r}.", rule="unknown_slot")
