"""Per-slot availability for a day.

Pure derivation from the slot grid, the special-hours rules, and the current
reservations. Recomputed on every read (and on every live feed change); the
result is never cached across changes to reservations, date, or user.

Reservations are any objects exposing reservation_date, time_slot, court and
user_id, so the ORM model and plain test doubles both work.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from padelbook.services.special_hours import SPECIAL_RULES, SpecialRule, SpecialStatus, classify
from padelbook.services.time_grid import Slot

COURT_COUNT = 2


@dataclass(frozen=True)
class SlotView:
    slot: Slot
    booked_count: int
    available_courts: int
    is_fully_booked: bool
    is_past: bool
    special_status: SpecialStatus
    user_reservations: list[Any] = field(default_factory=list)

    @property
    def is_special(self) -> bool:
        return not self.special_status.is_bookable

    @property
    def is_disabled(self) -> bool:
        return self.is_past or self.is_special

    @property
    def is_user_booking(self) -> bool:
        return bool(self.user_reservations)

    @property
    def is_selectable(self) -> bool:
        """Whether the slot may start or join a new selection."""
        return not self.is_disabled and not self.is_fully_booked


def _group_by_slot(day: date, reservations: Iterable[Any]) -> dict[str, list[Any]]:
    groups: dict[str, list[Any]] = defaultdict(list)
    for r in reservations:
        if r.reservation_date == day:
            groups[r.time_slot].append(r)
    return groups


def booked_courts(day: date, slot: Slot, reservations: Iterable[Any]) -> set[int]:
    """Courts already taken at this slot on this day."""
    return {r.court for r in reservations if r.reservation_date == day and r.time_slot == slot.label}


def is_past(day: date, slot: Slot, now: datetime) -> bool:
    """A slot is past once its start time has been reached on the club clock."""
    today = now.date()
    return day < today or (day == today and slot.start <= now.time())


def resolve(
    day: date,
    slots: Sequence[Slot],
    reservations: Iterable[Any],
    user_id: str | None,
    now: datetime,
    court_count: int = COURT_COUNT,
    rules: tuple[SpecialRule, ...] = SPECIAL_RULES,
) -> list[SlotView]:
    """Build the SlotView for every slot of the day.

    now must be on the club's clock (same timezone as the slot times).
    """
    groups = _group_by_slot(day, reservations)
    views: list[SlotView] = []

    for slot in slots:
        matches = groups.get(slot.label, [])
        booked = len(matches)
        views.append(
            SlotView(
                slot=slot,
                booked_count=booked,
                available_courts=max(court_count - booked, 0),
                is_fully_booked=booked >= court_count,
                is_past=is_past(day, slot, now),
                special_status=classify(day, slot.start, rules),
                # A user may hold the same slot on more than one court
                user_reservations=[r for r in matches if user_id is not None and r.user_id == user_id],
            )
        )

    return views
