"""Selection state machine for building a booking block.

A block is a contiguous run of 1 to MAX_BLOCK_SLOTS slots. The selection is
either empty or building. Toggling a slot that is already selected shrinks
the block to the slots strictly before it, so clicking the first slot clears
the whole selection and clicking a middle slot drops it and everything after.
Rejected toggles raise SelectionRuleViolation and leave the state unchanged.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from padelbook.core.errors import SelectionRuleViolation, ValidationError
from padelbook.services.availability import SlotView
from padelbook.services.session import SessionContext
from padelbook.services.time_grid import SLOT_MINUTES, Slot, index_of

MAX_BLOCK_SLOTS = 4  # 2 hours

EMPTY = "empty"
BUILDING = "building"


@dataclass(frozen=True)
class ConfirmationSummary:
    time_range: str
    total_slots: int
    duration_minutes: int


class Selection:
    def __init__(self, slots: Iterable[Slot] = (), max_slots: int = MAX_BLOCK_SLOTS):
        self._slots: tuple[Slot, ...] = tuple(sorted(slots, key=index_of))
        self.max_slots = max_slots

    @classmethod
    def from_ids(
        cls,
        slot_ids: Sequence[str],
        views: Sequence[SlotView],
        max_slots: int = MAX_BLOCK_SLOTS,
    ) -> "Selection":
        """Rebuild a client-held selection by replaying its toggles in grid order.

        Every rule is re-checked against the current views, so a stale or forged
        selection is rejected the same way a live click would be.
        """
        if len(set(slot_ids)) != len(slot_ids):
            raise SelectionRuleViolation("A time slot appears more than once in the selection.", rule="duplicate_slot")

        by_id = {v.slot.id: v for v in views}
        unknown = [s for s in slot_ids if s not in by_id]
        if unknown:
            raise SelectionRuleViolation(f"Unknown time slot {unknown[0]!r}.", rule="unknown_slot")

        selection = cls(max_slots=max_slots)
        for view in sorted((by_id[s] for s in slot_ids), key=lambda v: index_of(v.slot)):
            selection.toggle(view)
        return selection

    @property
    def slots(self) -> tuple[Slot, ...]:
        return self._slots

    @property
    def state(self) -> str:
        return BUILDING if self._slots else EMPTY

    @property
    def is_empty(self) -> bool:
        return not self._slots

    @property
    def first(self) -> Slot | None:
        return self._slots[0] if self._slots else None

    @property
    def last(self) -> Slot | None:
        return self._slots[-1] if self._slots else None

    @property
    def duration_minutes(self) -> int:
        return len(self._slots) * SLOT_MINUTES

    @property
    def time_range(self) -> str:
        if not self._slots:
            return ""
        return f"{self.first.start.strftime('%H:%M')} - {self.last.end.strftime('%H:%M')}"

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot: Slot) -> bool:
        return slot in self._slots

    def clear(self) -> None:
        self._slots = ()

    def change_date(self) -> None:
        """A different day never shares slots with the current block."""
        self.clear()

    def toggle(self, view: SlotView) -> str:
        """Apply a click on view's slot. Returns a message describing the new state."""
        if not view.is_selectable:
            raise SelectionRuleViolation("This time slot is not available for booking.", rule="slot_unavailable")

        slot = view.slot

        if slot in self._slots:
            position = self._slots.index(slot)
            self._slots = self._slots[:position]
            if not self._slots:
                return "Selection cleared."
            return (
                f"Reservation block adjusted to {self.duration_minutes} minutes. "
                f"Selection starts at {self.first.start.strftime('%H:%M')}."
            )

        if len(self._slots) >= self.max_slots:
            raise SelectionRuleViolation(
                f"Maximum of {self.max_slots} adjacent slots ({_fmt_hours(self.max_slots)}) can be selected.",
                rule="max_block_length",
            )

        if view.is_user_booking:
            raise SelectionRuleViolation(
                "You already have a reservation in this block. "
                "Please cancel the existing reservation first if you wish to re-book.",
                rule="own_reservation",
            )

        if not self._slots:
            self._slots = (slot,)
            return f"Slot selected. Select an adjacent slot to extend (max {self.max_slots})."

        position = index_of(slot)
        if position == index_of(self.first) - 1 or position == index_of(self.last) + 1:
            self._slots = tuple(sorted((*self._slots, slot), key=index_of))
            return f"Extended selection to {len(self._slots)} slots. Total time: {self.duration_minutes} minutes."

        raise SelectionRuleViolation(
            "Slots must be immediately adjacent to the start or end of the current selection "
            "to form a contiguous block.",
            rule="not_adjacent",
        )

    def summary(self, context: SessionContext) -> ConfirmationSummary:
        """Data for the confirmation step. Requires a non-empty block and contact details."""
        if not self._slots:
            raise SelectionRuleViolation("Please select at least one time slot to proceed.", rule="empty_selection")
        if not context.has_contact:
            raise ValidationError(
                "Sign-in is not complete. Please make sure your member number and email are entered.",
                rule="missing_profile",
            )
        return ConfirmationSummary(
            time_range=self.time_range,
            total_slots=len(self._slots),
            duration_minutes=self.duration_minutes,
        )


def block_from_ids(
    slot_ids: Sequence[str],
    views: Sequence[SlotView],
    max_slots: int = MAX_BLOCK_SLOTS,
) -> tuple[Slot, ...]:
    """Validate the shape of a block submitted for commit.

    Checks length, contiguity, past and special slots, and the user's own
    reservations. Court occupancy is left to the commit resolver, which
    reports a fully booked slot as an availability conflict.
    """
    if not slot_ids:
        raise SelectionRuleViolation("Please select at least one time slot to proceed.", rule="empty_selection")
    if len(set(slot_ids)) != len(slot_ids):
        raise SelectionRuleViolation("A time slot appears more than once in the selection.", rule="duplicate_slot")
    if len(slot_ids) > max_slots:
        raise SelectionRuleViolation(
            f"Maximum of {max_slots} adjacent slots ({_fmt_hours(max_slots)}) can be selected.",
            rule="max_block_length",
        )

    by_id = {v.slot.id: v for v in views}
    unknown = [s for s in slot_ids if s not in by_id]
    if unknown:
        raise SelectionRuleViolation(f"Unknown time slot {unknown[0]!r}.", rule="unknown_slot")

    chosen = sorted((by_id[s] for s in slot_ids), key=lambda v: index_of(v.slot))
    positions = [index_of(v.slot) for v in chosen]
    if positions != list(range(positions[0], positions[0] + len(positions))):
        raise SelectionRuleViolation("Selected slots must form a contiguous block.", rule="not_adjacent")

    for view in chosen:
        if view.is_disabled:
            raise SelectionRuleViolation(
                f"{view.slot.label} is no longer available for booking.", rule="slot_unavailable"
            )
        if view.is_user_booking:
            raise SelectionRuleViolation(
                f"You already have a reservation at {view.slot.label}.", rule="own_reservation"
            )

    return tuple(v.slot for v in chosen)


def _fmt_hours(slot_count: int) -> str:
    minutes = slot_count * SLOT_MINUTES
    if minutes % 60:
        return f"{minutes} minutes"
    hours = minutes // 60
    return f"{hours} hour{'s' if hours != 1 else ''}"
