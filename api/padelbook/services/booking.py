"""Booking commit and cancellation.

Commit re-reads the day's reservations, picks one court that is free for the
whole block (lowest court number first, never split across courts), and
writes one reservation per slot in a single transaction. The availability
check is advisory: the unique (date, slot, court) constraint in the store is
what actually prevents double-booking, and losing that race surfaces as an
AvailabilityConflict.
"""

import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from padelbook.core.errors import (
    AvailabilityConflict,
    NotReservationOwner,
    PersistenceFailure,
    SelectionRuleViolation,
    ValidationError,
)
from padelbook.models.reservation import Reservation, court_name, reservation_key
from padelbook.services.availability import COURT_COUNT, booked_courts
from padelbook.services.live import ReservationFeed, feed as live_feed
from padelbook.services.pricing import HOURLY_RATE, PER_GUEST_RATE, CostBreakdown, calculate_cost, per_slot_share
from padelbook.services.session import SessionContext
from padelbook.services.time_grid import Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingResult:
    court: int
    cost: CostBreakdown
    block_id: str
    time_range: str
    reservations: list[Reservation]

    @property
    def court_name(self) -> str:
        return court_name(self.court)


async def load_reservations(db: AsyncSession, day: date) -> list[Reservation]:
    result = await db.execute(
        select(Reservation).where(Reservation.reservation_date == day).order_by(Reservation.time_slot, Reservation.court)
    )
    return list(result.scalars().all())


async def list_user_reservations(db: AsyncSession, user_id: str, from_date: date | None = None) -> list[Reservation]:
    query = select(Reservation).where(Reservation.user_id == user_id)
    if from_date is not None:
        query = query.where(Reservation.reservation_date >= from_date)
    result = await db.execute(query.order_by(Reservation.reservation_date, Reservation.time_slot))
    return list(result.scalars().all())


def pick_court(block: Sequence[Slot], day: date, reservations: Iterable[Any], court_count: int = COURT_COUNT) -> int | None:
    """Return the first court free on every slot of block, or None."""
    reservations = list(reservations)
    taken = [booked_courts(day, slot, reservations) for slot in block]

    for court in range(1, court_count + 1):
        if all(court not in courts for courts in taken):
            return court

    return None


async def commit_block(
    db: AsyncSession,
    block: Sequence[Slot],
    day: date,
    guest_count: int,
    context: SessionContext,
    *,
    court_count: int = COURT_COUNT,
    hourly_rate: int = HOURLY_RATE,
    per_guest_rate: int = PER_GUEST_RATE,
    feed: ReservationFeed = live_feed,
) -> BookingResult:
    """Reserve one court for every slot in block, all or nothing."""
    if not block:
        raise SelectionRuleViolation("Please select at least one time slot to proceed.", rule="empty_selection")
    if not context.has_contact:
        raise ValidationError(
            "Sign-in is not complete. Please make sure your member number and email are entered.",
            rule="missing_profile",
        )

    cost = calculate_cost(len(block), guest_count, hourly_rate, per_guest_rate)

    # The re-check must finish before anything is written
    existing = await load_reservations(db, day)
    court = pick_court(block, day, existing, court_count)
    if court is None:
        raise AvailabilityConflict(
            "A court became fully booked during your selection. Please re-select your desired time block."
        )

    block_id = uuid.uuid4().hex
    share = per_slot_share(cost.total, len(block))
    records = [
        Reservation(
            id=reservation_key(day, slot.id, court),
            reservation_date=day,
            time_slot=slot.label,
            court=court,
            user_id=context.user_id,
            member_number=context.member_number,
            email=context.email,
            block_id=block_id,
            guest_count=guest_count,
            estimated_cost=share,
        )
        for slot in block
    ]

    db.add_all(records)
    try:
        await db.flush()
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Lost race for %s on %s %s, block rolled back", court_name(court), day, block[0].label)
        raise AvailabilityConflict(
            "Someone else just booked part of this block. Please re-select your desired time block."
        ) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to write reservation block %s", block_id)
        raise PersistenceFailure("Failed to make reservation. Please try again.") from exc

    time_range = f"{block[0].start.strftime('%H:%M')} - {block[-1].end.strftime('%H:%M')}"
    logger.info(
        "Reserved %s on %s %s for user %s (block %s, total %s)",
        court_name(court), day, time_range, context.user_id, block_id, cost.total,
    )
    feed.publish(day)

    return BookingResult(court=court, cost=cost, block_id=block_id, time_range=time_range, reservations=records)


async def cancel_reservation(
    db: AsyncSession,
    reservation_id: str,
    user_id: str,
    feed: ReservationFeed = live_feed,
) -> bool:
    """Delete one of the user's reservations.

    Returns False when the reservation no longer exists; cancelling twice is
    not an error.
    """
    reservation = await db.get(Reservation, reservation_id)
    if reservation is None:
        logger.info("Reservation %s already cancelled", reservation_id)
        return False

    if reservation.user_id != user_id:
        raise NotReservationOwner("You can only cancel your own reservations.")

    day = reservation.reservation_date
    try:
        await db.delete(reservation)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to cancel reservation %s", reservation_id)
        raise PersistenceFailure("Failed to cancel reservation. Please try again.") from exc

    logger.info("Cancelled reservation %s for user %s", reservation_id, user_id)
    feed.publish(day)
    return True
