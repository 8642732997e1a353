"""Booking routes: cost preview, commit a block, list and cancel reservations."""

import logging

import aiosmtplib
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from padelbook.core.config import settings
from padelbook.core.database import get_db
from padelbook.core.dependencies import club_now, get_current_user_id, get_session_context
from padelbook.core.errors import ReservationError, ValidationError, to_http_exception
from padelbook.routes.days import cost_out, day_views
from padelbook.schemas import BookingCreate, BookingOut, CostOut, ReservationOut
from padelbook.services.booking import cancel_reservation, commit_block, list_user_reservations
from padelbook.services.email import send_booking_confirmation
from padelbook.services.selection import block_from_ids
from padelbook.services.session import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/cost", response_model=CostOut)
async def preview_cost(
    slots: int = Query(ge=0, le=settings.max_block_slots),
    guests: int = Query(default=0, ge=0, le=settings.max_guests),
):
    return cost_out(slots, guests)


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    context: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        if not body.privacy_agreed:
            raise ValidationError(
                "Please agree to the processing of your personal data to confirm the reservation.",
                rule="privacy_consent",
            )

        views = await day_views(db, body.date, context.user_id)
        block = block_from_ids(body.slot_ids, views, settings.max_block_slots)
        result = await commit_block(
            db,
            block,
            body.date,
            body.guest_count,
            context,
            court_count=settings.court_count,
            hourly_rate=settings.hourly_rate,
            per_guest_rate=settings.per_guest_rate,
        )
    except ReservationError as exc:
        raise to_http_exception(exc)

    if settings.send_confirmation_emails:
        try:
            await send_booking_confirmation(context.email, context.member_number, body.date, result)
        except (aiosmtplib.SMTPException, OSError):
            # The reservation stands; the member still sees the summary below
            logger.exception("Booking confirmation email to %s failed", context.email)

    return BookingOut(
        date=body.date,
        court=result.court,
        court_name=result.court_name,
        time_range=result.time_range,
        block_id=result.block_id,
        cost=cost_out(len(block), body.guest_count),
        reservations=[ReservationOut.model_validate(r) for r in result.reservations],
        message=(
            f"Successfully reserved {result.time_range} on {result.court_name}! "
            f"Total estimated cost: {settings.currency} {result.cost.total:.2f}."
        ),
    )


@router.get("", response_model=list[ReservationOut])
async def list_my_reservations(
    upcoming: bool = True,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    from_date = club_now().date() if upcoming else None
    return await list_user_reservations(db, user_id, from_date)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    reservation_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cancel one slot. Cancelling an already-removed reservation succeeds."""
    try:
        await cancel_reservation(db, reservation_id, user_id)
    except ReservationError as exc:
        raise to_http_exception(exc)
