"""Day routes: slot availability, live updates, and block selection."""

import json
import logging
from collections.abc import AsyncIterator
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from padelbook.core.config import settings
from padelbook.core.database import async_session_factory, get_db
from padelbook.core.dependencies import club_now, get_current_user_id, get_session_context
from padelbook.core.errors import ReservationError, to_http_exception
from padelbook.schemas import (
    CostOut,
    DayOut,
    SelectionOut,
    SlotViewOut,
    SpecialStatusOut,
    SummaryOut,
    SummaryRequest,
    ToggleRequest,
)
from padelbook.services.availability import SlotView, resolve
from padelbook.services.booking import load_reservations
from padelbook.services.live import feed
from padelbook.services.pricing import calculate_cost
from padelbook.services.selection import Selection
from padelbook.services.session import SessionContext
from padelbook.services.time_grid import generate_slots, slot_by_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/days", tags=["days"])


async def day_views(db: AsyncSession, day: date, user_id: str | None) -> list[SlotView]:
    """Read the day's reservations and derive the slot grid for user_id."""
    reservations = await load_reservations(db, day)
    return resolve(day, generate_slots(), reservations, user_id, club_now(), settings.court_count)


def _view_out(view: SlotView) -> SlotViewOut:
    return SlotViewOut(
        id=view.slot.id,
        time=view.slot.label,
        index=view.slot.index,
        booked_count=view.booked_count,
        available_courts=view.available_courts,
        is_fully_booked=view.is_fully_booked,
        is_past=view.is_past,
        is_special=view.is_special,
        is_disabled=view.is_disabled,
        is_selectable=view.is_selectable,
        is_user_booking=view.is_user_booking,
        user_reservation_ids=[r.id for r in view.user_reservations],
        special_status=SpecialStatusOut(status=view.special_status.status, message=view.special_status.message),
    )


def _day_out(day: date, views: list[SlotView]) -> DayOut:
    return DayOut(date=day, court_count=settings.court_count, slots=[_view_out(v) for v in views])


def cost_out(slot_count: int, guest_count: int) -> CostOut:
    cost = calculate_cost(slot_count, guest_count, settings.hourly_rate, settings.per_guest_rate)
    return CostOut(
        currency=settings.currency,
        slot_count=slot_count,
        guest_count=guest_count,
        court_fee=cost.court_fee,
        guest_fee=cost.guest_fee,
        total=cost.total,
    )


@router.get("/{day}/slots", response_model=DayOut)
async def get_day(
    day: date,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    views = await day_views(db, day, user_id)
    return _day_out(day, views)


def _sse_line(obj: dict) -> bytes:
    return f"data: {json.dumps(obj)}\n\n".encode()


async def _stream_day_sse(day: date, user_id: str) -> AsyncIterator[bytes]:
    """Yield the slot grid on connect and again after every change on that day."""
    async with feed.subscribe(day) as changes:
        while True:
            try:
                async with async_session_factory() as db:
                    views = await day_views(db, day, user_id)
            except SQLAlchemyError:
                logger.exception("Live reservation read failed for %s", day)
                yield _sse_line({"error": "Error fetching real-time reservations."})
                return
            yield _sse_line(_day_out(day, views).model_dump(mode="json"))
            await anext(changes)


@router.get("/{day}/stream")
async def stream_day(day: date, user_id: str = Depends(get_current_user_id)):
    """Server-sent events: the recomputed slot grid each time reservations change."""
    return StreamingResponse(
        _stream_day_sse(day, user_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/{day}/selection", response_model=SelectionOut)
async def toggle_slot(
    day: date,
    body: ToggleRequest,
    context: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    """Apply one click to the client's current selection and return the new block."""
    views = await day_views(db, day, context.user_id)
    try:
        selection = Selection.from_ids(body.selected, views, settings.max_block_slots)
        message = selection.toggle(views[slot_by_id(body.slot_id).index])
    except ReservationError as exc:
        raise to_http_exception(exc)

    return SelectionOut(
        date=day,
        state=selection.state,
        selected=[s.id for s in selection.slots],
        time_range=selection.time_range,
        message=message,
    )


@router.post("/{day}/selection/summary", response_model=SummaryOut)
async def selection_summary(
    day: date,
    body: SummaryRequest,
    context: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    """Confirmation step data: time range, slot count, and estimated cost."""
    views = await day_views(db, day, context.user_id)
    try:
        selection = Selection.from_ids(body.selected, views, settings.max_block_slots)
        summary = selection.summary(context)
    except ReservationError as exc:
        raise to_http_exception(exc)

    return SummaryOut(
        date=day,
        time_range=summary.time_range,
        total_slots=summary.total_slots,
        duration_minutes=summary.duration_minutes,
        cost=cost_out(summary.total_slots, body.guest_count),
    )
