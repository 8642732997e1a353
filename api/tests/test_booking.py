"""Commit resolver and cancellation against a real (SQLite) store."""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from padelbook.core.database import async_session_factory
from padelbook.core.errors import (
    AvailabilityConflict,
    NotReservationOwner,
    PersistenceFailure,
    SelectionRuleViolation,
    ValidationError,
)
from padelbook.models import Reservation
from padelbook.models.reservation import reservation_key
from padelbook.services.booking import cancel_reservation, commit_block, list_user_reservations, load_reservations
from padelbook.services.live import ReservationFeed
from padelbook.services.session import SessionContext
from padelbook.services.time_grid import generate_slots

DAY = date(2026, 10, 26)
SLOTS = generate_slots()

ALICE = SessionContext("alice", "MPC-1", "alice@manilapolo.com.ph")
BOB = SessionContext("bob", "MPC-2", "bob@manilapolo.com.ph")


async def _count(db) -> int:
    return (await db.execute(select(func.count()).select_from(Reservation))).scalar_one()


async def _occupy(index: int, court: int, user: SessionContext = BOB) -> None:
    """Insert a reservation from another session, as a concurrent writer would."""
    slot = SLOTS[index]
    async with async_session_factory() as other:
        other.add(
            Reservation(
                id=reservation_key(DAY, slot.id, court),
                reservation_date=DAY,
                time_slot=slot.label,
                court=court,
                user_id=user.user_id,
                member_number=user.member_number,
                email=user.email,
                block_id="existing",
                guest_count=0,
                estimated_cost=Decimal("250.00"),
            )
        )
        await other.commit()


class TestCommit:
    async def test_writes_one_row_per_slot(self, db):
        feed = ReservationFeed()
        result = await commit_block(db, SLOTS[5:7], DAY, 1, ALICE, feed=feed)

        assert result.court == 1
        assert result.court_name == "Court 1"
        assert result.cost.total == 700
        assert result.time_range == "08:30 - 09:30"

        rows = await load_reservations(db, DAY)
        assert [r.time_slot for r in rows] == ["08:30 - 09:00", "09:00 - 09:30"]
        assert {r.court for r in rows} == {1}
        assert {r.block_id for r in rows} == {result.block_id}
        assert all(r.estimated_cost == Decimal("350.00") for r in rows)
        assert all(r.guest_count == 1 and r.user_id == "alice" for r in rows)
        assert rows[0].id == f"2026-10-26-{SLOTS[5].id}-Court1"

    async def test_keeps_block_on_one_court(self, db):
        await _occupy(6, court=2)
        result = await commit_block(db, SLOTS[5:7], DAY, 0, ALICE, feed=ReservationFeed())
        assert result.court == 1

    async def test_falls_back_to_court_two(self, db):
        await _occupy(5, court=1)
        result = await commit_block(db, SLOTS[5:7], DAY, 0, ALICE, feed=ReservationFeed())
        assert result.court == 2

    async def test_no_single_court_writes_nothing(self, db):
        await _occupy(5, court=1)
        await _occupy(6, court=2)

        with pytest.raises(AvailabilityConflict):
            await commit_block(db, SLOTS[5:7], DAY, 0, ALICE, feed=ReservationFeed())
        assert await _count(db) == 2

    async def test_lost_race_rolls_back_whole_block(self, db):
        # The availability re-read misses a concurrent writer; the unique key catches it
        await _occupy(6, court=1)
        with patch("padelbook.services.booking.load_reservations", new=AsyncMock(return_value=[])):
            with pytest.raises(AvailabilityConflict):
                await commit_block(db, SLOTS[5:7], DAY, 0, ALICE, feed=ReservationFeed())

        assert await _count(db) == 1
        assert (await load_reservations(db, DAY))[0].user_id == "bob"

    async def test_store_failure(self, db):
        with patch.object(db, "flush", new=AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down")))):
            with pytest.raises(PersistenceFailure):
                await commit_block(db, SLOTS[5:7], DAY, 0, ALICE, feed=ReservationFeed())

    async def test_requires_block_and_contact(self, db):
        with pytest.raises(SelectionRuleViolation):
            await commit_block(db, [], DAY, 0, ALICE, feed=ReservationFeed())
        with pytest.raises(ValidationError):
            await commit_block(db, SLOTS[5:7], DAY, 0, SessionContext("anon"), feed=ReservationFeed())

    async def test_publishes_day(self, db):
        feed = ReservationFeed()
        async with feed.subscribe(DAY) as changes:
            await commit_block(db, SLOTS[5:6], DAY, 0, ALICE, feed=feed)
            assert changes.pending is True

    async def test_conflict_not_published(self, db):
        await _occupy(5, court=1)
        await _occupy(5, court=2)
        feed = ReservationFeed()
        async with feed.subscribe(DAY) as changes:
            with pytest.raises(AvailabilityConflict):
                await commit_block(db, SLOTS[5:6], DAY, 0, ALICE, feed=feed)
            assert changes.pending is False

    async def test_unique_key_enforced_by_store(self, db):
        await _occupy(5, court=1)
        slot = SLOTS[5]
        db.add(
            Reservation(
                id="another-key",
                reservation_date=DAY,
                time_slot=slot.label,
                court=1,
                user_id="carol",
                member_number="MPC-3",
                email="carol@manilapolo.com.ph",
                block_id="x",
                guest_count=0,
                estimated_cost=Decimal("250.00"),
            )
        )
        with pytest.raises(IntegrityError):
            await db.commit()
        await db.rollback()


class TestCancel:
    async def test_cancel_own(self, db):
        result = await commit_block(db, SLOTS[5:7], DAY, 0, ALICE, feed=ReservationFeed())
        first = result.reservations[0].id

        assert await cancel_reservation(db, first, "alice", feed=ReservationFeed()) is True
        remaining = await list_user_reservations(db, "alice")
        assert [r.time_slot for r in remaining] == ["09:00 - 09:30"]

    async def test_cancel_twice_is_noop(self, db):
        result = await commit_block(db, SLOTS[5:6], DAY, 0, ALICE, feed=ReservationFeed())
        reservation_id = result.reservations[0].id

        assert await cancel_reservation(db, reservation_id, "alice", feed=ReservationFeed()) is True
        assert await cancel_reservation(db, reservation_id, "alice", feed=ReservationFeed()) is False

    async def test_cancel_missing_id(self, db):
        assert await cancel_reservation(db, "no-such-reservation", "alice", feed=ReservationFeed()) is False

    async def test_cannot_cancel_others(self, db):
        await _occupy(5, court=1, user=BOB)
        with pytest.raises(NotReservationOwner):
            await cancel_reservation(db, reservation_key(DAY, SLOTS[5].id, 1), "alice", feed=ReservationFeed())
        assert await _count(db) == 1

    async def test_cancel_frees_court(self, db):
        await _occupy(5, court=1, user=ALICE)
        await _occupy(5, court=2)
        await cancel_reservation(db, reservation_key(DAY, SLOTS[5].id, 1), "alice", feed=ReservationFeed())

        result = await commit_block(db, SLOTS[5:6], DAY, 0, ALICE, feed=ReservationFeed())
        assert result.court == 1

    async def test_list_upcoming_only(self, db):
        await commit_block(db, SLOTS[5:6], DAY, 0, ALICE, feed=ReservationFeed())
        await commit_block(db, SLOTS[5:6], DAY + timedelta(days=7), 0, ALICE, feed=ReservationFeed())

        upcoming = await list_user_reservations(db, "alice", from_date=DAY + timedelta(days=1))
        assert len(upcoming) == 1
        assert upcoming[0].reservation_date == DAY + timedelta(days=7)
