"""Create the tables and seed demo reservations.

Run with: python -m scripts.seed
Books a few blocks on tomorrow's grid for two demo members so the slot grid
shows partly and fully booked slots.
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import delete

from padelbook.core.config import settings
from padelbook.core.database import async_session_factory, engine
from padelbook.models import Base, MemberProfile, Reservation
from padelbook.services.booking import commit_block
from padelbook.services.live import ReservationFeed
from padelbook.services.session import SessionContext
from padelbook.services.time_grid import generate_slots

MEMBERS = [
    SessionContext(user_id="demo-member-1", member_number="MPC-1001", email="member1@example.com"),
    SessionContext(user_id="demo-member-2", member_number="MPC-1002", email="member2@example.com"),
]

# (member index, first slot index, slot count, guests)
# Slots 0-1 (06:00-07:00) end up fully booked. None of these fall in special hours.
BLOCKS = [
    (0, 0, 2, 1),
    (1, 0, 4, 0),
    (0, 24, 2, 3),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    day = date.today() + timedelta(days=1)
    slots = generate_slots()
    quiet_feed = ReservationFeed()

    async with async_session_factory() as db:
        await db.execute(delete(Reservation).where(Reservation.reservation_date == day))
        for member in MEMBERS:
            await db.merge(
                MemberProfile(user_id=member.user_id, member_number=member.member_number, email=member.email)
            )
        await db.commit()

        for member_index, first, count, guests in BLOCKS:
            result = await commit_block(
                db,
                slots[first:first + count],
                day,
                guests,
                MEMBERS[member_index],
                court_count=settings.court_count,
                hourly_rate=settings.hourly_rate,
                per_guest_rate=settings.per_guest_rate,
                feed=quiet_feed,
            )
            print(f"  {MEMBERS[member_index].member_number}: {result.time_range} on {result.court_name}")

    print(f"Seeded {len(BLOCKS)} blocks on {day.isoformat()}")


if __name__ == "__main__":
    asyncio.run(seed())
