"""Reservation model.

One row per (date, slot, court). A multi-slot booking is several rows sharing
a block_id. Rows are created by the commit resolver and deleted by
cancellation; they are never updated in place.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from padelbook.models.base import Base


def court_name(court: int) -> str:
    return f"Court {court}"


def reservation_key(reservation_date: date, slot_id: str, court: int) -> str:
    """Stable storage key, e.g. "2026-10-19-06-00-06-30-Court1"."""
    return f"{reservation_date.isoformat()}-{slot_id}-Court{court}"


class Reservation(Base):
    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # When / where
    reservation_date: Mapped[date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(20), nullable=False)  # "06:00 - 06:30"
    court: Mapped[int] = mapped_column(nullable=False)

    # Who
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    member_number: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)

    # Block
    block_id: Mapped[str] = mapped_column(String(32), nullable=False)
    guest_count: Mapped[int] = mapped_column(default=0, nullable=False)
    estimated_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # per-slot share

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        # The only guard against double-booking: one reservation per court per slot
        UniqueConstraint("reservation_date", "time_slot", "court", name="uq_reservations_slot_court"),
        Index("ix_reservations_date", "reservation_date"),
        Index("ix_reservations_user", "user_id", "reservation_date"),
    )

    @property
    def court_name(self) -> str:
        return court_name(self.court)

    def __repr__(self) -> str:
        return f"<Reservation {self.reservation_date} {self.time_slot} court={self.court}>"
