"""Pydantic schemas for API serialisation."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from padelbook.core.config import settings

# --- Auth ---


class SessionRequest(BaseModel):
    token: str | None = None  # previously issued token to resume an identity


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    is_anonymous: bool


# --- Profile ---


class ProfileIn(BaseModel):
    member_number: str
    email: str


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    member_number: str
    email: str


# --- Availability ---


class SpecialStatusOut(BaseModel):
    status: str
    message: str


class SlotViewOut(BaseModel):
    id: str  # "06-00-06-30"
    time: str  # "06:00 - 06:30"
    index: int
    booked_count: int
    available_courts: int
    is_fully_booked: bool
    is_past: bool
    is_special: bool
    is_disabled: bool
    is_selectable: bool
    is_user_booking: bool
    user_reservation_ids: list[str]
    special_status: SpecialStatusOut


class DayOut(BaseModel):
    date: date
    court_count: int
    slots: list[SlotViewOut]


# --- Selection ---


class ToggleRequest(BaseModel):
    selected: list[str] = []  # slot ids currently held by the client
    slot_id: str


class SelectionOut(BaseModel):
    date: date
    state: str  # "empty" | "building"
    selected: list[str]
    time_range: str
    message: str


class CostOut(BaseModel):
    currency: str
    slot_count: int
    guest_count: int
    court_fee: Decimal
    guest_fee: Decimal
    total: Decimal


class SummaryRequest(BaseModel):
    selected: list[str]
    guest_count: int = Field(default=0, ge=0, le=settings.max_guests)


class SummaryOut(BaseModel):
    date: date
    time_range: str
    total_slots: int
    duration_minutes: int
    cost: CostOut


# --- Booking ---


class BookingCreate(BaseModel):
    date: date
    slot_ids: list[str]
    guest_count: int = Field(default=0, ge=0, le=settings.max_guests)
    privacy_agreed: bool = False


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    reservation_date: date
    time_slot: str
    court: int
    court_name: str
    user_id: str
    member_number: str
    email: str
    block_id: str
    guest_count: int
    estimated_cost: Decimal
    created_at: datetime | None = None


class BookingOut(BaseModel):
    date: date
    court: int
    court_name: str
    time_range: str
    block_id: str
    cost: CostOut
    reservations: list[ReservationOut]
    message: str
