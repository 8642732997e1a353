"""Cost estimate for a booking block.

The court fee is charged per 30-minute slot at half the hourly rate; each
guest adds a flat fee. Amounts are estimates shown to the member, nothing is
charged here.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

# Defaults, overridable through settings
HOURLY_RATE = 500
PER_GUEST_RATE = 200

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class CostBreakdown:
    court_fee: Decimal
    guest_fee: Decimal
    total: Decimal


def calculate_cost(
    slot_count: int,
    guest_count: int,
    hourly_rate: int | Decimal = HOURLY_RATE,
    per_guest_rate: int | Decimal = PER_GUEST_RATE,
) -> CostBreakdown:
    """Estimate the fee for slot_count half-hour slots and guest_count guests."""
    if slot_count < 0 or guest_count < 0:
        raise ValueError("slot_count and guest_count must not be negative")

    court_fee = slot_count * (Decimal(hourly_rate) / 2)
    guest_fee = guest_count * Decimal(per_guest_rate)
    return CostBreakdown(court_fee=court_fee, guest_fee=guest_fee, total=court_fee + guest_fee)


def per_slot_share(total: Decimal, slot_count: int) -> Decimal:
    """Even share of a block's total stored on each slot's reservation."""
    return (total / slot_count).quantize(_CENTS, rounding=ROUND_HALF_UP)
