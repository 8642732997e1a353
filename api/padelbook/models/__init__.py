"""All models imported here so Base.metadata sees every table."""

from padelbook.models.base import Base
from padelbook.models.profile import MemberProfile
from padelbook.models.reservation import Reservation

__all__ = [
    "Base",
    "MemberProfile",
    "Reservation",
]
