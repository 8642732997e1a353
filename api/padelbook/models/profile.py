"""Member profile: the member number and contact email kept across sessions."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from padelbook.models.base import Base, TimestampMixin


class MemberProfile(TimestampMixin, Base):
    __tablename__ = "member_profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    member_number: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)

    def __repr__(self) -> str:
        return f"<MemberProfile {self.user_id} #{self.member_number}>"
