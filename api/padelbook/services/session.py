"""Per-request session context and member profile validation."""

from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from padelbook.core.errors import ValidationError


@dataclass(frozen=True)
class SessionContext:
    """Who is acting: the signed-in user id plus the stored profile, if any."""

    user_id: str
    member_number: str | None = None
    email: str | None = None

    @property
    def has_contact(self) -> bool:
        return bool(self.user_id and self.member_number and self.email)


def validate_profile(member_number: str, email: str) -> tuple[str, str]:
    """Trim and validate profile fields. Returns the cleaned (member_number, email)."""
    member_number = (member_number or "").strip()
    email = (email or "").strip()

    if not member_number:
        raise ValidationError("Please enter your member number.", rule="member_number")

    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please enter a valid email address for confirmation.", rule="email")

    return member_number, email
