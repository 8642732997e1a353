"""Email sending via SMTP."""

import logging
from datetime import date
from email.message import EmailMessage

import aiosmtplib

from padelbook.core.config import settings
from padelbook.services.booking import BookingResult

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email via SMTP."""
    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    await aiosmtplib.send(message, hostname=settings.smtp_host, port=settings.smtp_port)


async def send_booking_confirmation(to: str, member_number: str, day: date, result: BookingResult) -> None:
    """Send the reservation summary to the member's contact email."""
    body = (
        f"Hi,\n\n"
        f"Your padel court reservation is confirmed.\n\n"
        f"Member number: {member_number}\n"
        f"Date: {day.strftime('%a %d %b %Y')}\n"
        f"Time: {result.time_range}\n"
        f"Court: {result.court_name}\n"
        f"Estimated cost: {settings.currency} {result.cost.total:.2f}\n\n"
        f"To cancel, open the reservation page and cancel each slot you no longer need.\n\n"
        f"{settings.app_name}"
    )
    await send_email(to, f"Court reservation {day.isoformat()} {result.time_range}", body)
    logger.info("Booking confirmation sent to %s", to)
