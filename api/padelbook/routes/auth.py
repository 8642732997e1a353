"""Authentication routes: start or resume a session."""

import logging

from fastapi import APIRouter

from padelbook.core.auth import create_access_token, sign_in
from padelbook.core.errors import AuthenticationFailed, to_http_exception
from padelbook.schemas import SessionOut, SessionRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/session", response_model=SessionOut)
async def start_session(body: SessionRequest | None = None):
    """Resume the identity of a previously issued token, or sign in anonymously."""
    try:
        user_id, is_anonymous = sign_in(body.token if body else None)
    except AuthenticationFailed as exc:
        raise to_http_exception(exc)

    return SessionOut(
        access_token=create_access_token(user_id),
        user_id=user_id,
        is_anonymous=is_anonymous,
    )
