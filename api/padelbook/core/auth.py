"""Identity: JWT access tokens and sign-in with anonymous fallback.

Users are identified by an opaque id. A client that already holds a token
(or a deployment-wide initial token) resumes that identity; otherwise, or
when the token is rejected, a fresh anonymous id is issued.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from padelbook.core.config import settings
from padelbook.core.errors import AuthenticationFailed

logger = logging.getLogger(__name__)


def create_access_token(subject: str, extra: dict | None = None) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": subject, "exp": expire, "type": "access"}
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def user_id_from_token(token: str) -> str:
    """Return the user id of a valid access token. Raises AuthenticationFailed otherwise."""
    try:
        payload = decode_token(token)
    except JWTError:
        raise AuthenticationFailed("Invalid or expired session. Please sign in again.")

    if payload.get("type") != "access" or not payload.get("sub"):
        raise AuthenticationFailed("Invalid session token.")
    return payload["sub"]


def new_anonymous_id() -> str:
    return uuid.uuid4().hex


def sign_in(custom_token: str | None = None) -> tuple[str, bool]:
    """Resolve the caller's identity. Returns (user_id, is_anonymous).

    A rejected custom token is retried once as an anonymous sign-in when
    anonymous access is allowed.
    """
    token = custom_token or settings.initial_auth_token
    if token:
        try:
            return user_id_from_token(token), False
        except AuthenticationFailed as exc:
            if not settings.allow_anonymous:
                logger.warning("Custom token sign-in failed: %s", exc.message)
                raise
            logger.warning("Custom token sign-in failed (%s), falling back to anonymous sign-in", exc.message)

    if not settings.allow_anonymous:
        raise AuthenticationFailed("Sign-in required. Anonymous access is disabled.")

    user_id = new_anonymous_id()
    logger.info("Anonymous sign-in as %s", user_id)
    return user_id, True
