"""FastAPI dependencies for injection into route handlers."""

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from padelbook.core.auth import user_id_from_token
from padelbook.core.config import settings
from padelbook.core.database import get_db
from padelbook.core.errors import AuthenticationFailed, to_http_exception
from padelbook.models.profile import MemberProfile
from padelbook.services.session import SessionContext

bearer_scheme = HTTPBearer(auto_error=False)


def club_now() -> datetime:
    """Current time on the club's wall clock, the same clock slot times use."""
    return datetime.now(ZoneInfo(settings.timezone))


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Extract and validate the current user id from the JWT bearer token."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    try:
        return user_id_from_token(credentials.credentials)
    except AuthenticationFailed as exc:
        raise to_http_exception(exc)


async def get_session_context(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """The signed-in user plus their stored member profile, if any."""
    profile = await db.get(MemberProfile, user_id)
    if profile is None:
        return SessionContext(user_id=user_id)
    return SessionContext(user_id=user_id, member_number=profile.member_number, email=profile.email)
