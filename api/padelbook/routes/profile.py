"""Member profile routes: member number and contact email kept across sessions."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from padelbook.core.database import get_db
from padelbook.core.dependencies import get_current_user_id
from padelbook.core.errors import ValidationError, to_http_exception
from padelbook.models.profile import MemberProfile
from padelbook.schemas import ProfileIn, ProfileOut
from padelbook.services.session import validate_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileOut)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    profile = await db.get(MemberProfile, user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not set")
    return profile


@router.put("", response_model=ProfileOut)
async def save_profile(
    body: ProfileIn,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        member_number, email = validate_profile(body.member_number, body.email)
    except ValidationError as exc:
        raise to_http_exception(exc)

    profile = await db.get(MemberProfile, user_id)
    if profile is None:
        profile = MemberProfile(user_id=user_id, member_number=member_number, email=email)
        db.add(profile)
        logger.info("Profile created for user %s", user_id)
    else:
        profile.member_number = member_number
        profile.email = email

    await db.commit()
    return ProfileOut(user_id=user_id, member_number=member_number, email=email)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_profile(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Sign-out: forget the stored member number and email."""
    profile = await db.get(MemberProfile, user_id)
    if profile is not None:
        await db.delete(profile)
        await db.commit()
        logger.info("Profile cleared for user %s", user_id)
