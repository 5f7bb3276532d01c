"""Profile router - The signed-in account's business details"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...database import get_db
from ...errors import PersistenceError
from ...models import Profile
from ...shared.responses import ApiResponse
from .schemas import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=ApiResponse[ProfileResponse])
async def get_profile(profile: Profile = Depends(get_current_profile)):
    return ApiResponse(data=ProfileResponse.model_validate(profile))


@router.put("", response_model=ApiResponse[ProfileResponse])
async def update_profile(
    data: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Update the business snapshot used on invoices and emails"""
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    try:
        db.commit()
        db.refresh(profile)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to update profile {profile.id}: {e}")
        raise PersistenceError("Failed to update profile") from e

    logger.info(f"👤 Updated profile {profile.id}")
    return ApiResponse(data=ProfileResponse.model_validate(profile))
