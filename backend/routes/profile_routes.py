import logging

from fastapi import APIRouter, Depends

from auth import CurrentUser, get_current_user
from errors import UpstreamError
from schemas import ProfileUpdate
from services.category_service import CategoryService
from services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["Profile"])
category_router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("")
async def get_profile(user: CurrentUser = Depends(get_current_user)):
    """The caller's profile, or null when none exists yet."""
    try:
        return ProfileService.get(user.db, user.id)
    except UpstreamError as e:
        logger.error(f"Error fetching profile: {e}")
        raise UpstreamError("Could not fetch the profile.") from e


@router.put("")
async def update_profile(profile_data: ProfileUpdate, user: CurrentUser = Depends(get_current_user)):
    try:
        data = profile_data.model_dump(mode="json", exclude_none=True)
        profile = ProfileService.update(user.db, user.id, data)
        return {"message": "Profile updated successfully!", "profile": profile}
    except UpstreamError as e:
        logger.error(f"Error updating profile: {e}")
        raise UpstreamError("Could not update the profile.") from e


@category_router.get("")
async def list_categories(user: CurrentUser = Depends(get_current_user)):
    try:
        return CategoryService.list_for(user.db, user.id)
    except UpstreamError as e:
        logger.error(f"Error fetching categories: {e}")
        raise UpstreamError("Could not fetch the categories.") from e
