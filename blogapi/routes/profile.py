"""
Author profile routes.
"""
from fastapi import APIRouter, Depends

from ..auth import get_admin_user
from ..dependencies import get_profile_service
from ..models.user import User
from ..responses import success
from ..schemas.profile import ProfileUpdate
from ..services import ProfileService

router = APIRouter(prefix="/api/v1", tags=["profile"])


@router.get("/profile")
def get_profile(profile_service: ProfileService = Depends(get_profile_service)):
    return success(profile_service.get_profile())


@router.put("/admin/profile")
def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_admin_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    return success(profile_service.update_profile(profile_data), "Profile updated")
