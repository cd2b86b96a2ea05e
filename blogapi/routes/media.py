"""
Media upload routes.
"""
from fastapi import APIRouter, Depends, File, UploadFile

from ..auth import get_admin_user
from ..config import get_settings
from ..dependencies import get_media_service
from ..models.user import User
from ..responses import created, deleted, success
from ..schemas.media import UploadResponse
from ..services import MediaService
from ..services.media import EDITOR_MAX_SIZE

router = APIRouter(prefix="/api/v1", tags=["media"])


@router.post("/admin/media", status_code=201)
def upload_media(
    file: UploadFile = File(...),
    current_user: User = Depends(get_admin_user),
    media_service: MediaService = Depends(get_media_service),
):
    """Upload an image to the media library."""
    # One byte over the limit is enough to reject the file
    content = file.file.read(get_settings().max_upload_size + 1)
    return created(media_service.upload(file.filename or "", content, current_user))


@router.get("/admin/media")
def list_media(
    current_user: User = Depends(get_admin_user),
    media_service: MediaService = Depends(get_media_service),
):
    """List the current user's uploads, newest first."""
    return success(media_service.list_for_uploader(current_user))


@router.delete("/admin/media/{media_id}")
def delete_media(
    media_id: int,
    current_user: User = Depends(get_admin_user),
    media_service: MediaService = Depends(get_media_service),
):
    media_service.delete(media_id, current_user)
    return deleted("Media deleted")


@router.post("/admin/upload", status_code=201)
def upload_editor_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_admin_user),
    media_service: MediaService = Depends(get_media_service),
):
    """Upload an image for use inside post content."""
    content = file.file.read(EDITOR_MAX_SIZE + 1)
    url = media_service.save_editor_image(file.filename or "", content)
    return created(UploadResponse(url=url))


@router.get("/media/{media_id}")
def get_media(media_id: int, media_service: MediaService = Depends(get_media_service)):
    return success(media_service.get(media_id))
