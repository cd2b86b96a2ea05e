"""
Image uploads stored on local disk.
"""
import io
import os
import uuid
import warnings
from typing import List, Tuple

from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from ..database import transaction
from ..errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from ..logging_config import api_logger
from ..models.media import MediaFile
from ..models.user import User
from ..repositories import MediaRepository
from ..schemas.media import MediaResponse

MEDIA_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
EDITOR_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
EDITOR_MAX_SIZE = 5 * 1024 * 1024  # 5 MB
EDITOR_URL_PREFIX = "/uploads/"


def inspect_image(content: bytes) -> str:
    """MIME type of ``content`` if Pillow can decode it as an image.

    Images past Pillow's pixel limit are refused outright instead of being
    decoded with a warning.
    """
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(content)) as image:
                image.verify()
                image_format = image.format
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
        raise ValidationFailedError("image dimensions are too large", {"file": str(e)}) from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ValidationFailedError("file is not a valid image", {"file": str(e)}) from e

    return Image.MIME.get(image_format or "", "application/octet-stream")


def _extension(filename: str, allowed: set) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in allowed:
        raise ValidationFailedError(
            "unsupported file type",
            {"file": f"allowed extensions: {', '.join(sorted(allowed))}"},
        )
    return ext


class MediaService:
    def __init__(self, db: Session, upload_path: str, base_url: str, max_size: int):
        self.db = db
        self.upload_path = upload_path
        self.base_url = base_url.rstrip("/")
        self.max_size = max_size
        self.media = MediaRepository(db)

    def upload(self, filename: str, content: bytes, uploader: User) -> MediaResponse:
        """Validate, store and record an image."""
        self._check_size(content, self.max_size)
        ext = _extension(filename, MEDIA_EXTENSIONS)
        mime_type = inspect_image(content)

        stored_name, path = self._write(f"{uploader.id}_{uuid.uuid4().hex}{ext}", content)

        try:
            with transaction(self.db):
                media = self.media.create(
                    filename=os.path.basename(filename),
                    mime_type=mime_type,
                    size=len(content),
                    uploader_id=uploader.id,
                    storage_path=path,
                )
        except Exception:
            self._remove_file(path)
            raise

        api_logger.info("Media uploaded", media_id=media.id, stored_as=stored_name, size=len(content))
        return self.present(media)

    def save_editor_image(self, filename: str, content: bytes) -> str:
        """Store an inline editor image and return its public path."""
        self._check_size(content, EDITOR_MAX_SIZE)
        ext = _extension(filename, EDITOR_EXTENSIONS)
        inspect_image(content)

        stored_name, _ = self._write(f"{uuid.uuid4().hex}{ext}", content)
        api_logger.info("Editor image uploaded", stored_as=stored_name, size=len(content))
        return f"{EDITOR_URL_PREFIX}{stored_name}"

    def get(self, media_id: int) -> MediaResponse:
        return self.present(self._get(media_id))

    def list_for_uploader(self, uploader: User) -> List[MediaResponse]:
        return [self.present(m) for m in self.media.list_by_uploader(uploader.id)]

    def delete(self, media_id: int, user: User) -> None:
        media = self._get(media_id)
        if media.uploader_id != user.id:
            raise PermissionDeniedError("you can only delete your own media")

        self._remove_file(media.storage_path)
        with transaction(self.db):
            self.media.delete(media)

        api_logger.info("Media deleted", media_id=media_id, user_id=user.id)

    def present(self, media: MediaFile) -> MediaResponse:
        return MediaResponse(
            id=media.id,
            filename=media.filename,
            url=f"{self.base_url}/media/{os.path.basename(media.storage_path)}",
            mime_type=media.mime_type,
            size=media.size,
            uploader_id=media.uploader_id,
            uploaded_at=media.uploaded_at,
        )

    def _get(self, media_id: int) -> MediaFile:
        media = self.media.get_by_id(media_id)
        if media is None:
            raise NotFoundError("media")
        return media

    def _check_size(self, content: bytes, limit: int) -> None:
        if not content:
            raise ValidationFailedError("file is empty", {"file": "no content"})
        if len(content) > limit:
            raise ValidationFailedError(
                "file too large",
                {"file": f"maximum size is {limit // (1024 * 1024)} MB"},
            )

    def _write(self, stored_name: str, content: bytes) -> Tuple[str, str]:
        os.makedirs(self.upload_path, exist_ok=True)
        path = os.path.join(self.upload_path, stored_name)
        with open(path, "wb") as f:
            f.write(content)
        return stored_name, path

    def _remove_file(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            api_logger.warning("Failed to remove media file", path=path, error_message=str(e))
