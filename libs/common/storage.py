"""Object storage for uploaded documents (Supabase Storage)."""

from functools import lru_cache
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError
from supabase import Client, create_client

from libs.common.config import get_settings
from libs.common.errors import UpstreamError, ValidationFailed
from libs.common.logging import get_logger

logger = get_logger(__name__)

MAX_IMAGE_BYTES = 8 * 1024 * 1024
MAX_IMAGE_SIDE = 2048


def normalize_image(data: bytes) -> bytes:
    """Validate image bytes and re-encode them as JPEG, capping the size."""
    if not data:
        raise ValidationFailed("Image is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationFailed("Image is too large")
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationFailed("File is not a valid image") from e

    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.thumbnail((MAX_IMAGE_SIDE, MAX_IMAGE_SIDE), Image.Resampling.LANCZOS)

    buffer = BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


class StorageService:
    """Thin wrapper over one Supabase Storage bucket."""

    def __init__(self, bucket: str, client: Optional[Client] = None):
        self.bucket = bucket
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            settings = get_settings()
            self._client = create_client(
                settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY
            )
        return self._client

    def upload(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        try:
            self.client.storage.from_(self.bucket).upload(
                path=path, file=data, file_options={"content-type": content_type}
            )
        except Exception as e:
            logger.exception("Upload to %s/%s failed", self.bucket, path)
            raise UpstreamError("Failed to upload file") from e
        return path

    def remove(self, paths: list[str]) -> None:
        if not paths:
            return
        try:
            self.client.storage.from_(self.bucket).remove(paths)
        except Exception:
            # Orphaned objects are tolerable; the caller is already failing.
            logger.exception("Cleanup of %s in %s failed", paths, self.bucket)

    def upload_all(self, files: dict[str, bytes]) -> list[str]:
        """Upload several files; on any failure remove the ones already stored."""
        uploaded: list[str] = []
        try:
            for path, data in files.items():
                uploaded.append(self.upload(path, data))
        except UpstreamError:
            self.remove(uploaded)
            raise
        return uploaded


@lru_cache
def get_kyc_storage() -> StorageService:
    return StorageService(get_settings().SUPABASE_KYC_BUCKET)
