# quickcourt/services/storage.py
import logging
import uuid
from typing import Optional

import httpx
from fastapi import UploadFile
from supabase import Client, ClientOptions, create_client

from quickcourt.config import settings
from quickcourt.core.exceptions import UpstreamError, ValidationError
from quickcourt.core.upstream import call_with_retry

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
# Network failures are retried; API errors such as a bad key or missing bucket are not
RETRYABLE_STORAGE_ERRORS = (httpx.TransportError,)


def _call_storage(operation, description: str):
    try:
        return call_with_retry(operation, description, retry_on=RETRYABLE_STORAGE_ERRORS)
    except UpstreamError:
        raise
    except Exception as e:
        logger.error(f"{description} rejected by storage: {e}")
        raise UpstreamError(f"{description} failed") from e


class SupabaseStorage:
    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        self._client = client
        self.bucket = bucket or settings.SUPABASE_BUCKET

    @property
    def client(self) -> Client:
        if self._client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise UpstreamError("Image storage is not configured")
            # Service key: uploads bypass row level security
            self._client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_KEY,
                options=ClientOptions(storage_client_timeout=int(settings.UPSTREAM_TIMEOUT_SECONDS)),
            )
        return self._client

    @staticmethod
    def validate_image(filename: Optional[str], size: int, max_size_mb: int) -> str:
        """Returns the normalised extension of an acceptable image."""
        if size > max_size_mb * 1024 * 1024:
            raise ValidationError(f"Image is too large (maximum {max_size_mb}MB)")
        filename = filename or "image"
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError("File type not allowed. Use PNG, JPG, JPEG, GIF or WEBP")
        return ext

    def upload_image(self, file: UploadFile, folder: str = "venues") -> dict:
        """Uploads an image and returns its public URL and storage path."""
        content = file.file.read()
        ext = self.validate_image(file.filename, len(content), settings.MAX_IMAGE_SIZE_MB)

        storage_path = f"{folder}/{uuid.uuid4().hex}.{ext}"
        bucket = self.client.storage.from_(self.bucket)

        _call_storage(
            lambda: bucket.upload(
                storage_path,
                content,
                {"content-type": file.content_type or f"image/{ext}"},
            ),
            "Image upload",
        )
        url = bucket.get_public_url(storage_path)
        logger.info(f"Uploaded image {storage_path} ({len(content)} bytes)")
        return {"url": url, "public_id": storage_path}

    def delete_image(self, public_id: str):
        if not public_id:
            raise ValidationError("public_id is required")
        bucket = self.client.storage.from_(self.bucket)
        _call_storage(lambda: bucket.remove([public_id]), "Image delete")
        logger.info(f"Deleted image {public_id}")


storage_service = SupabaseStorage()


def get_storage_service() -> SupabaseStorage:
    return storage_service
