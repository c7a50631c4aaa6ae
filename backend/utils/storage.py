from supabase import Client
from config import get_supabase_admin_client, is_storage_configured, SUPABASE_STORAGE_BUCKET
from utils.exceptions import ValidationError
from typing import Tuple
import base64
import binascii
import mimetypes
import uuid
import logging

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp", "application/pdf"]
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def is_data_url(value: str) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def decode_image_data(image_data: str) -> Tuple[str, bytes]:
    """
    Split a `data:<mime>;base64,<payload>` string into (mime_type, raw bytes).
    A bare base64 payload is treated as JPEG.
    """
    if not image_data:
        raise ValidationError("Image data is required")

    mime_type = "image/jpeg"
    payload = image_data
    if is_data_url(image_data):
        header, _, payload = image_data.partition(",")
        if not payload or ";base64" not in header:
            raise ValidationError("Image must be a base64 data URL")
        mime_type = header[len("data:"):].split(";")[0] or mime_type

    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64")


class StorageHelpers:
    """Moves inline (data: URL) uploads into Supabase Storage when it is configured"""

    def __init__(self):
        self._admin_client = None

    @property
    def admin_client(self) -> Client:
        if self._admin_client is None:
            self._admin_client = get_supabase_admin_client()
        return self._admin_client

    @property
    def enabled(self) -> bool:
        return self._admin_client is not None or is_storage_configured()

    def store_reference(self, reference: str, folder: str) -> str:
        """
        Return a stable reference for an uploaded image or document.
        Plain URLs pass through; data URLs are uploaded and replaced by their
        public URL. Without storage, or if the upload fails, the data URL is kept.
        """
        if not is_data_url(reference) or not self.enabled:
            return reference

        try:
            mime_type, content = decode_image_data(reference)
        except ValidationError as e:
            logger.warning(f"Keeping inline reference, could not decode it: {e.message}")
            return reference

        if mime_type not in ALLOWED_MIME_TYPES or len(content) > MAX_UPLOAD_BYTES:
            logger.warning(f"Keeping inline reference: type {mime_type}, {len(content)} bytes not uploadable")
            return reference

        extension = mimetypes.guess_extension(mime_type) or ".bin"
        unique_filename = f"{folder}/{uuid.uuid4()}{extension}"

        try:
            bucket = self.admin_client.storage.from_(SUPABASE_STORAGE_BUCKET)
            bucket.upload(
                path=unique_filename,
                file=content,
                file_options={"content-type": mime_type}
            )
            public_url = bucket.get_public_url(unique_filename)
            logger.info(f"Uploaded {unique_filename} to bucket {SUPABASE_STORAGE_BUCKET}")
            return public_url
        except Exception as upload_error:
            logger.error(f"Upload error, keeping inline reference: {str(upload_error)}")
            return reference


storage_helpers = StorageHelpers()
