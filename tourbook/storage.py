"""S3-compatible object storage for tour images and GPX tracks."""

import datetime
import logging
import pathlib
import uuid
from functools import lru_cache

from minio import Minio
from minio.error import S3Error

from .core import get_settings, ValidationError, ExternalServiceError

logger = logging.getLogger(__name__)

IMAGE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
GPX_TYPES = {".gpx": "application/gpx+xml"}
MAX_IMAGES_PER_UPLOAD = 10


@lru_cache()
def get_client() -> Minio:
    settings = get_settings()
    client_kwargs = {
        "access_key": settings.S3_ACCESS_KEY,
        "secret_key": settings.S3_SECRET_KEY,
        "secure": settings.S3_SECURE,
    }
    if settings.S3_REGION:
        client_kwargs["region"] = settings.S3_REGION
    return Minio(settings.S3_ENDPOINT, **client_kwargs)


def _check_upload(upload_file, allowed: dict) -> str:
    """Validate extension and size, returning the content type to store."""
    ext = pathlib.Path(upload_file.filename or "").suffix.lower()
    if ext not in allowed:
        raise ValidationError(
            f"Unsupported file type. Allowed: {', '.join(sorted(allowed))}",
            field="file"
        )

    upload_file.file.seek(0, 2)
    size = upload_file.file.tell()
    upload_file.file.seek(0)
    max_bytes = get_settings().UPLOAD_MAX_BYTES
    if size > max_bytes:
        raise ValidationError(f"File exceeds {max_bytes // (1024 * 1024)} MB limit", field="file")
    if size == 0:
        raise ValidationError("File is empty", field="file")
    return allowed[ext]


def _put(upload_file, prefix: str, content_type: str) -> str:
    ext = pathlib.Path(upload_file.filename).suffix.lower()
    object_name = f"{prefix}/{uuid.uuid4().hex}{ext}"
    try:
        get_client().put_object(
            bucket_name=get_settings().S3_BUCKET,
            object_name=object_name,
            data=upload_file.file,
            length=-1,                      # multipart
            part_size=10 * 1024 * 1024,
            content_type=content_type,
        )
    except S3Error as exc:
        logger.error("Upload of %s failed: %s", object_name, exc)
        raise ExternalServiceError("storage", str(exc)) from exc
    return object_name


def upload_image(upload_file) -> str:
    """Upload FastAPI UploadFile image → returns object key"""
    content_type = _check_upload(upload_file, IMAGE_TYPES)
    return _put(upload_file, "images", content_type)


def upload_images(upload_files) -> list[str]:
    """Upload a batch of images. Every file is checked before any is stored."""
    if not upload_files:
        raise ValidationError("No files uploaded", field="files")
    if len(upload_files) > MAX_IMAGES_PER_UPLOAD:
        raise ValidationError(f"At most {MAX_IMAGES_PER_UPLOAD} images per upload", field="files")
    content_types = [_check_upload(f, IMAGE_TYPES) for f in upload_files]
    return [_put(f, "images", ct) for f, ct in zip(upload_files, content_types)]


def upload_gpx(upload_file) -> str:
    """Upload a GPX track → returns object key"""
    content_type = _check_upload(upload_file, GPX_TYPES)
    return _put(upload_file, "gpx", content_type)


def presigned(object_name: str, seconds: int = 3600) -> str:
    settings = get_settings()
    # For browser access, use the public endpoint
    if settings.S3_PUBLIC_ENDPOINT and settings.S3_PUBLIC_ENDPOINT != settings.S3_ENDPOINT:
        return f"http://{settings.S3_PUBLIC_ENDPOINT}/{settings.S3_BUCKET}/{object_name}"
    return get_client().presigned_get_object(
        settings.S3_BUCKET, object_name,
        expires=datetime.timedelta(seconds=seconds)
    )


def bucket_ready() -> bool:
    return get_client().bucket_exists(get_settings().S3_BUCKET)
