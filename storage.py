import io
import uuid

import boto3
from PIL import Image, UnidentifiedImageError

from logging_config import get_logger
import settings

log = get_logger(__name__)

s3 = boto3.client("s3", region_name=settings.AWS_REGION)
ALLOWED = {"png", "jpg", "jpeg", "webp"}
MAX_SIDE = 1600


class StorageNotConfigured(RuntimeError):
    pass


def allowed_file(filename: str) -> bool:
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""
    return ext in ALLOWED


def public_url(key: str) -> str:
    if settings.S3_PUBLIC_BASE_URL:
        return f"{settings.S3_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    return f"https://{settings.S3_BUCKET}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


def save_image(file_storage, prefix: str) -> str:
    """Re-encode an uploaded image as JPEG and store it; returns the object key."""
    if not settings.S3_BUCKET:
        raise StorageNotConfigured("S3_BUCKET is not configured")
    if not allowed_file(getattr(file_storage, "filename", "")):
        raise ValueError("allowed: jpg,jpeg,png,webp")
    raw = file_storage.read()
    if not raw:
        raise ValueError("Empty file")
    try:
        img = Image.open(io.BytesIO(raw)).convert("RGB")
    except UnidentifiedImageError as exc:
        raise ValueError("File is not a readable image") from exc
    img.thumbnail((MAX_SIDE, MAX_SIDE))
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=90, optimize=True)
    out.seek(0)
    key = f"{prefix}/{uuid.uuid4().hex}.jpg"
    s3.put_object(
        Bucket=settings.S3_BUCKET, Key=key, Body=out,
        ContentType="image/jpeg", CacheControl="max-age=31536000, public"
    )
    log.info("image_uploaded", key=key, size=len(raw))
    return key


def upload_website_image(file_storage, prefix: str = "uploads") -> str:
    return public_url(save_image(file_storage, prefix))
