"""Client for the hosted image service (Cloudinary)."""

import io
import logging
from collections.abc import Mapping
from typing import Any

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import cloudinary.utils

from app.core.config import IMAGE_UPLOAD_TIMEOUT, get_cloudinary_config

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/150"
UPLOAD_TAGS = ["dev-events"]


def sign_params(params: Mapping[str, Any], api_secret: str | None = None) -> str:
    """Sign upload parameters so a browser can upload straight to Cloudinary."""
    secret = api_secret if api_secret is not None else get_cloudinary_config()["api_secret"]
    return cloudinary.utils.api_sign_request(dict(params), secret)


def image_host_configured() -> bool:
    cfg = get_cloudinary_config()
    return bool(cfg["cloud_name"] and cfg["api_key"] and cfg["api_secret"])


def _configure(cfg: dict) -> None:
    cloudinary.config(
        cloud_name=cfg["cloud_name"],
        api_key=cfg["api_key"],
        api_secret=cfg["api_secret"],
        secure=True,
    )


def upload_image(data: bytes, filename: str = "image") -> str | None:
    """
    Upload an image and return its public URL.

    Returns None when the host is not configured or the upload fails, so that
    callers can fall back to PLACEHOLDER_IMAGE_URL.
    """
    if not image_host_configured():
        logger.warning("Image host is not configured; skipping upload of %s", filename)
        return None
    if not data:
        logger.warning("Empty image payload for %s; skipping upload", filename)
        return None

    cfg = get_cloudinary_config()
    _configure(cfg)
    options = {"tags": UPLOAD_TAGS, "resource_type": "image", "timeout": IMAGE_UPLOAD_TIMEOUT}
    if cfg["upload_preset"]:
        options["upload_preset"] = cfg["upload_preset"]

    stream = io.BytesIO(data)
    stream.name = filename
    try:
        result = cloudinary.uploader.upload(stream, **options)
    except (cloudinary.exceptions.Error, OSError) as e:
        logger.warning("Image upload failed for %s: %s", filename, e)
        return None

    url = result.get("secure_url") if isinstance(result, dict) else None
    if not url:
        logger.warning("Image host response for %s carried no URL", filename)
        return None
    logger.info("Uploaded image %s", filename)
    return url
