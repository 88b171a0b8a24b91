"""Loading captured images into the ``CapturedImage`` descriptor.

The UI shell hands over whatever it has (raw bytes from the camera, a file
path, a data URL, plain base64 or an http(s) URL). ``load_image`` turns it into
validated, optionally compressed bytes with a MIME type:

1. Resolve the source to bytes (aiohttp for URLs, 10s timeout)
2. Validate format (JPEG/PNG only, detected from magic bytes with filetype)
3. Validate size against MAX_IMAGE_SIZE_MB
4. Compress with Pillow when COMPRESS_IMG is enabled and the image is above the threshold
"""

import asyncio
import base64
import binascii
import os
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import aiohttp
import filetype
from PIL import Image

from sous.models.errors import ImageError
from sous.models.models import CapturedImage
from sous.utils.config import Config, config as default_config
from sous.utils.logger import logger


ImageSource = Union[bytes, str, Path]

SUPPORTED_FORMATS = {"jpg": "image/jpeg", "jpeg": "image/jpeg", "png": "image/png"}


def safe_execute_sync(
    func,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
):
    """Run an optional operation, logging and returning default_return on failure.

    Used where failure is not critical, e.g. compression falls back to the
    original bytes.
    """
    try:
        return func()
    except Exception as e:
        msg = f"{operation_name}: {e}"
        if log_level == "debug":
            logger.debug(msg)
        elif log_level == "error":
            logger.error(msg)
        else:
            logger.warning(msg)
        return default_return


def detect_mime_type(image_bytes: bytes) -> Optional[str]:
    """Return the MIME type for JPEG/PNG bytes, or None for anything else."""
    kind = filetype.guess(image_bytes)
    if kind is None:
        return None
    return SUPPORTED_FORMATS.get(kind.extension)


def validate_image_size(image_bytes: bytes, settings: Config = None) -> bool:
    """Check raw byte length against MAX_IMAGE_SIZE_MB."""
    settings = settings or default_config
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > settings.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {settings.MAX_IMAGE_SIZE_MB}MB")
        return False
    return True


def compress_image(image_bytes: bytes, settings: Config = None, max_width: int = 1024) -> bytes:
    """Compress an image for upload using Pillow.

    Uses JPEG with quality=85 + optimize + progressive, resizes images wider
    than max_width and flattens transparency onto white. Images below
    COMPRESS_IMG_THRESHOLD_KB are returned unchanged, as are images that fail
    to compress.

    Args:
        image_bytes: Raw image bytes.
        settings: Configuration (defaults to module config).
        max_width: Maximum width in pixels.

    Returns:
        JPEG bytes, or the original bytes.
    """
    settings = settings or default_config
    size_kb = len(image_bytes) / 1024
    if size_kb < settings.COMPRESS_IMG_THRESHOLD_KB:
        logger.debug(
            f"Image size {size_kb:.1f}KB below compression threshold "
            f"({settings.COMPRESS_IMG_THRESHOLD_KB}KB), skipping compression"
        )
        return image_bytes

    def _compress():
        img = Image.open(BytesIO(image_bytes))

        if img.mode in ("RGBA", "LA", "P"):
            img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            rgb_img.paste(img, mask=img.split()[-1])
            img = rgb_img
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed = output.getvalue()
        logger.debug(f"Image compressed: {size_kb:.1f}KB → {len(compressed) / 1024:.1f}KB")
        return compressed

    return safe_execute_sync(_compress, "Image compression", default_return=image_bytes)


async def fetch_url_bytes(url: str) -> bytes:
    """Download an image over HTTP(S).

    Raises:
        ImageError: On network errors or non-2xx responses.
    """
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=10)) as response:
                response.raise_for_status()
                return await response.read()
    except aiohttp.ClientError as e:
        raise ImageError(f"Could not fetch image from {url}: {e}") from e
    except asyncio.TimeoutError as e:
        raise ImageError(f"Timed out fetching image from {url}") from e


def _decode_base64(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageError(f"Invalid base64 image data: {e}") from e


async def resolve_image_bytes(source: ImageSource) -> bytes:
    """Turn any supported image source into raw bytes.

    Supports bytes, pathlib.Path, data URLs, http(s) URLs, file paths and plain base64.
    """
    if isinstance(source, bytes):
        return source

    if isinstance(source, Path):
        if not source.is_file():
            raise ImageError(f"Image file not found: {source}")
        return source.read_bytes()

    if isinstance(source, str):
        if source.startswith("data:"):
            _, _, encoded = source.partition(",")
            return _decode_base64(encoded)
        if source.startswith(("http://", "https://")):
            return await fetch_url_bytes(source)
        if os.path.isfile(source):
            return Path(source).read_bytes()
        return _decode_base64(source)

    raise ImageError(f"Unsupported image source type: {type(source).__name__}")


async def load_image(source: ImageSource, settings: Config = None) -> CapturedImage:
    """Load, validate and optionally compress an image for ingredient detection.

    Args:
        source: Raw bytes, a path, a data URL, an http(s) URL or plain base64.
        settings: Configuration (defaults to module config).

    Returns:
        CapturedImage ready for the generative service.

    Raises:
        ImageError: If the image cannot be read, is not JPEG/PNG, or is too large.
    """
    settings = settings or default_config
    image_bytes = await resolve_image_bytes(source)
    if not image_bytes:
        raise ImageError("Image source is empty")

    mime_type = detect_mime_type(image_bytes)
    if mime_type is None:
        raise ImageError("Invalid image format. Only JPEG and PNG are supported.")

    if not validate_image_size(image_bytes, settings):
        raise ImageError(f"Image too large. Maximum size is {settings.MAX_IMAGE_SIZE_MB}MB")

    if settings.COMPRESS_IMG:
        compressed = compress_image(image_bytes, settings)
        if compressed is not image_bytes:
            image_bytes, mime_type = compressed, "image/jpeg"

    logger.info(f"Loaded image: {len(image_bytes) / 1024:.1f}KB ({mime_type})")
    return CapturedImage(data=image_bytes, mime_type=mime_type)
