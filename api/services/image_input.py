"""
Normalisation of user-uploaded images before they are sent to Gemini
"""
import base64
import binascii
import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from core.config import Settings
from core.exceptions import InvalidImageError
from services.generation_client import ImagePart

logger = logging.getLogger(__name__)


def strip_data_url(image_data: str) -> str:
    """Remove a "data:image/...;base64," prefix if present"""
    if image_data.startswith("data:"):
        return image_data.split(",", 1)[1] if "," in image_data else ""
    return image_data


def decode_image_input(image_data: str, settings: Settings) -> ImagePart:
    """
    Decode a base64 upload into a JPEG ImagePart.

    Applies EXIF orientation, converts to RGB and downsizes so neither side
    exceeds settings.max_image_dimension.
    """
    try:
        image_bytes = base64.b64decode(strip_data_url(image_data.strip()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Image is not valid base64: {e}") from e

    if not image_bytes:
        raise InvalidImageError("Image is empty")
    if len(image_bytes) > settings.max_image_bytes:
        raise InvalidImageError(f"Image is too large ({len(image_bytes)} bytes)")

    try:
        image = Image.open(io.BytesIO(image_bytes))
        image = ImageOps.exif_transpose(image)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise InvalidImageError(f"Could not read image: {e}") from e

    if image.mode != "RGB":
        image = image.convert("RGB")

    max_size = settings.max_image_dimension
    if image.width > max_size or image.height > max_size:
        original_size = (image.width, image.height)
        image.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
        logger.info(f"Resized upload from {original_size[0]}x{original_size[1]} to {image.width}x{image.height}")

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=90, optimize=True)
    return ImagePart(data=buffer.getvalue(), mime_type="image/jpeg")
