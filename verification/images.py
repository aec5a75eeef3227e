import io
import logging

from PIL import Image, UnidentifiedImageError
import pillow_heif

from .errors import InputError

pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)

# Formats Pillow reports for HEIC/HEIF uploads; the engines do not accept them
HEIF_FORMATS = {"HEIF", "HEIC", "AVIF"}


def prepare_image(data: bytes, label: str) -> bytes:
    """
    Check that an uploaded image is present and decodable.
    HEIC/HEIF uploads are re-encoded as JPEG; everything else is returned as-is.
    Raises InputError before any engine is contacted.
    """
    if not data:
        raise InputError(f"{label} image is empty")

    try:
        img = Image.open(io.BytesIO(data))
        img_format = (img.format or "").upper()
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise InputError(f"{label} is not a readable image") from e

    if img_format in HEIF_FORMATS:
        out = io.BytesIO()
        img.convert("RGB").save(out, "JPEG", quality=95)
        logger.info("Converted %s upload from %s to JPEG", label, img_format)
        return out.getvalue()

    return data
