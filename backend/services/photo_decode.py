"""
Photo decoding for the portrait slot.

Two paths:
- fast: Pillow decodes the bytes directly (plus HEIC/HEIF when pillow-heif is registered)
- slow: ImageMagick via Wand converts anything it understands to PNG first
"""
import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

_HEIF_REGISTERED = False


class PhotoDecodeError(ValueError):
    """Raised when a decode path cannot produce an image from the bytes."""


def register_heif_opener() -> bool:
    """
    Register HEIF/HEIC opener with Pillow if pillow-heif is available.

    Call this at startup to accept iPhone photos on the fast path.
    Safe to call multiple times or if pillow-heif is not installed.
    """
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return True
    try:
        from pillow_heif import register_heif_opener as _register
        _register()
        _HEIF_REGISTERED = True
        return True
    except ImportError:
        return False


def decode_photo_fast(data: bytes) -> Image.Image:
    """Decode with Pillow, honouring EXIF orientation. Raises PhotoDecodeError."""
    if not data:
        raise PhotoDecodeError("empty photo")
    try:
        img = Image.open(BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
        return img.convert("RGBA")
    except UnidentifiedImageError as exc:
        raise PhotoDecodeError(f"unrecognised image data: {exc}") from exc
    except Exception as exc:
        raise PhotoDecodeError(f"fast decode failed: {exc}") from exc


def decode_photo_slow(data: bytes) -> Image.Image:
    """
    Decode through ImageMagick. Much slower than Pillow but accepts more
    formats; meant to run off the render path.
    """
    if not data:
        raise PhotoDecodeError("empty photo")
    try:
        from wand.image import Image as WandImage

        with WandImage(blob=data) as img:
            img.auto_orient()
            img.format = "png"
            png = img.make_blob()
        decoded = Image.open(BytesIO(png))
        decoded.load()
        return decoded.convert("RGBA")
    except Exception as exc:
        raise PhotoDecodeError(f"slow decode failed: {exc}") from exc
