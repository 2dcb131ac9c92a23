"""
Export and share actions for a rendered flyer.
"""
import logging
import webbrowser
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import quote

from PIL import Image

from domain.models import ShareMethod, ShareResult
from flyer_renderer import defaults
from flyer_renderer.canvas import Canvas
from settings import settings

logger = logging.getLogger(__name__)

NATIVE_SHARE_TEXT = "Make yours here:"
FALLBACK_SHARE_CAPTION = "I just made my flyer! Make yours: "
WHATSAPP_SHARE_BASE = "https://wa.me/?text="
# Characters JavaScript's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass
class SharedFile:
    name: str
    data: bytes
    mime: str = defaults.OUTPUT_MIME


def _pil_quality(quality: float) -> int:
    return max(1, min(95, int(round(quality * 100))))


def encode_jpeg(source: Union[Canvas, Image.Image], quality: Optional[float] = None) -> bytes:
    """JPEG bytes of the canvas; quality is on the 0..1 scale (default 0.92)."""
    if quality is None:
        quality = settings.FLYER_JPEG_QUALITY
    image = source.image if isinstance(source, Canvas) else source
    buf = BytesIO()
    image.convert("RGB").save(buf, format="JPEG", quality=_pil_quality(quality))
    return buf.getvalue()


def save_download(
    source: Union[Canvas, Image.Image],
    directory: Union[str, Path, None] = None,
    filename: str = defaults.OUTPUT_FILENAME,
    quality: Optional[float] = None,
) -> Path:
    """Write the flyer as `flyer.jpg` (by default) and return the path."""
    out_dir = Path(directory if directory is not None else settings.FLYER_OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / filename
    out_path.write_bytes(encode_jpeg(source, quality=quality))
    logger.info("[download] wrote %s size=%s", out_path, out_path.stat().st_size)
    return out_path


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def whatsapp_share_url(page_url: str) -> str:
    return WHATSAPP_SHARE_BASE + encode_uri_component(FALLBACK_SHARE_CAPTION + page_url)


def share_flyer(
    jpeg_bytes: bytes,
    page_url: Optional[str] = None,
    sharer=None,
    opener: Callable[..., bool] = webbrowser.open,
) -> ShareResult:
    """
    Share the flyer image.

    `sharer` is any object with can_share(files) and share(files=, text=, url=)
    (a native share sheet). Without one, or when it declines or fails, a
    pre-filled wa.me link is opened instead.
    """
    page_url = page_url or settings.FLYER_PAGE_URL
    files = [SharedFile(name=defaults.OUTPUT_FILENAME, data=jpeg_bytes)]

    can_share = getattr(sharer, "can_share", None)
    if sharer is not None and callable(can_share) and can_share(files):
        try:
            sharer.share(files=files, text=NATIVE_SHARE_TEXT, url=page_url)
            logger.info("[share] native share url=%s", page_url)
            return ShareResult(method=ShareMethod.NATIVE, url=page_url, opened=True)
        except Exception:
            logger.warning("[share] native share failed; falling back to link", exc_info=True)

    url = whatsapp_share_url(page_url)
    opened = bool(opener(url, new=2))
    logger.info("[share] fallback link opened=%s url=%s", opened, url)
    return ShareResult(method=ShareMethod.URL, url=url, opened=opened)
