import logging
from typing import Optional, Tuple

from PIL import Image

from domain.models import Color, FontSpec, LayoutVariant, PortraitGeometry, ShadowSpec

from . import defaults

logger = logging.getLogger(__name__)


# --- HELPERS ---

def intrinsic_size(image) -> Tuple[int, int]:
    """(width, height) of a decoded image, (0, 0) when unknown."""
    width = getattr(image, "width", 0) or 0
    height = getattr(image, "height", 0) or 0
    return int(width), int(height)


def cover_rect(
    x: float, y: float, w: float, h: float, iw: float, ih: float
) -> Optional[Tuple[float, float, float, float]]:
    """
    Placement (nx, ny, nw, nh) that covers the (x, y, w, h) box with an
    (iw, ih) image, keeping aspect ratio and centring the overflow.
    Returns None when the intrinsic size is unknown.
    """
    if not iw or not ih:
        return None
    scale = max(w / iw, h / ih)
    nw = iw * scale
    nh = ih * scale
    nx = x + (w - nw) / 2
    ny = y + (h - nh) / 2
    return nx, ny, nw, nh


def draw_image_cover(canvas, image, x: float, y: float, w: float, h: float) -> None:
    """Draw like CSS background-size: cover. Unknown size falls back to a stretch."""
    iw, ih = intrinsic_size(image)
    rect = cover_rect(x, y, w, h, iw, ih)
    if rect is None:
        canvas.draw_image(image, x, y, w, h)
        return
    canvas.draw_image(image, *rect)


def paint_background(canvas, layout: LayoutVariant, template: Optional[Image.Image] = None) -> None:
    """Gradient base, then the template full-bleed when one is given."""
    start, end = layout.gradient
    canvas.fill_linear_gradient((0, 0), (canvas.width, canvas.height), start, end)
    if template is not None:
        draw_image_cover(canvas, template, 0, 0, canvas.width, canvas.height)


def draw_portrait_ring(canvas, center_x: float, center_y: float, diameter: float, ring_width: float,
                       fill: Color = defaults.RING_FILL) -> None:
    canvas.fill_circle(center_x, center_y, diameter / 2 + ring_width, fill)


def draw_portrait_photo(canvas, image, center_x: float, center_y: float, diameter: float) -> None:
    """Circular clip scoped to this call; released even if the blit fails."""
    radius = diameter / 2
    with canvas.saved_state():
        canvas.clip_circle(center_x, center_y, radius)
        draw_image_cover(canvas, image, center_x - radius, center_y - radius, diameter, diameter)


def draw_portrait(canvas, image, center_x: float, center_y: float, diameter: float, ring_width: float,
                  fill: Color = defaults.RING_FILL) -> None:
    draw_portrait_ring(canvas, center_x, center_y, diameter, ring_width, fill)
    draw_portrait_photo(canvas, image, center_x, center_y, diameter)


def draw_portrait_at(canvas, image, geometry: PortraitGeometry) -> None:
    draw_portrait(canvas, image, geometry.center_x, geometry.center_y, geometry.diameter,
                  geometry.ring_width, geometry.ring_fill)


def fit_text(
    canvas,
    text: str,
    x: float,
    y: float,
    max_width: float,
    font: FontSpec,
    min_size: int = defaults.MIN_FONT_PX,
    color: Color = (0, 0, 0, 255),
    shadow: Optional[ShadowSpec] = None,
) -> int:
    """
    Shrink the font one pixel at a time until `text` fits `max_width` or the
    size reaches `min_size`, then paint it. Returns the size used.

    Runs at most (font.size_px - min_size) iterations. Text still too wide at
    the floor is painted as is.
    """
    size = font.size_px
    current = font
    while canvas.measure_text(text, current) > max_width and size > min_size:
        size -= 1
        current = font.with_size(size)
    if size != font.size_px:
        logger.debug("[text] shrank %r from %spx to %spx", text, font.size_px, size)
    canvas.fill_text(text, x, y, current, color, shadow=shadow)
    return size
