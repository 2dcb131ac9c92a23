"""
Pillow-backed drawing surface.

Behaves like a small subset of a browser 2D canvas: fills, image blits, text,
and a save/restore drawing state that carries the current clip mask. Every
paint operation is masked by the clip active at call time.
"""
import contextlib
import logging
import math
from typing import Iterator, List, Optional, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageFont

from domain.models import Color, FontSpec, ShadowSpec

from .fonts import load_font

logger = logging.getLogger(__name__)

UPSCALE_FACTOR = 4


def circle_mask(size: Tuple[int, int], cx: float, cy: float, radius: float) -> Image.Image:
    """Anti-aliased 'L' mask of a filled circle, supersampled inside its bbox."""
    mask = Image.new("L", size, 0)
    if radius <= 0:
        return mask
    left = math.floor(cx - radius) - 1
    top = math.floor(cy - radius) - 1
    right = math.ceil(cx + radius) + 1
    bottom = math.ceil(cy + radius) + 1
    bw, bh = right - left, bottom - top
    big = Image.new("L", (bw * UPSCALE_FACTOR, bh * UPSCALE_FACTOR), 0)
    ox = (cx - left) * UPSCALE_FACTOR
    oy = (cy - top) * UPSCALE_FACTOR
    r = radius * UPSCALE_FACTOR
    ImageDraw.Draw(big).ellipse((ox - r, oy - r, ox + r, oy + r), fill=255)
    mask.paste(big.resize((bw, bh), Image.Resampling.LANCZOS), (left, top))
    return mask


def _scale_alpha(mask: Image.Image, alpha: int) -> Image.Image:
    if alpha >= 255:
        return mask
    return mask.point(lambda p: p * alpha // 255)


class Canvas:
    """A fixed-size RGBA raster with a clip/state stack."""

    def __init__(self, width: int, height: int, background: Color = (0, 0, 0, 0)):
        self.width = int(width)
        self.height = int(height)
        self.image = Image.new("RGBA", (self.width, self.height), background)
        self._clip: Optional[Image.Image] = None
        self._stack: List[Optional[Image.Image]] = []

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    # --- state ---

    @property
    def has_clip(self) -> bool:
        return self._clip is not None

    @property
    def state_depth(self) -> int:
        return len(self._stack)

    def save(self) -> None:
        # Clip masks are never mutated in place, so sharing the reference is enough.
        self._stack.append(self._clip)

    def restore(self) -> None:
        if self._stack:
            self._clip = self._stack.pop()

    @contextlib.contextmanager
    def saved_state(self) -> Iterator["Canvas"]:
        """save() on entry, restore() on exit even if drawing raised."""
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def reset_state(self) -> None:
        """Drop any clip and saved states left behind by earlier draws."""
        if self._stack or self._clip is not None:
            logger.debug("[canvas] dropping leftover state depth=%s clip=%s", len(self._stack), self._clip is not None)
        self._stack.clear()
        self._clip = None

    def clip_circle(self, cx: float, cy: float, radius: float) -> None:
        """Intersect the current clip with a circle."""
        mask = circle_mask(self.size, cx, cy, radius)
        self._clip = mask if self._clip is None else ImageChops.multiply(self._clip, mask)

    # --- painting ---

    def _composite(self, layer: Image.Image) -> None:
        if self._clip is not None:
            layer.putalpha(ImageChops.multiply(layer.getchannel("A"), self._clip))
        self.image.alpha_composite(layer)

    def _paint_mask(self, mask: Image.Image, color: Color) -> None:
        layer = Image.new("RGBA", self.size, tuple(color[:3]) + (0,))
        layer.putalpha(_scale_alpha(mask, color[3]))
        self._composite(layer)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        mask = Image.new("L", self.size, 0)
        ImageDraw.Draw(mask).rectangle(
            (math.floor(x), math.floor(y), math.ceil(x + w) - 1, math.ceil(y + h) - 1),
            fill=255,
        )
        self._paint_mask(mask, color)

    def fill_linear_gradient(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        color_from: Color,
        color_to: Color,
    ) -> None:
        """Two-stop linear gradient over the whole surface, clamped past the end points."""
        x0, y0 = start
        dx, dy = end[0] - x0, end[1] - y0
        denom = (dx * dx + dy * dy) or 1.0
        ys, xs = np.mgrid[0:self.height, 0:self.width].astype(np.float64)
        t = ((xs + 0.5 - x0) * dx + (ys + 0.5 - y0) * dy) / denom
        t = np.clip(t, 0.0, 1.0)[..., None]
        c0 = np.array(color_from, dtype=np.float64)
        c1 = np.array(color_to, dtype=np.float64)
        rgba = np.rint(c0 + (c1 - c0) * t).astype(np.uint8)
        self._composite(Image.fromarray(rgba))

    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        self._paint_mask(circle_mask(self.size, cx, cy, radius), color)

    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float) -> None:
        """
        Blit `image` scaled to (w, h) at (x, y).

        Only the part that lands on the surface is resampled; the destination is
        widened to whole pixels (floor origin, ceil far edge).
        """
        iw, ih = image.size
        if iw <= 0 or ih <= 0 or w <= 0 or h <= 0:
            logger.debug("[canvas] skip empty draw image=%sx%s rect=%sx%s", iw, ih, w, h)
            return
        left = max(0, math.floor(x))
        top = max(0, math.floor(y))
        right = min(self.width, math.ceil(x + w))
        bottom = min(self.height, math.ceil(y + h))
        if right <= left or bottom <= top:
            return

        sx = iw / w
        sy = ih / h
        box = (
            min(iw, max(0.0, (left - x) * sx)),
            min(ih, max(0.0, (top - y) * sy)),
            min(iw, max(0.0, (right - x) * sx)),
            min(ih, max(0.0, (bottom - y) * sy)),
        )
        if box[2] <= box[0] or box[3] <= box[1]:
            return
        src = image if image.mode == "RGBA" else image.convert("RGBA")
        scaled = src.resize((right - left, bottom - top), Image.Resampling.LANCZOS, box=box)
        layer = Image.new("RGBA", self.size, (0, 0, 0, 0))
        layer.paste(scaled, (left, top))
        self._composite(layer)

    # --- text ---

    def measure_text(self, text: str, font: FontSpec) -> float:
        return float(load_font(font).getlength(text))

    def _text_mask(self, text: str, x: float, y: float, font: FontSpec) -> Image.Image:
        pil_font = load_font(font)
        mask = Image.new("L", self.size, 0)
        draw = ImageDraw.Draw(mask)
        if isinstance(pil_font, ImageFont.FreeTypeFont):
            draw.text((x, y), text, font=pil_font, fill=255, anchor="ls")
        else:
            # Bitmap fonts have no anchors; approximate the baseline with the bbox bottom.
            bottom = pil_font.getbbox(text)[3]
            draw.text((x, y - bottom), text, font=pil_font, fill=255)
        return mask

    def fill_text(
        self,
        text: str,
        x: float,
        y: float,
        font: FontSpec,
        color: Color,
        shadow: Optional[ShadowSpec] = None,
    ) -> None:
        """Paint text left-aligned on the alphabetic baseline at (x, y)."""
        if shadow is not None and shadow.color[3] > 0:
            dx, dy = shadow.offset
            shadow_mask = self._text_mask(text, x + dx, y + dy, font)
            if shadow.blur > 0:
                shadow_mask = shadow_mask.filter(ImageFilter.GaussianBlur(radius=shadow.blur / 2))
            self._paint_mask(shadow_mask, shadow.color)
        self._paint_mask(self._text_mask(text, x, y, font), color)

    # --- export ---

    def snapshot(self) -> Image.Image:
        return self.image.copy()
