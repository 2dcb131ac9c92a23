"""
Font lookup for flyer text.

CSS-style families are mapped to TrueType files found in the package assets,
an optional FLYER_FONT_DIR, or common system locations. Liberation Sans is
metric-compatible with Arial and is preferred for it on Linux.
"""
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from PIL import ImageFont

from domain.models import FontSpec
from settings import settings

from . import defaults

logger = logging.getLogger(__name__)

_ARIAL_CANDIDATES = {
    (False, False): [
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/Library/Fonts/Arial.ttf",
        "C:/Windows/Fonts/arial.ttf",
    ],
    (True, False): [
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/Library/Fonts/Arial Bold.ttf",
        "C:/Windows/Fonts/arialbd.ttf",
    ],
    (False, True): [
        "/usr/share/fonts/truetype/liberation/LiberationSans-Italic.ttf",
        "/usr/share/fonts/liberation/LiberationSans-Italic.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
        "/Library/Fonts/Arial Italic.ttf",
        "C:/Windows/Fonts/ariali.ttf",
    ],
    (True, True): [
        "/usr/share/fonts/truetype/liberation/LiberationSans-BoldItalic.ttf",
        "/usr/share/fonts/liberation/LiberationSans-BoldItalic.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-BoldOblique.ttf",
        "/Library/Fonts/Arial Bold Italic.ttf",
        "C:/Windows/Fonts/arialbi.ttf",
    ],
}


def _face_suffix(bold: bool, italic: bool) -> str:
    if bold and italic:
        return "BoldItalic"
    if bold:
        return "Bold"
    if italic:
        return "Italic"
    return "Regular"


def font_candidates(family: str, bold: bool, italic: bool, font_dir: Optional[str] = None) -> List[str]:
    """Ordered file paths to try for a family/face."""
    stem = family.strip().strip("'\"").replace(" ", "")
    suffix = _face_suffix(bold, italic)
    names = [f"{stem}-{suffix}.ttf", f"{stem}-{suffix}.otf"]
    if suffix == "Regular":
        names += [f"{stem}.ttf", f"{stem}.otf"]

    dirs = [Path(font_dir)] if font_dir else []
    dirs.append(defaults.FONTS_DIR)
    paths = [str(d / n) for d in dirs for n in names]
    if stem.lower() in ("arial", "helvetica", "sans-serif", "liberationsans"):
        paths += _ARIAL_CANDIDATES[(bold, italic)]
    return paths


@lru_cache(maxsize=128)
def _load_font(family: str, size_px: int, bold: bool, italic: bool, font_dir: Optional[str]):
    for path in font_candidates(family, bold, italic, font_dir):
        if not os.path.exists(path):
            continue
        try:
            return ImageFont.truetype(path, size_px)
        except OSError:
            logger.warning("[fonts] could not load %s", path, exc_info=True)
    logger.debug("[fonts] no file for %r bold=%s italic=%s; using Pillow default", family, bold, italic)
    return ImageFont.load_default(size=size_px)


def load_font(spec: FontSpec):
    """Resolve a FontSpec to a Pillow font at its pixel size."""
    return _load_font(spec.family, max(1, spec.size_px), spec.is_bold, spec.is_italic, settings.FLYER_FONT_DIR)
