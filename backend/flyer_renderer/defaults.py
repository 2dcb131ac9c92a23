from pathlib import Path

from domain.models import (
    FontSpec,
    LayoutVariant,
    LayoutVariantName,
    PortraitGeometry,
    ShadowSpec,
    TextLineSpec,
)

# Base asset locations within the package
PACKAGE_DIR = Path(__file__).resolve().parent
ASSETS_DIR = PACKAGE_DIR.parent / "assets"
FONTS_DIR = ASSETS_DIR / "fonts"

# Default flyer content
GREETING_TEXT = "I, {name}, support ADJ"
SUB_TEXT = "for House of Rep 2027"
SLOGAN_TEXT = "Ifo Lokan, Ifo lo ma se"
OUTPUT_FILENAME = "flyer.jpg"
OUTPUT_MIME = "image/jpeg"
MIN_FONT_PX = 12

# Colours (RGBA)
TITLE_COLOR = (15, 23, 42, 255)  # slate-900
SUB_COLOR = (17, 24, 39, 255)  # gray-900
SLOGAN_COLOR = (185, 28, 28, 255)  # red-700
TITLE_SHADOW = ShadowSpec(color=(0, 0, 0, 38), blur=4)
RING_FILL = (255, 255, 255, 242)

# Landscape social card
LANDSCAPE_WIDTH = 1200
LANDSCAPE_HEIGHT = 630
LANDSCAPE_PHOTO_SIZE = 220
LANDSCAPE_PHOTO_LEFT = 48
LANDSCAPE_RING = 6
LANDSCAPE_TEXT_X = 300
LANDSCAPE_TEXT_Y = 180
TEXT_RIGHT_PAD = 32

# Square feed post
SQUARE_SIDE = 1080
SQUARE_PHOTO_SIZE = 360
SQUARE_PHOTO_TOP = 150
SQUARE_RING = 8
SQUARE_TEXT_X = 80
SQUARE_TEXT_Y = 690


def _landscape() -> LayoutVariant:
    max_width = LANDSCAPE_WIDTH - LANDSCAPE_TEXT_X - TEXT_RIGHT_PAD
    return LayoutVariant(
        name=LayoutVariantName.LANDSCAPE,
        width=LANDSCAPE_WIDTH,
        height=LANDSCAPE_HEIGHT,
        portrait=PortraitGeometry(
            center_x=LANDSCAPE_PHOTO_LEFT + LANDSCAPE_PHOTO_SIZE / 2,
            center_y=LANDSCAPE_HEIGHT / 2,
            diameter=LANDSCAPE_PHOTO_SIZE,
            ring_width=LANDSCAPE_RING,
            ring_fill=RING_FILL,
        ),
        lines=(
            TextLineSpec(GREETING_TEXT, FontSpec.parse("700 34px Arial"), TITLE_COLOR,
                         LANDSCAPE_TEXT_X, LANDSCAPE_TEXT_Y, max_width, shadow=TITLE_SHADOW),
            TextLineSpec(SUB_TEXT, FontSpec.parse("600 28px Arial"), SUB_COLOR,
                         LANDSCAPE_TEXT_X, LANDSCAPE_TEXT_Y + 48, max_width),
            TextLineSpec(SLOGAN_TEXT, FontSpec.parse("italic 26px Arial"), SLOGAN_COLOR,
                         LANDSCAPE_TEXT_X, LANDSCAPE_TEXT_Y + 100, max_width),
        ),
        auto_fit=True,
        min_font_px=MIN_FONT_PX,
    )


def _square() -> LayoutVariant:
    # Simplified page: bigger type, lines filled directly without auto-fit.
    max_width = SQUARE_SIDE - 2 * SQUARE_TEXT_X
    return LayoutVariant(
        name=LayoutVariantName.SQUARE,
        width=SQUARE_SIDE,
        height=SQUARE_SIDE,
        portrait=PortraitGeometry(
            center_x=SQUARE_SIDE / 2,
            center_y=SQUARE_PHOTO_TOP + SQUARE_PHOTO_SIZE / 2,
            diameter=SQUARE_PHOTO_SIZE,
            ring_width=SQUARE_RING,
            ring_fill=RING_FILL,
        ),
        lines=(
            TextLineSpec(GREETING_TEXT, FontSpec.parse("700 48px Arial"), TITLE_COLOR,
                         SQUARE_TEXT_X, SQUARE_TEXT_Y, max_width, shadow=TITLE_SHADOW),
            TextLineSpec(SUB_TEXT, FontSpec.parse("600 40px Arial"), SUB_COLOR,
                         SQUARE_TEXT_X, SQUARE_TEXT_Y + 68, max_width),
            TextLineSpec(SLOGAN_TEXT, FontSpec.parse("italic 36px Arial"), SLOGAN_COLOR,
                         SQUARE_TEXT_X, SQUARE_TEXT_Y + 140, max_width),
        ),
        auto_fit=False,
        min_font_px=MIN_FONT_PX,
    )


LAYOUTS = {
    LayoutVariantName.LANDSCAPE: _landscape(),
    LayoutVariantName.SQUARE: _square(),
}
DEFAULT_LAYOUT = LayoutVariantName.LANDSCAPE


def get_layout(name: str | LayoutVariantName | None = None) -> LayoutVariant:
    """Look up a layout variant by name; unknown names raise ValueError."""
    if name is None:
        return LAYOUTS[DEFAULT_LAYOUT]
    if not isinstance(name, LayoutVariantName):
        name = LayoutVariantName(name.strip().lower())
    return LAYOUTS[name]
