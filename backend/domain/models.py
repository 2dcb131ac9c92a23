"""
Core domain models for the flyer generator.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
import re
from typing import Optional, Tuple

from PIL import Image


Color = Tuple[int, int, int, int]

GREETING_PLACEHOLDER = "________"

_FONT_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)px$")


class LayoutVariantName(str, Enum):
    """Known poster layouts."""
    LANDSCAPE = "landscape"  # 1200x630 social card
    SQUARE = "square"  # 1080x1080 feed post


class ShareMethod(str, Enum):
    """How a flyer ended up being shared."""
    NATIVE = "native"
    URL = "url"


@dataclass(frozen=True)
class FontSpec:
    """
    A CSS-like font description, e.g. "700 34px Arial" or "italic 26px Arial".

    Only the size is varied at render time (auto-fit); style, weight and family
    pick the font face.
    """
    family: str
    size_px: int
    weight: str = "400"
    style: str = "normal"

    @classmethod
    def parse(cls, value: str) -> "FontSpec":
        """Parse CSS font shorthand: [style] [weight] <size>px <family...>."""
        parts = value.split()
        size_idx = next((i for i, p in enumerate(parts) if _FONT_SIZE_RE.match(p)), None)
        if size_idx is None or size_idx == len(parts) - 1:
            raise ValueError(f"Font spec needs '<size>px <family>': {value!r}")
        size_px = int(float(_FONT_SIZE_RE.match(parts[size_idx]).group(1)))
        family = " ".join(parts[size_idx + 1:])
        style = "normal"
        weight = "400"
        for token in parts[:size_idx]:
            lowered = token.lower()
            if lowered in ("italic", "oblique"):
                style = lowered
            elif lowered == "bold":
                weight = "700"
            elif lowered.isdigit():
                weight = lowered
        return cls(family=family, size_px=size_px, weight=weight, style=style)

    @property
    def css(self) -> str:
        prefix = []
        if self.style != "normal":
            prefix.append(self.style)
        if self.weight != "400":
            prefix.append(self.weight)
        return " ".join(prefix + [f"{self.size_px}px", self.family])

    @property
    def is_bold(self) -> bool:
        return int(self.weight) >= 600

    @property
    def is_italic(self) -> bool:
        return self.style in ("italic", "oblique")

    def with_size(self, size_px: int) -> "FontSpec":
        return replace(self, size_px=size_px)


@dataclass(frozen=True)
class ShadowSpec:
    color: Color
    blur: float
    offset: Tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class TextLineSpec:
    """One fixed text line on the flyer."""
    template: str  # may contain "{name}"
    font: FontSpec
    fill: Color
    x: float
    y: float  # alphabetic baseline
    max_width: float
    shadow: Optional[ShadowSpec] = None

    def format(self, name: str) -> str:
        return self.template.format(name=name)


@dataclass(frozen=True)
class PortraitGeometry:
    """Circular portrait placement. Centre and diameter in canvas pixels."""
    center_x: float
    center_y: float
    diameter: float
    ring_width: float
    ring_fill: Color = (255, 255, 255, 242)  # rgba(255,255,255,0.95)

    @property
    def radius(self) -> float:
        return self.diameter / 2


@dataclass(frozen=True)
class LayoutVariant:
    """Geometry and font table for one poster layout."""
    name: LayoutVariantName
    width: int
    height: int
    portrait: PortraitGeometry
    lines: Tuple[TextLineSpec, TextLineSpec, TextLineSpec]
    auto_fit: bool = True
    min_font_px: int = 12
    gradient: Tuple[Color, Color] = ((249, 115, 22, 255), (255, 255, 255, 255))  # #f97316 -> #ffffff

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class RenderInput:
    """Everything one render pass needs. Produced by the UI layer (or CLI)."""
    name: str = ""
    photo: Optional[bytes] = None
    template_image: Optional[Image.Image] = field(default=None, compare=False)
    template_ready: bool = False

    @property
    def display_name(self) -> str:
        """Name as typed; blank or whitespace-only names use the placeholder."""
        name = self.name or ""
        return name if name.strip() else GREETING_PLACEHOLDER


@dataclass
class ShareResult:
    method: ShareMethod
    url: Optional[str] = None
    opened: bool = False
