import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent
DEFAULT_TEMPLATE_PATH = BACKEND_ROOT / "assets" / "flyer-template.jpg"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.FLYER_LAYOUT: str = (os.getenv("FLYER_LAYOUT") or "landscape").strip().lower()
        self.FLYER_TEMPLATE_SOURCE: str = os.getenv("FLYER_TEMPLATE_SOURCE") or str(DEFAULT_TEMPLATE_PATH)
        self.FLYER_TEMPLATE_TIMEOUT: float = _as_float(os.getenv("FLYER_TEMPLATE_TIMEOUT"), 10.0)
        self.FLYER_PAGE_URL: str = os.getenv("FLYER_PAGE_URL") or "http://localhost:3000/"
        self.FLYER_FONT_DIR: str | None = os.getenv("FLYER_FONT_DIR") or None
        self.FLYER_JPEG_QUALITY: float = _as_float(os.getenv("FLYER_JPEG_QUALITY"), 0.92)
        self.FLYER_OUTPUT_DIR: str = os.getenv("FLYER_OUTPUT_DIR") or "."
        self.FLYER_HEIF_ENABLED: bool = _as_bool(os.getenv("FLYER_HEIF_ENABLED"), True)


settings = Settings()
