"""Render a flyer from the command line.

Usage:
    python -m scripts.render_flyer --name "Ada" [--photo me.jpg] [--layout landscape|square] [--share]

Run from the backend/ directory. Writes flyer.jpg to --out-dir (FLYER_OUTPUT_DIR,
default "."). With --share the flyer is shared through the wa.me link fallback;
--no-browser prints the link instead of opening it.
Environment variables are read from backend/.env when present.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables before modules that read settings at import time
load_dotenv(Path(__file__).resolve().parents[1] / ".env")

from domain.models import LayoutVariantName, RenderInput
from flyer_renderer.defaults import get_layout
from services.flyer_export import save_download, encode_jpeg, share_flyer
from services.flyer_render import FlyerRenderer
from services.photo_decode import register_heif_opener
from services.template_cache import TemplateCache
from settings import settings

logger = logging.getLogger("render_flyer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a supporter flyer.")
    parser.add_argument("--name", default="", help="Name for the greeting line (blank prints a placeholder).")
    parser.add_argument("--photo", default=None, help="Path to a portrait photo.")
    parser.add_argument(
        "--layout",
        choices=[v.value for v in LayoutVariantName],
        default=settings.FLYER_LAYOUT,
        help="Layout variant.",
    )
    parser.add_argument("--template", default=settings.FLYER_TEMPLATE_SOURCE, help="Template image path or URL.")
    parser.add_argument("--no-template", action="store_true", help="Skip the template and keep the gradient.")
    parser.add_argument("--out-dir", default=settings.FLYER_OUTPUT_DIR, help="Directory for flyer.jpg.")
    parser.add_argument("--quality", type=float, default=settings.FLYER_JPEG_QUALITY, help="JPEG quality 0..1.")
    parser.add_argument("--share", action="store_true", help="Share the flyer after saving it.")
    parser.add_argument("--page-url", default=settings.FLYER_PAGE_URL, help="Link included in the share caption.")
    parser.add_argument("--no-browser", action="store_true", help="Print the share link instead of opening it.")
    return parser


def _print_opener(url: str, new: int = 0) -> bool:
    print(url)
    return False


def main(argv: Optional[List[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        layout = get_layout(args.layout)
    except ValueError:
        choices = ", ".join(v.value for v in LayoutVariantName)
        parser.error(f"invalid layout {args.layout!r} (choose from {choices})")

    photo_bytes = None
    if args.photo:
        photo_path = Path(args.photo)
        if not photo_path.exists():
            logger.error("Photo not found: %s", photo_path)
            return 1
        photo_bytes = photo_path.read_bytes()

    if settings.FLYER_HEIF_ENABLED:
        register_heif_opener()

    template_cache = None
    template_image = None
    if not args.no_template:
        template_cache = TemplateCache(args.template)
        template_image = template_cache.load()

    render_input = RenderInput(
        name=args.name,
        photo=photo_bytes,
        template_image=template_image,
        template_ready=template_image is not None,
    )
    with FlyerRenderer(layout=layout, template_cache=template_cache) as renderer:
        canvas = renderer.new_canvas()
        renderer.render(canvas, render_input).wait()

    out_path = save_download(canvas, args.out_dir, quality=args.quality)
    logger.info("Wrote %s", out_path)

    if args.share:
        opener = _print_opener if args.no_browser else None
        kwargs = {"opener": opener} if opener else {}
        result = share_flyer(encode_jpeg(canvas, quality=args.quality), page_url=args.page_url, **kwargs)
        logger.info("Shared via %s: %s", result.method.value, result.url)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
