"""
Flyer render orchestration.

Each render() call repaints the whole canvas from scratch:
1) gradient base (shown while no template is available)
2) template, full-bleed cover, when the input says it is ready
3) circular portrait when a photo was supplied
4) the three fixed text lines

Photos Pillow cannot decode are handed to the slow decoder in the background.
The ring is drawn straight away; the clipped photo follows once decoding
finishes, but only if no newer render has started on the same canvas.
"""
import logging
import threading
import weakref
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from PIL import Image

from domain.models import LayoutVariant, RenderInput
from flyer_renderer import engine
from flyer_renderer.canvas import Canvas
from flyer_renderer.defaults import get_layout
from services.photo_decode import PhotoDecodeError, decode_photo_fast, decode_photo_slow
from services.template_cache import TemplateCache
from settings import settings

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], Image.Image]


@dataclass
class RenderPass:
    """Handle for one render call."""
    sequence: int
    pending: Optional[Future] = None

    @property
    def deferred(self) -> bool:
        return self.pending is not None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until deferred work finishes. True when everything was drawn."""
        if self.pending is None:
            return True
        return bool(self.pending.result(timeout=timeout))


class FlyerRenderer:
    """
    Renders flyers onto any number of canvases.

    Sequence numbers are global to the renderer, but staleness is per canvas:
    a new render on a canvas makes deferred portraits from earlier renders of
    that same canvas stale. Other canvases are unaffected.
    """

    def __init__(
        self,
        layout: Optional[LayoutVariant] = None,
        template_cache: Optional[TemplateCache] = None,
        executor: Optional[Executor] = None,
        fast_decoder: Decoder = decode_photo_fast,
        slow_decoder: Decoder = decode_photo_slow,
    ):
        self.layout = layout or get_layout(settings.FLYER_LAYOUT)
        self.template_cache = template_cache
        self._executor = executor
        self._owns_executor = executor is None
        self._fast_decoder = fast_decoder
        self._slow_decoder = slow_decoder
        self._lock = threading.Lock()
        self._sequence = 0
        self._latest: "weakref.WeakKeyDictionary[Canvas, int]" = weakref.WeakKeyDictionary()

    def __enter__(self) -> "FlyerRenderer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    @property
    def sequence(self) -> int:
        return self._sequence

    def new_canvas(self) -> Canvas:
        return Canvas(self.layout.width, self.layout.height)

    def close(self) -> None:
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="flyer-decode")
        return self._executor

    def _template_for(self, render_input: RenderInput) -> Optional[Image.Image]:
        if not render_input.template_ready:
            return None
        if render_input.template_image is not None:
            return render_input.template_image
        if self.template_cache is not None:
            return self.template_cache.image
        return None

    def render(self, canvas: Canvas, render_input: RenderInput) -> RenderPass:
        """Repaint `canvas` for `render_input`."""
        if canvas.size != self.layout.size:
            logger.warning(
                "[render] canvas %sx%s does not match layout %s (%sx%s)",
                canvas.width, canvas.height, self.layout.name.value, self.layout.width, self.layout.height,
            )
        with self._lock:
            self._sequence += 1
            seq = self._sequence
            self._latest[canvas] = seq
            canvas.reset_state()

            engine.paint_background(canvas, self.layout, self._template_for(render_input))

            pending = None
            if render_input.photo:
                pending = self._draw_portrait(canvas, render_input.photo, seq)

            self._draw_text(canvas, render_input)
        logger.debug("[render] seq=%s layout=%s deferred=%s", seq, self.layout.name.value, pending is not None)
        return RenderPass(sequence=seq, pending=pending)

    def _draw_portrait(self, canvas: Canvas, photo: bytes, seq: int) -> Optional[Future]:
        geometry = self.layout.portrait
        try:
            image = self._fast_decoder(photo)
        except PhotoDecodeError:
            logger.info("[portrait] fast decode failed seq=%s; drawing ring and deferring photo", seq, exc_info=True)
            engine.draw_portrait_ring(canvas, geometry.center_x, geometry.center_y, geometry.diameter,
                                      geometry.ring_width, geometry.ring_fill)
            return self._get_executor().submit(self._finish_portrait, canvas, photo, seq)
        engine.draw_portrait_at(canvas, image, geometry)
        return None

    def _finish_portrait(self, canvas: Canvas, photo: bytes, seq: int) -> bool:
        """Second phase of a deferred portrait: slow decode, then the clipped photo."""
        try:
            image = self._slow_decoder(photo)
        except PhotoDecodeError:
            logger.warning("[portrait] slow decode failed seq=%s; leaving ring only", seq, exc_info=True)
            return False

        geometry = self.layout.portrait
        with self._lock:
            latest = self._latest.get(canvas)
            if seq != latest:
                logger.info("[portrait] discarding stale photo seq=%s latest=%s", seq, latest)
                return False
            canvas.reset_state()
            engine.draw_portrait_photo(canvas, image, geometry.center_x, geometry.center_y, geometry.diameter)
        logger.debug("[portrait] deferred photo drawn seq=%s", seq)
        return True

    def _draw_text(self, canvas: Canvas, render_input: RenderInput) -> None:
        name = render_input.display_name
        for line in self.layout.lines:
            text = line.format(name)
            if self.layout.auto_fit:
                engine.fit_text(
                    canvas, text, line.x, line.y, line.max_width, line.font,
                    min_size=self.layout.min_font_px, color=line.fill, shadow=line.shadow,
                )
            else:
                canvas.fill_text(text, line.x, line.y, line.font, line.fill, shadow=line.shadow)


def render_flyer(
    render_input: RenderInput,
    layout: Optional[LayoutVariant] = None,
    template_cache: Optional[TemplateCache] = None,
    wait: bool = True,
) -> Canvas:
    """One-shot render onto a fresh canvas, waiting for any deferred portrait."""
    with FlyerRenderer(layout=layout, template_cache=template_cache) as renderer:
        canvas = renderer.new_canvas()
        render_pass = renderer.render(canvas, render_input)
        if wait:
            render_pass.wait()
    return canvas
