"""
Interactive flyer session.

Holds the inputs a user edits (name, photo) and re-renders the canvas whenever
one of them, or template readiness, changes.
"""
import logging
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Optional, Union

from domain.models import RenderInput, ShareResult
from flyer_renderer.canvas import Canvas
from services.flyer_export import encode_jpeg, save_download, share_flyer
from services.flyer_render import FlyerRenderer, RenderPass
from services.template_cache import TemplateCache

logger = logging.getLogger(__name__)


class FlyerSession:
    def __init__(
        self,
        renderer: FlyerRenderer,
        template_cache: Optional[TemplateCache] = None,
        canvas: Optional[Canvas] = None,
    ):
        self.renderer = renderer
        self.template_cache = template_cache if template_cache is not None else renderer.template_cache
        self.canvas = canvas or renderer.new_canvas()
        self._name = ""
        self._photo: Optional[bytes] = None
        self._template_ready = bool(self.template_cache and self.template_cache.ready)
        self.last_pass: Optional[RenderPass] = None

    @property
    def render_input(self) -> RenderInput:
        template = self.template_cache.image if (self.template_cache and self._template_ready) else None
        return RenderInput(
            name=self._name,
            photo=self._photo,
            template_image=template,
            template_ready=self._template_ready and template is not None,
        )

    def refresh(self) -> RenderPass:
        self.last_pass = self.renderer.render(self.canvas, self.render_input)
        return self.last_pass

    def start(self, executor: Optional[Executor] = None) -> Optional[Future]:
        """
        Render the placeholder flyer, then load the template (in the background
        when an executor is given) and render again once it is ready.
        """
        self.refresh()
        if self.template_cache is None:
            return None
        if executor is None:
            if self.template_cache.load() is not None:
                self.template_loaded()
            return None
        return self.template_cache.load_async(executor, on_ready=lambda _image: self.template_loaded())

    def template_loaded(self) -> None:
        if self._template_ready:
            return
        self._template_ready = True
        logger.debug("[session] template ready; re-rendering")
        self.refresh()

    def set_name(self, name: str) -> None:
        name = name or ""
        if name == self._name:
            return
        self._name = name
        self.refresh()

    def set_photo(self, photo: Optional[bytes]) -> None:
        photo = photo or None
        if photo == self._photo:
            return
        self._photo = photo
        self.refresh()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self.last_pass.wait(timeout) if self.last_pass else True

    def download(self, directory: Union[str, Path, None] = None) -> Path:
        return save_download(self.canvas, directory)

    def share(self, page_url: Optional[str] = None, sharer=None, **kwargs) -> ShareResult:
        return share_flyer(encode_jpeg(self.canvas), page_url=page_url, sharer=sharer, **kwargs)
