"""
Template image cache.

The flyer template is loaded once (from a local path or an http(s) URL) and
reused by every render. Construct one TemplateCache at startup and hand it to
whatever renders flyers.
"""
import logging
import threading
from concurrent.futures import Executor, Future
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Union

import requests
from PIL import Image

from settings import settings

logger = logging.getLogger(__name__)

TEMPLATE_USER_AGENT = "flyer-studio/1.0 (template-fetch)"


def is_url(source: Union[str, Path]) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


class TemplateCache:
    """Lazily loaded, write-once holder for the decoded template image."""

    def __init__(
        self,
        source: Union[str, Path, None] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.source = source if source is not None else settings.FLYER_TEMPLATE_SOURCE
        self.timeout = timeout if timeout is not None else settings.FLYER_TEMPLATE_TIMEOUT
        self._session = session
        self._lock = threading.Lock()
        self._image: Optional[Image.Image] = None
        self._attempted = False

    @property
    def ready(self) -> bool:
        return self._image is not None

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    def _fetch_bytes(self) -> bytes:
        if is_url(self.source):
            session = self._session or requests.Session()
            resp = session.get(self.source, headers={"User-Agent": TEMPLATE_USER_AGENT}, timeout=self.timeout)
            resp.raise_for_status()
            return resp.content
        return Path(self.source).read_bytes()

    def load(self) -> Optional[Image.Image]:
        """
        Load the template on first call; later calls return the cached result.

        A failed load is logged and not retried; renders keep using the
        gradient fallback.
        """
        if self._attempted:
            return self._image
        with self._lock:
            if self._attempted:
                return self._image
            try:
                data = self._fetch_bytes()
                img = Image.open(BytesIO(data))
                img.load()
                self._image = img.convert("RGBA")
                logger.info("[template] loaded %s size=%sx%s", self.source, self._image.width, self._image.height)
            except (requests.RequestException, OSError, ValueError):
                logger.warning("[template] could not load %s; using gradient fallback", self.source, exc_info=True)
            finally:
                self._attempted = True
        return self._image

    def load_async(
        self,
        executor: Executor,
        on_ready: Optional[Callable[[Image.Image], None]] = None,
    ) -> Future:
        """Load in the background; `on_ready` runs only when an image was loaded."""
        future = executor.submit(self.load)

        def _done(fut: Future) -> None:
            if fut.cancelled():
                return
            if fut.exception() is not None:
                logger.error("[template] background load crashed", exc_info=fut.exception())
                return
            image = fut.result()
            if image is not None and on_ready is not None:
                on_ready(image)

        future.add_done_callback(_done)
        return future
