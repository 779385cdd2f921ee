"""Render pipeline: owns the visible surface and the repaint loop."""

import logging
from typing import Callable

from PIL import Image

from stagcompose.layers import LayerStack

from .animation import FrameScheduler, ManualFrameScheduler, needs_animation_frame
from .compositor import Compositor

logger = logging.getLogger(__name__)

Presenter = Callable[[Image.Image], None]


class RenderPipeline:
    """Repaints the surface on demand and every frame while animation is live."""

    def __init__(
        self,
        stack: LayerStack,
        width: int,
        height: int,
        scheduler: FrameScheduler | None = None,
    ):
        self.stack = stack
        self.compositor = Compositor(width, height)
        self.scheduler = scheduler or ManualFrameScheduler()
        self.surface: Image.Image | None = None
        self.frame_count = 0
        self._presenters: list[Presenter] = []
        self._frame_pending = False
        self._closed = False

    @property
    def size(self) -> tuple[int, int]:
        """Surface extent."""
        return self.compositor.width, self.compositor.height

    @property
    def frame_pending(self) -> bool:
        """Whether an animation frame is queued."""
        return self._frame_pending

    def add_presenter(self, presenter: Presenter) -> None:
        """Register a callback that receives every painted surface."""
        self._presenters.append(presenter)

    def render(self) -> Image.Image:
        """Paint one frame synchronously and present it."""
        surface = self.compositor.render(self.stack)
        self.surface = surface
        self.frame_count += 1
        for presenter in list(self._presenters):
            presenter(surface)
        self._schedule_if_animated()
        return surface

    def resize(self, width: int, height: int) -> Image.Image:
        """Change the surface extent and repaint."""
        self.compositor.resize(width, height)
        logger.info("Canvas resized to %dx%d", width, height)
        return self.render()

    def close(self) -> None:
        """Stop the repaint loop for good; queued frames become no-ops."""
        self._closed = True

    def _schedule_if_animated(self) -> None:
        if self._closed or self._frame_pending or not needs_animation_frame(self.stack):
            return
        self._frame_pending = True
        self.scheduler.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._frame_pending = False
        # Layers may have been deleted or hidden since this frame was queued
        if self._closed or not needs_animation_frame(self.stack):
            logger.debug("No animated layers left, repaint loop idle")
            return
        self.render()
