"""Frame scheduling for the animated repaint loop.

The loop has no cancellation handle. Whether another frame is needed is a
pure function of the layer stack, evaluated at the start of every scheduled
frame, so deleting or hiding the last animated layer stops the loop on the
next frame even if one was already queued.
"""

import asyncio
import logging
from typing import Callable

from stagcompose.config import settings
from stagcompose.layers import LayerStack

logger = logging.getLogger(__name__)

FrameCallback = Callable[[], None]


def needs_animation_frame(stack: LayerStack) -> bool:
    """Whether the stack currently shows live vector animation."""
    return stack.has_animated_layers()


class FrameScheduler:
    """Requests a callback at the next display refresh."""

    def request_frame(self, callback: FrameCallback) -> None:
        raise NotImplementedError


class ManualFrameScheduler(FrameScheduler):
    """Queues frame callbacks until :meth:`run_pending` is called.

    Used when there is no display refresh to key off, e.g. in the HTTP API and
    in tests.
    """

    def __init__(self):
        self._pending: list[FrameCallback] = []

    @property
    def pending_count(self) -> int:
        """Number of queued frame callbacks."""
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def run_pending(self) -> int:
        """Run the callbacks queued so far. Callbacks they queue wait for the next call."""
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback()
        return len(callbacks)


class AsyncioFrameScheduler(FrameScheduler):
    """Schedules frames on an asyncio event loop at a fixed refresh rate."""

    def __init__(self, fps: float | None = None, loop: asyncio.AbstractEventLoop | None = None):
        self.fps = fps or settings.ANIMATION_FPS
        self._loop = loop

    def request_frame(self, callback: FrameCallback) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(1.0 / self.fps, callback)
