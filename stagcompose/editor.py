"""
CompositionEditor - the engine's outer surface.

Wires the layer stack, gesture controller, render pipeline and exporters
together and exposes the operations the surrounding UI calls: importing
files, layer list actions, pointer/touch/wheel input, canvas size control and
export. Every mutating call repaints the surface synchronously.
"""

import logging
from typing import Any

from PIL import Image

from stagcompose.config import settings
from stagcompose.export import ExportArtifact, export_composite
from stagcompose.gestures import GestureController, PointerEvent, TouchEvent, WheelEvent
from stagcompose.importer import create_layer, decode_file, load_layer
from stagcompose.layers import Layer, LayerStack
from stagcompose.rendering import FrameScheduler, RenderPipeline

logger = logging.getLogger(__name__)


class CompositionEditor:
    """One canvas with its layers, gestures and repaint loop."""

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        scheduler: FrameScheduler | None = None,
    ):
        self.stack = LayerStack()
        self.gestures = GestureController(self.stack)
        self.pipeline = RenderPipeline(
            self.stack,
            width or settings.CANVAS_WIDTH,
            height or settings.CANVAS_HEIGHT,
            scheduler=scheduler,
        )

    @property
    def width(self) -> int:
        """Canvas width."""
        return self.pipeline.size[0]

    @property
    def height(self) -> int:
        """Canvas height."""
        return self.pipeline.size[1]

    @property
    def surface(self) -> Image.Image:
        """Last painted frame, painting one if none exists yet."""
        if self.pipeline.surface is None:
            return self.render()
        return self.pipeline.surface

    def render(self) -> Image.Image:
        """Repaint the surface."""
        return self.pipeline.render()

    def _changed(self, changed: bool) -> bool:
        if changed:
            self.render()
        return changed

    # --- Import ---

    def add_layer(self, layer: Layer) -> Layer:
        """Put a decoded layer on top and select it."""
        self.stack.add_layer(layer)
        self.render()
        return layer

    def import_file(self, data: bytes, filename: str) -> Layer:
        """
        Decode a file and add it as a centered layer.

        Raises:
            ImportDecodeError: If the file cannot be decoded; nothing changes
        """
        decoded = decode_file(data, filename)
        return self.add_layer(create_layer(decoded, self.width, self.height))

    async def import_file_async(self, data: bytes, filename: str) -> Layer:
        """Like :meth:`import_file`, decoding in a worker thread."""
        layer = await load_layer(data, filename, self.width, self.height)
        return self.add_layer(layer)

    # --- Layer list actions ---

    def select(self, index: int | None) -> bool:
        return self._changed(self.stack.select(index))

    def set_visibility(self, layer_id: str, visible: bool) -> bool:
        return self._changed(self.stack.set_visibility(layer_id, visible))

    def move_selected_up(self) -> bool:
        return self._changed(self.stack.move_selected_up())

    def move_selected_down(self) -> bool:
        return self._changed(self.stack.move_selected_down())

    def remove_selected(self) -> Layer | None:
        removed = self.stack.remove_selected()
        self._changed(removed is not None)
        return removed

    def update_selected_transform(self, **fields: float | None) -> bool:
        """Numeric edit of x, y, width, height and rotation."""
        return self._changed(self.stack.update_selected_transform(**fields))

    # --- Input ---

    def pointer_down(self, x: float, y: float) -> bool:
        return self._changed(self.gestures.pointer_down(PointerEvent(x, y)))

    def pointer_move(self, x: float, y: float) -> bool:
        return self._changed(self.gestures.pointer_move(PointerEvent(x, y)))

    def pointer_up(self) -> bool:
        return self._changed(self.gestures.pointer_up())

    def pointer_leave(self) -> bool:
        return self._changed(self.gestures.pointer_leave())

    def touch_start(self, touches: list[tuple[float, float]]) -> bool:
        return self._changed(self.gestures.touch_start(TouchEvent(tuple(touches))))

    def touch_move(self, touches: list[tuple[float, float]]) -> bool:
        return self._changed(self.gestures.touch_move(TouchEvent(tuple(touches))))

    def touch_end(self) -> bool:
        return self._changed(self.gestures.touch_end())

    def wheel(self, delta_y: float, x: float = 0.0, y: float = 0.0) -> bool:
        return self._changed(self.gestures.wheel(WheelEvent(x, y, delta_y)))

    # --- Canvas ---

    def resize_canvas(self, width: int, height: int) -> None:
        """Change the surface extent; layers keep their positions."""
        self.pipeline.resize(width, height)

    def close(self) -> None:
        """Stop the animation repaint loop."""
        self.gestures.abort()
        self.pipeline.close()

    def reset_canvas(self) -> None:
        """Drop all layers, the selection and any gesture in progress."""
        self.gestures.abort()
        self.stack.clear()
        self.render()

    # --- Export ---

    def export_composite(self, format: str = 'png') -> ExportArtifact:
        """
        Export the composition.

        Args:
            format: 'png', 'webp', 'jpeg' or 'svg'/'vector'

        Raises:
            UnsupportedExportFormatError: If the format is unknown
        """
        return export_composite(
            self.stack,
            self.width,
            self.height,
            format,
            compositor=self.pipeline.compositor,
        )

    def to_api_dict(self) -> dict[str, Any]:
        """Editor state for API responses, without layer content."""
        return {
            "width": self.width,
            "height": self.height,
            "layers": [layer.to_api_dict(include_content=False) for layer in self.stack],
            "selected_index": self.stack.selected_index,
            "gesture": self.gestures.state.name,
            "animating": self.stack.has_animated_layers(),
            "frames": self.pipeline.frame_count,
        }
