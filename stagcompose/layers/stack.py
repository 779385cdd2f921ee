"""
LayerStack - the single ordered collection of layers.

Index 0 is the topmost layer: it is painted last and hit-tested first. The
sequence order is the only z-order there is, so painting and hit-testing go
through the named traversals :meth:`LayerStack.back_to_front` and
:meth:`LayerStack.front_to_back` instead of indexing the list directly.

All mutations are synchronous. Listeners (the list UI) receive the
authoritative ordered summaries after every structural change.
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Iterator, Optional

from stagcompose.config import settings
from stagcompose.geometry import Point, point_in_oriented_box

from .base import Layer

logger = logging.getLogger(__name__)


@dataclass
class LayerSummary:
    """What the layer list UI needs to show for one layer."""

    id: str
    name: str
    visible: bool = True
    kind: str = "raster"
    thumbnail: str | None = None  # PNG data URL

    def to_dict(self) -> dict:
        """Convert to dict for API response."""
        return {
            "id": self.id,
            "name": self.name,
            "visible": self.visible,
            "kind": self.kind,
            "thumbnail": self.thumbnail,
        }


StackListener = Callable[[list[LayerSummary], Optional[int]], None]


class LayerStack:
    """Ordered layers plus the single selection."""

    def __init__(self, min_layer_size: float | None = None):
        self._layers: list[Layer] = []
        self._selected_index: int | None = None
        self._listeners: list[StackListener] = []
        self._thumbnails: dict[str, str | None] = {}
        self.min_layer_size = (
            settings.MIN_LAYER_SIZE if min_layer_size is None else min_layer_size
        )

    # --- Access ---

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return self.front_to_back()

    @property
    def layers(self) -> list[Layer]:
        """Snapshot of the layers, topmost first."""
        return list(self._layers)

    @property
    def selected_index(self) -> int | None:
        """Index of the selected layer or None."""
        return self._selected_index

    @property
    def selected(self) -> Layer | None:
        """The selected layer or None."""
        if self._selected_index is None:
            return None
        return self._layers[self._selected_index]

    def get(self, layer_id: str) -> Layer | None:
        """Get a layer by ID."""
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        return None

    def index_of(self, layer_id: str) -> int | None:
        """Get the index of a layer by ID."""
        for i, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return i
        return None

    def front_to_back(self) -> Iterator[Layer]:
        """Topmost first. Use for hit-testing."""
        return iter(list(self._layers))

    def back_to_front(self) -> Iterator[Layer]:
        """Bottommost first. Use for painting and export."""
        return iter(list(reversed(self._layers)))

    def layer_at(self, point: Point) -> int | None:
        """
        Hit-test visible layers, topmost first.

        Returns:
            Index of the topmost visible layer containing the point, or None
        """
        for index, layer in enumerate(self.front_to_back()):
            if layer.visible and point_in_oriented_box(point, layer.transform):
                return index
        return None

    def has_animated_layers(self) -> bool:
        """Whether any visible layer carries live vector animation."""
        return any(layer.visible and layer.is_animated() for layer in self._layers)

    # --- Mutation ---

    def add_layer(self, layer: Layer) -> None:
        """Insert a layer on top of the stack and select it."""
        self._layers.insert(0, layer)
        self._selected_index = 0
        logger.info("Added layer %s (%s), %d layers", layer.id, layer.name, len(self._layers))
        self._notify()

    def remove_selected(self) -> Layer | None:
        """
        Delete the selected layer.

        Selection moves to the layer that now occupies the same index, or to
        the new last layer, or to None when the stack is empty.

        Returns:
            The removed layer, or None if nothing was selected
        """
        index = self._selected_index
        if index is None:
            return None

        removed = self._layers.pop(index)
        self._thumbnails.pop(removed.id, None)

        if not self._layers:
            self._selected_index = None
        elif index < len(self._layers):
            self._selected_index = index
        else:
            self._selected_index = len(self._layers) - 1

        logger.info("Removed layer %s (%s)", removed.id, removed.name)
        self._notify()
        return removed

    def move_selected_up(self) -> bool:
        """Swap the selected layer with the one above it (toward index 0)."""
        index = self._selected_index
        if index is None or index == 0:
            return False
        self._swap(index, index - 1)
        return True

    def move_selected_down(self) -> bool:
        """Swap the selected layer with the one below it."""
        index = self._selected_index
        if index is None or index >= len(self._layers) - 1:
            return False
        self._swap(index, index + 1)
        return True

    def _swap(self, index: int, other: int) -> None:
        self._layers[index], self._layers[other] = self._layers[other], self._layers[index]
        self._selected_index = other
        self._notify()

    def set_visibility(self, layer_id: str, visible: bool) -> bool:
        """
        Show or hide a layer.

        Returns:
            True if the layer was found
        """
        layer = self.get(layer_id)
        if layer is None:
            logger.debug("Visibility change for unknown layer %s ignored", layer_id)
            return False
        layer.visible = visible
        self._notify()
        return True

    def select(self, index: int | None) -> bool:
        """
        Select a layer by index, or clear the selection with None.

        Out-of-range indices are ignored.

        Returns:
            True if the selection is now ``index``
        """
        if index is not None and not 0 <= index < len(self._layers):
            logger.debug("Ignoring selection of invalid index %s", index)
            return False
        if index != self._selected_index:
            self._selected_index = index
            self._notify()
        return True

    def update_selected_transform(
        self,
        x: float | None = None,
        y: float | None = None,
        width: float | None = None,
        height: float | None = None,
        rotation: float | None = None,
    ) -> bool:
        """
        Directly edit the selected layer's transform.

        Width and height are floored at the minimum layer size.

        Returns:
            True if a layer was selected
        """
        layer = self.selected
        if layer is None:
            return False
        transform = layer.transform
        if x is not None:
            transform.x = x
        if y is not None:
            transform.y = y
        if width is not None:
            transform.width = max(self.min_layer_size, width)
        if height is not None:
            transform.height = max(self.min_layer_size, height)
        if rotation is not None:
            transform.rotation = rotation
        self._notify()
        return True

    def clear(self) -> None:
        """Remove all layers and clear the selection."""
        self._layers.clear()
        self._thumbnails.clear()
        self._selected_index = None
        logger.info("Cleared layer stack")
        self._notify()

    # --- Listeners ---

    def subscribe(self, listener: StackListener) -> Callable[[], None]:
        """
        Register a listener for stack changes.

        The listener is called immediately with the current state.

        Returns:
            Function that unsubscribes the listener
        """
        self._listeners.append(listener)
        listener(self.summaries(), self._selected_index)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def summaries(self) -> list[LayerSummary]:
        """Ordered summaries, topmost first."""
        return [
            LayerSummary(
                id=layer.id,
                name=layer.name,
                visible=layer.visible,
                kind=layer.kind.value,
                thumbnail=self._thumbnail(layer),
            )
            for layer in self._layers
        ]

    def _thumbnail(self, layer: Layer) -> str | None:
        if layer.id in self._thumbnails:
            return self._thumbnails[layer.id]
        thumbnail = None
        if layer.drawable is not None:
            image = layer.drawable.copy()
            image.thumbnail((settings.THUMBNAIL_SIZE, settings.THUMBNAIL_SIZE))
            buffer = BytesIO()
            image.save(buffer, format='PNG')
            b64 = base64.b64encode(buffer.getvalue()).decode('ascii')
            thumbnail = f'data:image/png;base64,{b64}'
        self._thumbnails[layer.id] = thumbnail
        return thumbnail

    def _notify(self) -> None:
        if not self._listeners:
            return
        summaries = self.summaries()
        for listener in list(self._listeners):
            listener(summaries, self._selected_index)
