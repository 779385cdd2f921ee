"""Layer compositing with Pillow.

One pass paints, in order:

1. a cleared transparent surface of canvas size
2. the checkerboard that visualizes transparency (editor only)
3. every visible layer, back-to-front, through a single affine transform
4. the selection outline and handles of the selected layer (editor only)

Each layer is drawn by inverse mapping: for every surface pixel, the affine
matrix finds the source pixel, so rotation, translation and scaling happen in
one resampling step. The forward transform is the one the SVG export writes:
translate to the layer origin, rotate about the layer center, scale from the
drawable's size to the layer's size.
"""

import logging
import math

import numpy as np
from PIL import Image, ImageColor, ImageDraw

from stagcompose.config import settings
from stagcompose.geometry import (
    Point,
    local_corners,
    oriented_corners,
    rotation_handle_position,
    to_world,
)
from stagcompose.layers import Layer, LayerStack

from .svg_layer import rasterize_svg

logger = logging.getLogger(__name__)


def checkerboard(width: int, height: int, cell: int, light: str, dark: str) -> Image.Image:
    """Build an opaque checkerboard, colored by row + column parity."""
    rows, cols = np.indices((height, width))
    parity = ((rows // cell) + (cols // cell)) % 2
    light_rgba = np.array(ImageColor.getcolor(light, 'RGBA'), dtype=np.uint8)
    dark_rgba = np.array(ImageColor.getcolor(dark, 'RGBA'), dtype=np.uint8)
    pixels = np.where(parity[..., None] == 0, light_rgba, dark_rgba).astype(np.uint8)
    return Image.fromarray(pixels, 'RGBA')


def inverse_affine(
    layer: Layer,
    source_width: int,
    source_height: int,
) -> tuple[float, float, float, float, float, float]:
    """Matrix mapping surface coordinates to drawable pixel coordinates.

    Returns the ``(a, b, c, d, e, f)`` coefficients for
    ``Image.transform(..., Image.Transform.AFFINE, ...)``.
    """
    transform = layer.transform
    theta = math.radians(transform.rotation)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    cx, cy = transform.center
    sx = source_width / transform.width if transform.width else 0.0
    sy = source_height / transform.height if transform.height else 0.0

    # local = R(-theta) * (p - center) + (w/2, h/2); source = local * (sx, sy)
    return (
        cos_t * sx,
        sin_t * sx,
        sx * (-cos_t * cx - sin_t * cy + transform.width / 2),
        -sin_t * sy,
        cos_t * sy,
        sy * (sin_t * cx - cos_t * cy + transform.height / 2),
    )


class Compositor:
    """Paints a layer stack onto an RGBA surface."""

    def __init__(self, width: int, height: int, supersample: int | None = None):
        self.width = width
        self.height = height
        self.supersample = supersample if supersample is not None else settings.SVG_SUPERSAMPLE
        self._background: Image.Image | None = None
        # Rasterized vector drawables keyed by (layer id, width, height)
        self._vector_cache: dict[tuple[str, int, int], Image.Image] = {}

    def resize(self, width: int, height: int) -> None:
        """Change the surface extent."""
        self.width = width
        self.height = height
        self._background = None

    def render(
        self,
        stack: LayerStack,
        include_decoration: bool = True,
        include_background: bool = True,
    ) -> Image.Image:
        """Run one paint pass.

        Args:
            stack: Layers to paint
            include_decoration: Draw the selection outline and handles
            include_background: Paint the transparency checkerboard

        Returns:
            RGBA surface of canvas size
        """
        surface = Image.new('RGBA', (self.width, self.height), (0, 0, 0, 0))
        if include_background:
            surface.alpha_composite(self._checkerboard())

        live_ids = set()
        for layer in stack.back_to_front():
            live_ids.add(layer.id)
            if not layer.visible:
                continue
            self.paint_layer(surface, layer)

        self._prune_cache(live_ids)

        selected = stack.selected
        if include_decoration and selected is not None:
            self.paint_selection(surface, selected)
        return surface

    def render_array(self, stack: LayerStack, **kwargs) -> np.ndarray:
        """Same as :meth:`render`, as an RGBA numpy array."""
        return np.array(self.render(stack, **kwargs), dtype=np.uint8)

    def paint_layer(self, surface: Image.Image, layer: Layer) -> None:
        """Draw one layer's drawable in its oriented box."""
        transform = layer.transform
        if transform.width <= 0 or transform.height <= 0:
            return
        drawable = self._drawable_for(layer)
        if drawable is None:
            logger.debug("Layer %s has no drawable, skipping", layer.id)
            return
        if drawable.mode != 'RGBA':
            drawable = drawable.convert('RGBA')

        coefficients = inverse_affine(layer, drawable.width, drawable.height)
        placed = drawable.transform(
            surface.size,
            Image.Transform.AFFINE,
            coefficients,
            resample=Image.Resampling.BILINEAR,
            fillcolor=(0, 0, 0, 0),
        )
        surface.alpha_composite(placed)

    def paint_selection(self, surface: Image.Image, layer: Layer) -> None:
        """Draw outline, corner handles, rotation handle and its guide line.

        Positions are taken in the layer's local frame and mapped to world
        coordinates, so the decoration stays attached under rotation.
        """
        transform = layer.transform
        color = settings.SELECTION_COLOR
        line_width = settings.SELECTION_WIDTH
        draw = ImageDraw.Draw(surface)

        outline = oriented_corners(transform)
        draw.line(outline + [outline[0]], fill=color, width=line_width, joint='curve')

        half = settings.HANDLE_SIZE / 2
        for corner in local_corners(transform).values():
            square = [
                Point(corner.x - half, corner.y - half),
                Point(corner.x + half, corner.y - half),
                Point(corner.x + half, corner.y + half),
                Point(corner.x - half, corner.y + half),
            ]
            draw.polygon(
                [to_world(p, transform) for p in square],
                fill=settings.HANDLE_FILL,
                outline=color,
            )

        handle = rotation_handle_position(transform, settings.ROTATION_HANDLE_OFFSET)
        top_mid = to_world(Point(transform.width / 2, 0.0), transform)
        handle_world = to_world(handle, transform)
        draw.line([top_mid, handle_world], fill=color, width=line_width)

        radius = settings.ROTATION_HANDLE_RADIUS
        draw.ellipse(
            [
                handle_world.x - radius,
                handle_world.y - radius,
                handle_world.x + radius,
                handle_world.y + radius,
            ],
            fill=settings.HANDLE_FILL,
            outline=color,
            width=line_width,
        )

    def _checkerboard(self) -> Image.Image:
        if self._background is None or self._background.size != (self.width, self.height):
            self._background = checkerboard(
                self.width,
                self.height,
                settings.CHECKER_SIZE,
                settings.CHECKER_LIGHT,
                settings.CHECKER_DARK,
            )
        return self._background

    def _drawable_for(self, layer: Layer) -> Image.Image | None:
        """Raster layers use their drawable; vector layers are rasterized at their current size."""
        if layer.is_raster() or not layer.source.has_content():
            return layer.drawable

        width = max(1, math.ceil(layer.transform.width))
        height = max(1, math.ceil(layer.transform.height))
        key = (layer.id, width, height)
        cached = self._vector_cache.get(key)
        if cached is None:
            cached = rasterize_svg(
                layer.source.svg_content,
                width,
                height,
                layer.source.natural_width,
                layer.source.natural_height,
                supersample=self.supersample,
            )
            # One size per layer is enough while a resize is in progress
            for stale in [k for k in self._vector_cache if k[0] == layer.id]:
                del self._vector_cache[stale]
            self._vector_cache[key] = cached
        return cached

    def _prune_cache(self, live_ids: set[str]) -> None:
        for key in [k for k in self._vector_cache if k[0] not in live_ids]:
            del self._vector_cache[key]
