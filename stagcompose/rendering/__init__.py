"""Compositing, SVG rasterization and the repaint loop."""

from .animation import (
    AsyncioFrameScheduler,
    FrameScheduler,
    ManualFrameScheduler,
    needs_animation_frame,
)
from .compositor import Compositor, checkerboard, inverse_affine
from .pipeline import RenderPipeline
from .svg_layer import rasterize_svg, render_svg_string

__all__ = [
    'AsyncioFrameScheduler',
    'FrameScheduler',
    'ManualFrameScheduler',
    'needs_animation_frame',
    'Compositor',
    'checkerboard',
    'inverse_affine',
    'RenderPipeline',
    'rasterize_svg',
    'render_svg_string',
]
