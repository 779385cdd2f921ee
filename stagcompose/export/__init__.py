"""Raster and SVG export of a composition."""

from .composite import ExportArtifact, export_composite, supported_formats
from .raster import RASTER_FORMATS, export_raster
from .svg import build_svg_document, layer_element

__all__ = [
    'ExportArtifact',
    'export_composite',
    'supported_formats',
    'RASTER_FORMATS',
    'export_raster',
    'build_svg_document',
    'layer_element',
]
