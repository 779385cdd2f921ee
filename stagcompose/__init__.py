"""
Stagcompose - layered image composition.

Import raster and SVG files as layers, move, resize and rotate them with
pointer and touch gestures, and export the result as a flattened image or a
standalone SVG document.
"""

__version__ = "0.1.0"

from .editor import CompositionEditor
from .exceptions import (
    CompositionError,
    ImportDecodeError,
    SessionNotFoundError,
    UnsupportedExportFormatError,
)
from .layers import Layer, LayerStack, LayerTransform, RasterSource, VectorSource

__all__ = [
    '__version__',
    'CompositionEditor',
    'CompositionError',
    'ImportDecodeError',
    'SessionNotFoundError',
    'UnsupportedExportFormatError',
    'Layer',
    'LayerStack',
    'LayerTransform',
    'RasterSource',
    'VectorSource',
]
