"""
Stagcompose Layer Models

Layer
├── source: RasterSource (kind: 'raster')
│           VectorSource (kind: 'vector')
└── transform: LayerTransform

LayerStack owns the ordered layers and the selection.
"""

from .base import Layer, LayerKind, LayerSource, LayerTransform
from .sources import RasterSource, VectorSource
from .stack import LayerStack, LayerSummary


def layer_from_dict(data: dict) -> Layer:
    """
    Create a layer instance from a serialized dictionary.

    Args:
        data: Serialized layer data

    Returns:
        Layer instance without a drawable
    """
    return Layer.from_api_dict(data)


__all__ = [
    'Layer',
    'LayerKind',
    'LayerSource',
    'LayerTransform',
    'RasterSource',
    'VectorSource',
    'LayerStack',
    'LayerSummary',
    'layer_from_dict',
]
