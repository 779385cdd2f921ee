"""SVG document export.

Each visible layer becomes one element, back-to-front:

- animated vector layers embed their original root ``<svg>`` element inside a
  group carrying ``translate(x y) rotate(r w/2 h/2) scale(w/nw h/nh)``, so SMIL
  or CSS animation keeps playing in the exported file;
- every other layer becomes an ``<image>`` stretched to the layer box, with a
  ``rotate(r cx cy)`` transform only when the layer is rotated.

Both forms place pixels exactly where the compositor does.
"""

import logging
from xml.sax.saxutils import quoteattr

from stagcompose.layers import Layer, LayerStack, VectorSource
from stagcompose.rendering.svg_layer import (
    SVG_NAMESPACE,
    format_number,
    normalize_svg_dimensions,
    root_element,
)

logger = logging.getLogger(__name__)


def animated_vector_element(layer: Layer) -> str:
    """Group wrapping the layer's original markup in its combined transform."""
    source = layer.source
    transform = layer.transform
    natural_width, natural_height = layer.natural_size()

    group_transform = ' '.join([
        f'translate({format_number(transform.x)} {format_number(transform.y)})',
        f'rotate({format_number(transform.rotation)} '
        f'{format_number(transform.width / 2)} {format_number(transform.height / 2)})',
        f'scale({format_number(transform.width / natural_width)} '
        f'{format_number(transform.height / natural_height)})',
    ])

    # Only the root width/height are pinned; the rest is kept verbatim
    fragment = root_element(
        normalize_svg_dimensions(source.svg_content, natural_width, natural_height)
    )
    return (
        f'<g id="layer-{layer.id}" data-name={quoteattr(layer.name)} '
        f'transform="{group_transform}">\n{fragment}\n</g>'
    )


def image_element(layer: Layer) -> str:
    """Plain ``<image>`` reference for raster and static vector layers."""
    transform = layer.transform
    attributes = [
        f'id="layer-{layer.id}"',
        f'data-name={quoteattr(layer.name)}',
        f'x="{format_number(transform.x)}"',
        f'y="{format_number(transform.y)}"',
        f'width="{format_number(transform.width)}"',
        f'height="{format_number(transform.height)}"',
        'preserveAspectRatio="none"',
        f'href={quoteattr(layer.source.data_url())}',
    ]
    if transform.has_rotation():
        cx, cy = transform.center
        attributes.append(
            f'transform="rotate({format_number(transform.rotation)} '
            f'{format_number(cx)} {format_number(cy)})"'
        )
    return f'<image {" ".join(attributes)}/>'


def layer_element(layer: Layer) -> str | None:
    """SVG markup for one layer, or None if it has nothing to draw."""
    if not layer.source.has_content():
        logger.debug("Layer %s has no content, not exported", layer.id)
        return None
    if isinstance(layer.source, VectorSource) and layer.source.animated:
        return animated_vector_element(layer)
    return image_element(layer)


def build_svg_document(stack: LayerStack, width: int, height: int) -> str:
    """Serialize the visible layers into a standalone SVG document.

    Args:
        stack: Layers to export
        width: Canvas width
        height: Canvas height

    Returns:
        SVG document string
    """
    elements = []
    for layer in stack.back_to_front():
        if not layer.visible:
            continue
        element = layer_element(layer)
        if element:
            elements.append(element)

    body = ''.join(f'  {element}\n' for element in elements)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="{SVG_NAMESPACE}" '
        f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">\n'
        f'{body}'
        '</svg>\n'
    )
