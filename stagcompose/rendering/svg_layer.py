"""SVG rasterization using resvg.

IMPORTANT: resvg is the ONLY Python SVG renderer used here.
The editor composite, layer previews and export checks all go through it so
they agree with each other.
"""

import io
import re

import numpy as np
from PIL import Image
from resvg_py import svg_to_bytes

from stagcompose.config import settings

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
_SVG_TAG = re.compile(r'<svg\b[^>]*>', re.IGNORECASE | re.DOTALL)


def find_root_tag(svg_content: str) -> re.Match | None:
    """Locate the opening tag of the root ``<svg>`` element."""
    return _SVG_TAG.search(svg_content)


def root_element(svg_content: str) -> str:
    """Return the markup from the root ``<svg>`` tag on.

    Drops the XML prolog, doctype and any leading comments so the element can
    be embedded in another document. Everything after the root tag start is
    kept verbatim.
    """
    match = find_root_tag(svg_content)
    if not match:
        return svg_content
    return svg_content[match.start():].rstrip()


def _set_root_attribute(svg_tag: str, name: str, value: str) -> str:
    pattern = re.compile(rf'(\s){re.escape(name)}\s*=\s*("[^"]*"|\'[^\']*\')')
    if pattern.search(svg_tag):
        return pattern.sub(lambda m: f'{m.group(1)}{name}="{value}"', svg_tag, count=1)
    closing = '/>' if svg_tag.endswith('/>') else '>'
    return f'{svg_tag[:-len(closing)]} {name}="{value}"{closing}'


def normalize_svg_dimensions(svg_content: str, width: float, height: float) -> str:
    """Pin the root element's width/height to pixel values.

    Some SVGs use units like mm, cm, in, pt, etc. or omit the size entirely.
    This replaces (or adds) the width/height attributes on the root <svg>
    element only.

    Args:
        svg_content: Raw SVG string
        width: Target width in pixels
        height: Target height in pixels

    Returns:
        SVG string with normalized dimensions
    """
    match = find_root_tag(svg_content)
    if not match:
        return svg_content

    svg_tag = match.group(0)
    new_svg_tag = _set_root_attribute(svg_tag, 'width', format_number(width))
    new_svg_tag = _set_root_attribute(new_svg_tag, 'height', format_number(height))

    return svg_content[:match.start()] + new_svg_tag + svg_content[match.end():]


def embed_in_box(
    svg_content: str,
    width: int,
    height: int,
    natural_width: float,
    natural_height: float,
) -> str:
    """Wrap an SVG so its natural box is stretched to ``width`` x ``height``.

    The root element keeps its own viewBox and preserveAspectRatio and lays
    out inside its natural size, just as it does when embedded in an exported
    document. Only the outer viewport stretches that box.
    """
    fragment = root_element(normalize_svg_dimensions(svg_content, natural_width, natural_height))
    return (
        f'<svg xmlns="{SVG_NAMESPACE}" width="{width}" height="{height}" '
        f'viewBox="0 0 {format_number(natural_width)} {format_number(natural_height)}" '
        f'preserveAspectRatio="none">{fragment}</svg>'
    )


def fit_raster_size(width: int, height: int, max_size: int) -> tuple[int, int]:
    """Scale a pixel size down, keeping its aspect, so no side exceeds ``max_size``."""
    width = max(1, int(width))
    height = max(1, int(height))
    longest = max(width, height)
    if longest <= max_size:
        return width, height
    ratio = max_size / longest
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def rasterize_svg(
    svg_content: str,
    width: int,
    height: int,
    natural_width: float | None = None,
    natural_height: float | None = None,
    supersample: int = 2,
    max_size: int | None = None,
) -> Image.Image:
    """Render SVG markup stretched to ``width`` x ``height``.

    Sizes beyond ``max_size`` on the longer side are scaled down; callers
    that place the result through an affine transform scale it back up.

    Args:
        svg_content: SVG string to render
        width: Output width in pixels
        height: Output height in pixels
        natural_width: Intrinsic width of the document's own box
        natural_height: Intrinsic height of the document's own box
        supersample: Render at this multiple then downscale for quality
        max_size: Longest rendered side, defaults to settings.MAX_RASTER_SIZE

    Returns:
        RGBA PIL image
    """
    limit = max(1, max_size or settings.MAX_RASTER_SIZE)
    width, height = fit_raster_size(width, height, limit)
    if not svg_content:
        return Image.new('RGBA', (width, height), (0, 0, 0, 0))

    # Supersampling stays within the size limit as well
    scale = max(1, min(supersample, limit // max(width, height)))
    render_width = width * scale
    render_height = height * scale

    document = embed_in_box(
        svg_content,
        render_width,
        render_height,
        natural_width or width,
        natural_height or height,
    )

    png_bytes = svg_to_bytes(svg_string=document)

    image = Image.open(io.BytesIO(bytes(png_bytes))).convert('RGBA')

    # Downscale using high-quality Lanczos resampling if supersampled
    if image.size != (width, height):
        image = image.resize((width, height), Image.Resampling.LANCZOS)

    return image


def render_svg_string(svg_str: str) -> np.ndarray:
    """Render a complete SVG document at its declared size.

    Used to check exported documents against the live composite.

    Returns:
        RGBA numpy array of shape (height, width, 4)
    """
    png_bytes = svg_to_bytes(svg_string=svg_str)
    image = Image.open(io.BytesIO(bytes(png_bytes))).convert('RGBA')
    return np.array(image, dtype=np.uint8)


def format_number(value: float) -> str:
    """Compact decimal formatting for SVG attributes (at most 4 decimals)."""
    text = f'{float(value):.4f}'.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        return '0'
    return text
