"""
Import collaborator: file bytes -> decoded drawable -> centered layer.

Decoding finishes before a layer exists, so the layer stack never sees a
half-decoded layer. Unreadable input raises :class:`ImportDecodeError` and
leaves the editor untouched.
"""

import asyncio
import gzip
import io
import logging
import math
import re
import xml.etree.ElementTree as ET
import zlib
from dataclasses import dataclass
from typing import Union

from PIL import Image, UnidentifiedImageError

from stagcompose.exceptions import ImportDecodeError
from stagcompose.layers import Layer, LayerTransform, RasterSource, VectorSource
from stagcompose.rendering.svg_layer import rasterize_svg

logger = logging.getLogger(__name__)

# Fallback size for SVGs without usable width/height/viewBox
DEFAULT_VECTOR_SIZE = 100.0

# Pixels per unit at 96 DPI
_UNIT_SCALE = {
    '': 1.0,
    'px': 1.0,
    'pt': 96.0 / 72.0,
    'pc': 16.0,
    'mm': 96.0 / 25.4,
    'cm': 96.0 / 2.54,
    'in': 96.0,
}
_LENGTH = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-z]*)\s*$')

# SMIL animation elements
_ANIMATION_TAGS = {'animate', 'animateTransform', 'animateMotion', 'animateColor', 'set'}
# CSS animation in <style> blocks or style attributes
_CSS_ANIMATION = re.compile(r'@keyframes|\banimation(?:-name)?\s*:', re.IGNORECASE)

_GZIP_MAGIC = b"\x1f\x8b"


@dataclass
class DecodedImage:
    """Result of decoding one imported file."""

    name: str
    source: Union[RasterSource, VectorSource]
    drawable: Image.Image

    @property
    def width(self) -> float:
        """Intrinsic width."""
        return self.source.natural_width

    @property
    def height(self) -> float:
        """Intrinsic height."""
        return self.source.natural_height

    @property
    def animated(self) -> bool:
        """Whether the file contains animation directives."""
        return isinstance(self.source, VectorSource) and self.source.animated


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else ''


def parse_length(value: str | None) -> float | None:
    """
    Parse an SVG length into pixels.

    Percentages and unknown units return None.
    """
    if not value:
        return None
    match = _LENGTH.match(value)
    if not match:
        return None
    number, unit = match.groups()
    scale = _UNIT_SCALE.get(unit)
    if scale is None:
        return None
    length = float(number) * scale
    if not math.isfinite(length) or length <= 0:
        return None
    return length


def svg_natural_size(root: ET.Element) -> tuple[float, float]:
    """
    Intrinsic size of an SVG root element.

    Uses width/height when both are absolute lengths, fills a missing one
    from the viewBox aspect ratio, and falls back to the viewBox size or
    DEFAULT_VECTOR_SIZE.
    """
    width = parse_length(root.get('width'))
    height = parse_length(root.get('height'))

    view_box = None
    raw_view_box = root.get('viewBox')
    if raw_view_box:
        parts = re.split(r'[\s,]+', raw_view_box.strip())
        try:
            numbers = [float(p) for p in parts]
        except ValueError:
            numbers = []
        if len(numbers) == 4 and numbers[2] > 0 and numbers[3] > 0:
            view_box = numbers

    if width and height:
        return width, height
    if view_box:
        vb_width, vb_height = view_box[2], view_box[3]
        if width:
            return width, width * vb_height / vb_width
        if height:
            return height * vb_width / vb_height, height
        return vb_width, vb_height
    return width or DEFAULT_VECTOR_SIZE, height or DEFAULT_VECTOR_SIZE


def has_animation(root: ET.Element) -> bool:
    """Check an SVG tree for SMIL elements or CSS animations."""
    for element in root.iter():
        name = _local_name(element.tag)
        if name in _ANIMATION_TAGS:
            return True
        if name == 'style' and element.text and _CSS_ANIMATION.search(element.text):
            return True
        style = element.get('style')
        if style and _CSS_ANIMATION.search(style):
            return True
    return False


def is_svg(data: bytes, filename: str = '') -> bool:
    """Sniff whether the payload is an SVG document."""
    if filename.lower().endswith(('.svg', '.svgz')):
        return True
    head = data[:1024].lstrip()
    return head.startswith(b'<') and b'<svg' in data[:4096].lower()


def decode_svg(data: bytes, name: str) -> DecodedImage:
    """Parse SVG markup and rasterize a preview at its natural size.

    Gzip-compressed documents (.svgz) are decompressed first; the layer keeps
    the plain markup.
    """
    if data[:2] == _GZIP_MAGIC:
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise ImportDecodeError(f"'{name}' is not a valid gzip file: {exc}") from exc

    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ImportDecodeError(f"'{name}' is not valid SVG: {exc}") from exc
    if _local_name(root.tag) != 'svg':
        raise ImportDecodeError(f"'{name}' has no <svg> root element")

    try:
        svg_content = data.decode('utf-8')
    except UnicodeDecodeError as exc:
        raise ImportDecodeError(f"'{name}' is not UTF-8 encoded") from exc

    natural_width, natural_height = svg_natural_size(root)
    animated = has_animation(root)

    try:
        preview = rasterize_svg(
            svg_content,
            math.ceil(natural_width),
            math.ceil(natural_height),
            natural_width,
            natural_height,
        )
    except Exception as exc:
        raise ImportDecodeError(f"'{name}' could not be rendered: {exc}") from exc

    source = VectorSource(
        svg_content=svg_content,
        natural_width=natural_width,
        natural_height=natural_height,
        animated=animated,
    )
    return DecodedImage(name=name, source=source, drawable=preview)


def decode_raster(data: bytes, name: str) -> DecodedImage:
    """Decode a bitmap with Pillow into an RGBA drawable."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError,
            SyntaxError, ValueError) as exc:
        raise ImportDecodeError(f"'{name}' is not a readable image: {exc}") from exc

    image_format = (image.format or 'png').lower()
    # Multi-picture JPEGs from cameras are still plain JPEG for viewers
    if image_format == 'mpo':
        image_format = 'jpeg'
    drawable = image.convert('RGBA')

    source = RasterSource(natural_width=drawable.width, natural_height=drawable.height)
    source.set_image_bytes(data, image_format)
    return DecodedImage(name=name, source=source, drawable=drawable)


def decode_file(data: bytes, filename: str) -> DecodedImage:
    """
    Decode an imported file.

    Args:
        data: Raw file content
        filename: Original filename, used as the layer name and as a type hint

    Returns:
        DecodedImage with source, intrinsic size and drawable

    Raises:
        ImportDecodeError: If the content is empty or cannot be decoded
    """
    name = filename or 'Layer'
    if not data:
        raise ImportDecodeError(f"'{name}' is empty")
    try:
        if is_svg(data, name):
            decoded = decode_svg(data, name)
        else:
            decoded = decode_raster(data, name)
    except ImportDecodeError as exc:
        logger.warning("Import failed: %s", exc)
        raise
    logger.info(
        "Decoded %s (%s, %gx%g%s)",
        name, decoded.source.kind, decoded.width, decoded.height,
        ', animated' if decoded.animated else '',
    )
    return decoded


def create_layer(decoded: DecodedImage, canvas_width: int, canvas_height: int) -> Layer:
    """Create a layer at intrinsic size, centered on the canvas."""
    width = decoded.width
    height = decoded.height
    return Layer(
        name=decoded.name,
        source=decoded.source,
        transform=LayerTransform(
            x=(canvas_width - width) / 2,
            y=(canvas_height - height) / 2,
            width=width,
            height=height,
        ),
        drawable=decoded.drawable,
    )


async def load_layer(data: bytes, filename: str, canvas_width: int, canvas_height: int) -> Layer:
    """Decode off the event loop, then build the centered layer."""
    decoded = await asyncio.to_thread(decode_file, data, filename)
    return create_layer(decoded, canvas_width, canvas_height)
