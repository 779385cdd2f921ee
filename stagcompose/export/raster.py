"""Raster export: the editor composite without editor-only decoration."""

import io

from PIL import Image, ImageColor

from stagcompose.config import settings
from stagcompose.layers import LayerStack
from stagcompose.rendering.compositor import Compositor

# format name -> (Pillow format, media type, file extension)
RASTER_FORMATS: dict[str, tuple[str, str, str]] = {
    'png': ('PNG', 'image/png', 'png'),
    'webp': ('WEBP', 'image/webp', 'webp'),
    'jpeg': ('JPEG', 'image/jpeg', 'jpg'),
    'jpg': ('JPEG', 'image/jpeg', 'jpg'),
}


def flatten(image: Image.Image, background: str) -> Image.Image:
    """Composite an RGBA image onto an opaque background color."""
    base = Image.new('RGBA', image.size, ImageColor.getcolor(background, 'RGBA'))
    base.alpha_composite(image)
    return base.convert('RGB')


def export_raster(
    stack: LayerStack,
    width: int,
    height: int,
    format: str = 'png',
    compositor: Compositor | None = None,
) -> bytes:
    """Render the composite and encode it.

    Args:
        stack: Layers to export
        width: Canvas width
        height: Canvas height
        format: One of RASTER_FORMATS
        compositor: Compositor to reuse (its vector cache), created if omitted

    Returns:
        Encoded image bytes
    """
    pil_format, _, _ = RASTER_FORMATS[format]
    if compositor is None:
        compositor = Compositor(width, height)

    image = compositor.render(stack, include_decoration=False, include_background=False)

    # JPEG has no alpha channel
    if pil_format == 'JPEG':
        image = flatten(image, settings.JPEG_BACKGROUND)

    buffer = io.BytesIO()
    if pil_format == 'WEBP':
        image.save(buffer, format=pil_format, lossless=True)
    else:
        image.save(buffer, format=pil_format)
    return buffer.getvalue()
