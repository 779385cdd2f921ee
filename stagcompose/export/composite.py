"""Export entry point shared by the editor and the HTTP API."""

import logging
from dataclasses import dataclass

from stagcompose.config import settings
from stagcompose.exceptions import UnsupportedExportFormatError
from stagcompose.layers import LayerStack
from stagcompose.rendering.compositor import Compositor

from .raster import RASTER_FORMATS, export_raster
from .svg import build_svg_document

logger = logging.getLogger(__name__)

VECTOR_FORMATS = ('svg', 'vector')


@dataclass
class ExportArtifact:
    """A downloadable export result."""

    data: bytes
    media_type: str
    filename: str

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.data)


def supported_formats() -> list[str]:
    """All accepted format names."""
    return [*RASTER_FORMATS, *VECTOR_FORMATS]


def export_composite(
    stack: LayerStack,
    width: int,
    height: int,
    format: str = 'png',
    compositor: Compositor | None = None,
) -> ExportArtifact:
    """Export the visible layers as a raster image or an SVG document.

    Args:
        stack: Layers to export
        width: Canvas width
        height: Canvas height
        format: Raster format name ('png', 'webp', 'jpeg') or 'svg'/'vector'
        compositor: Compositor to reuse for raster formats

    Returns:
        ExportArtifact with the encoded payload

    Raises:
        UnsupportedExportFormatError: If the format is unknown
    """
    key = (format or '').lower()

    if key in VECTOR_FORMATS:
        document = build_svg_document(stack, width, height)
        artifact = ExportArtifact(
            data=document.encode('utf-8'),
            media_type='image/svg+xml',
            filename=f'{settings.EXPORT_BASENAME}.svg',
        )
    elif key in RASTER_FORMATS:
        _, media_type, extension = RASTER_FORMATS[key]
        artifact = ExportArtifact(
            data=export_raster(stack, width, height, key, compositor=compositor),
            media_type=media_type,
            filename=f'{settings.EXPORT_BASENAME}.{extension}',
        )
    else:
        raise UnsupportedExportFormatError(
            f"Unsupported export format '{format}'. Use one of: {', '.join(supported_formats())}"
        )

    logger.info("Exported %d layers as %s (%d bytes)", len(stack), artifact.filename, artifact.size)
    return artifact
