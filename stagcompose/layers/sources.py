"""
Layer sources - what a layer draws.

A layer's source is a tagged union on ``kind``:

    RasterSource (kind: 'raster')  - encoded bitmap kept as a data URL
    VectorSource (kind: 'vector')  - original SVG markup, verbatim

Only vector sources carry animation state, so a raster layer can never hold a
dangling reference to an animated document.
"""

import base64
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RasterSource(BaseModel):
    """
    Raster image source.

    Serialization format:
    {
        "kind": "raster",
        "imageData": "data:image/png;base64,...",
        "imageFormat": "png",
        "naturalWidth": 200,
        "naturalHeight": 150
    }
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    kind: Literal["raster"] = "raster"

    # Original encoded bytes as a data URL, reused verbatim by SVG export
    image_data: str = Field(default='data:image/png;base64,', alias='imageData')
    image_format: str = Field(default='png', alias='imageFormat')

    # Intrinsic pixel size of the decoded image
    natural_width: float = Field(default=0, ge=0, alias='naturalWidth')
    natural_height: float = Field(default=0, ge=0, alias='naturalHeight')

    def get_image_bytes(self) -> bytes | None:
        """
        Get raw image bytes from imageData.

        Returns:
            Image bytes or None if no imageData
        """
        if not self.image_data:
            return None

        # Parse data URL: data:image/png;base64,<data>
        if ',' in self.image_data:
            _, data = self.image_data.split(',', 1)
            return base64.b64decode(data)
        return None

    def set_image_bytes(self, data: bytes, format: str = 'png') -> None:
        """
        Set imageData from raw bytes.

        Args:
            data: Raw encoded image bytes
            format: Image format (png, jpeg, webp, gif, ...)
        """
        b64 = base64.b64encode(data).decode('ascii')
        self.image_data = f'data:image/{format};base64,{b64}'
        self.image_format = format

    def data_url(self) -> str:
        """Data URL referenced by exported ``<image>`` elements."""
        return self.image_data

    def has_content(self) -> bool:
        """Check if the source holds image data."""
        return bool(self.image_data) and self.image_data != 'data:image/png;base64,'


class VectorSource(BaseModel):
    """
    Vector (SVG) source.

    ``svg_content`` is the imported document exactly as read, so animation
    directives survive export byte-for-byte.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    kind: Literal["vector"] = "vector"

    svg_content: str = Field(default='', alias='svgContent')

    # Natural dimensions from the root width/height or viewBox
    natural_width: float = Field(default=0, ge=0, alias='naturalWidth')
    natural_height: float = Field(default=0, ge=0, alias='naturalHeight')

    # Document contains time-driven animation (SMIL or CSS keyframes)
    animated: bool = Field(default=False)

    def data_url(self) -> str:
        """Base64 data URL of the markup for ``<image>`` references."""
        b64 = base64.b64encode(self.svg_content.encode('utf-8')).decode('ascii')
        return f'data:image/svg+xml;base64,{b64}'

    def has_content(self) -> bool:
        """Check if the source holds SVG markup."""
        return bool(self.svg_content)
