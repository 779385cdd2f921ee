"""
Layer - one imported element placed on the canvas.

Provides:
- Identity: id, name, _version
- Source: tagged raster/vector union (see sources.py)
- Transform: x, y, width, height, rotation
- Appearance: visible
- Drawable: pre-decoded RGBA image, never serialized

Uses Pydantic v2 with camelCase aliases for JSON serialization.
"""

from enum import Enum
from typing import Annotated, Any, ClassVar, Optional, Union
import uuid

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from stagcompose.geometry import Point

from .sources import RasterSource, VectorSource


class LayerKind(str, Enum):
    """Layer source kinds."""
    RASTER = "raster"
    VECTOR = "vector"


LayerSource = Annotated[Union[RasterSource, VectorSource], Field(discriminator='kind')]


class LayerTransform(BaseModel):
    """
    Placement of a layer on the canvas.

    ``(x, y)`` is the top-left corner of the unrotated box. Rotation is in
    degrees, clockwise on screen, about the box center.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=False)

    x: float = Field(default=0.0)
    y: float = Field(default=0.0)
    width: float = Field(default=100.0, ge=0)
    height: float = Field(default=100.0, ge=0)
    rotation: float = Field(default=0.0)

    @property
    def center(self) -> Point:
        """Rotation pivot in world coordinates."""
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def has_rotation(self) -> bool:
        """Check if the box is rotated."""
        return self.rotation % 360 != 0


class Layer(BaseModel):
    """
    Layer model.

    Serializes to:
    {
        "_version": 1,
        "id": "uuid",
        "name": "photo.png",
        "source": {"kind": "raster", ...},
        "transform": {"x": 0, "y": 0, "width": 100, "height": 100, "rotation": 0},
        "visible": true
    }
    """

    model_config = ConfigDict(
        # Allow both snake_case and camelCase input
        populate_by_name=True,
        # Don't validate on assignment, gestures mutate transforms every move
        validate_assignment=False,
        # Allow extra fields for forward compatibility
        extra='ignore',
        # The drawable is a PIL image
        arbitrary_types_allowed=True,
    )

    VERSION: ClassVar[int] = 1

    version: int = Field(default=1, alias='_version')

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(default='Layer')

    source: LayerSource = Field(default_factory=RasterSource)
    transform: LayerTransform = Field(default_factory=LayerTransform)
    visible: bool = Field(default=True)

    # Decoded RGBA drawable supplied by the importer
    drawable: Optional[Image.Image] = Field(default=None, exclude=True, repr=False)

    @property
    def kind(self) -> LayerKind:
        """Source kind of this layer."""
        return LayerKind(self.source.kind)

    def is_raster(self) -> bool:
        """Check if this is a raster layer."""
        return self.source.kind == LayerKind.RASTER.value

    def is_vector(self) -> bool:
        """Check if this is a vector layer."""
        return self.source.kind == LayerKind.VECTOR.value

    def is_animated(self) -> bool:
        """Check if this layer carries live vector animation."""
        return isinstance(self.source, VectorSource) and self.source.animated

    def natural_size(self) -> tuple[float, float]:
        """Intrinsic size of the source, falling back to the current size."""
        width = self.source.natural_width or self.transform.width
        height = self.source.natural_height or self.transform.height
        return width, height

    def to_api_dict(self, *, include_content: bool = True) -> dict[str, Any]:
        """
        Convert to API response dictionary.

        Args:
            include_content: If False, excludes imageData/svgContent

        Returns:
            Dict with camelCase keys
        """
        self.version = self.VERSION
        data = self.model_dump(by_alias=True, mode='json')

        if not include_content:
            data['source'].pop('imageData', None)
            data['source'].pop('svgContent', None)

        return data

    @classmethod
    def from_api_dict(cls, data: dict[str, Any], drawable: Optional[Image.Image] = None) -> 'Layer':
        """
        Create a layer from an API dictionary.

        Args:
            data: Dictionary from to_api_dict()
            drawable: Optional pre-decoded drawable to attach

        Returns:
            Layer instance
        """
        layer = cls.model_validate(data)
        layer.drawable = drawable
        return layer
