"""Tests for raster export and the export entry point."""

import io

import numpy as np
import pytest
from PIL import Image

from stagcompose.exceptions import UnsupportedExportFormatError
from stagcompose.export import export_composite, export_raster, supported_formats
from stagcompose.rendering import Compositor


def _decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class TestExportRaster:
    def test_png_has_no_checkerboard_or_decoration(self, stack, make_layer):
        stack.add_layer(make_layer(x=20, y=20, width=40, height=40))
        image = _decode(export_raster(stack, 100, 80, 'png'))

        assert image.format == 'PNG'
        assert image.size == (100, 80)
        array = np.array(image.convert('RGBA'))
        assert tuple(array[40, 40]) == (255, 0, 0, 255)
        # Outside the layer stays transparent, including where handles would be
        assert array[5, 5, 3] == 0
        assert array[19, 19, 3] == 0

    def test_jpeg_is_flattened_on_white(self, stack, make_layer):
        stack.add_layer(make_layer(x=0, y=0, width=10, height=10))
        image = _decode(export_raster(stack, 40, 40, 'jpeg'))

        assert image.format == 'JPEG'
        assert image.mode == 'RGB'
        r, g, b = image.getpixel((35, 35))
        assert min(r, g, b) > 240

    def test_webp_is_lossless(self, stack, make_layer):
        stack.add_layer(make_layer(x=0, y=0, width=20, height=20))
        image = _decode(export_raster(stack, 30, 30, 'webp'))
        assert image.format == 'WEBP'
        assert image.convert('RGBA').getpixel((10, 10)) == (255, 0, 0, 255)

    def test_empty_composition(self, stack):
        image = _decode(export_raster(stack, 16, 16, 'png'))
        assert np.array(image.convert('RGBA'))[..., 3].max() == 0

    def test_hidden_layers_are_excluded(self, stack, make_layer):
        layer = make_layer(x=0, y=0, width=16, height=16)
        stack.add_layer(layer)
        stack.set_visibility(layer.id, False)
        image = _decode(export_raster(stack, 16, 16, 'png'))
        assert np.array(image.convert('RGBA'))[..., 3].max() == 0


class TestExportComposite:
    @pytest.mark.parametrize("format,media_type,filename", [
        ('png', 'image/png', 'composition.png'),
        ('PNG', 'image/png', 'composition.png'),
        ('webp', 'image/webp', 'composition.webp'),
        ('jpeg', 'image/jpeg', 'composition.jpg'),
        ('jpg', 'image/jpeg', 'composition.jpg'),
        ('svg', 'image/svg+xml', 'composition.svg'),
        ('vector', 'image/svg+xml', 'composition.svg'),
    ])
    def test_formats(self, stack, make_layer, format, media_type, filename):
        stack.add_layer(make_layer())
        artifact = export_composite(stack, 120, 120, format)
        assert artifact.media_type == media_type
        assert artifact.filename == filename
        assert artifact.size == len(artifact.data) > 0

    @pytest.mark.parametrize("format", ['gif', 'pdf', '', None])
    def test_unknown_format(self, stack, format):
        with pytest.raises(UnsupportedExportFormatError):
            export_composite(stack, 10, 10, format)

    def test_reuses_compositor(self, stack, make_layer):
        compositor = Compositor(50, 50)
        stack.add_layer(make_layer(x=0, y=0, width=10, height=10))
        artifact = export_composite(stack, 50, 50, 'png', compositor=compositor)
        assert _decode(artifact.data).size == (50, 50)

    def test_supported_formats(self):
        formats = supported_formats()
        assert {'png', 'jpeg', 'webp', 'svg'} <= set(formats)
