"""Tests for file decoding and layer placement on import."""

import asyncio
import gzip
import io

import pytest
from PIL import Image

from stagcompose.exceptions import ImportDecodeError
from stagcompose.importer import (
    DEFAULT_VECTOR_SIZE,
    create_layer,
    decode_file,
    is_svg,
    load_layer,
    parse_length,
)
from stagcompose.layers import RasterSource, VectorSource


def _svg(attributes: str, body: str = '<rect width="10" height="10"/>') -> bytes:
    return f'<svg xmlns="http://www.w3.org/2000/svg" {attributes}>{body}</svg>'.encode('utf-8')


class TestRasterDecoding:
    def test_png(self, png_bytes):
        decoded = decode_file(png_bytes(200, 150), 'photo.png')
        assert decoded.name == 'photo.png'
        assert isinstance(decoded.source, RasterSource)
        assert (decoded.width, decoded.height) == (200, 150)
        assert decoded.drawable.mode == 'RGBA'
        assert decoded.source.data_url().startswith('data:image/png;base64,')
        assert not decoded.animated

    def test_jpeg_keeps_original_bytes(self):
        buffer = io.BytesIO()
        Image.new('RGB', (32, 16), (10, 200, 30)).save(buffer, format='JPEG')
        data = buffer.getvalue()

        decoded = decode_file(data, 'shot.jpg')
        assert decoded.source.image_format == 'jpeg'
        assert decoded.source.get_image_bytes() == data
        assert decoded.drawable.mode == 'RGBA'

    @pytest.mark.parametrize("data", [
        b'definitely not an image',
        b'\x89PNG\r\n\x1a\n' + b'\x00' * 12,
    ])
    def test_unreadable_bytes(self, data):
        with pytest.raises(ImportDecodeError):
            decode_file(data, 'broken.png')

    def test_truncated_png(self, png_bytes):
        with pytest.raises(ImportDecodeError):
            decode_file(png_bytes(64, 64)[:60], 'cut.png')

    def test_empty_file(self):
        with pytest.raises(ImportDecodeError, match='empty'):
            decode_file(b'', 'empty.png')


class TestSvgDecoding:
    def test_svg_source_is_verbatim(self, simple_svg):
        decoded = decode_file(simple_svg.encode('utf-8'), 'banner.svg')
        assert isinstance(decoded.source, VectorSource)
        assert decoded.source.svg_content == simple_svg
        assert (decoded.width, decoded.height) == (100, 50)
        assert decoded.drawable.size == (100, 50)
        assert not decoded.animated

    def test_animation_is_detected(self, animated_svg):
        decoded = decode_file(animated_svg.encode('utf-8'), 'pulse.svg')
        assert decoded.animated

    def test_css_keyframes_count_as_animation(self):
        data = _svg(
            'width="40" height="40"',
            '<style>@keyframes spin { to { transform: rotate(360deg); } }</style>'
            '<rect width="40" height="40" style="animation: spin 1s infinite"/>',
        )
        assert decode_file(data, 'spin.svg').animated

    def test_svg_sniffed_without_extension(self, simple_svg):
        decoded = decode_file(simple_svg.encode('utf-8'), 'upload')
        assert isinstance(decoded.source, VectorSource)

    @pytest.mark.parametrize("attributes,expected", [
        ('width="120" height="80"', (120, 80)),
        ('width="120px" height="80px" viewBox="0 0 10 10"', (120, 80)),
        ('viewBox="0 0 300 150"', (300, 150)),
        ('width="200" viewBox="0 0 100 50"', (200, 100)),
        ('height="30" viewBox="0,0,60,20"', (90, 30)),
        ('width="1in" height="72pt"', (96, 96)),
        ('width="100%" height="100%"', (DEFAULT_VECTOR_SIZE, DEFAULT_VECTOR_SIZE)),
        ('', (DEFAULT_VECTOR_SIZE, DEFAULT_VECTOR_SIZE)),
    ])
    def test_natural_size(self, attributes, expected):
        decoded = decode_file(_svg(attributes), 'shape.svg')
        assert (decoded.width, decoded.height) == pytest.approx(expected)

    def test_malformed_svg(self):
        with pytest.raises(ImportDecodeError, match='not valid SVG'):
            decode_file(b'<svg xmlns="http://www.w3.org/2000/svg"><rect></svg>', 'bad.svg')

    def test_xml_without_svg_root(self):
        with pytest.raises(ImportDecodeError, match='no <svg> root'):
            decode_file(b'<note><to>nobody</to></note>', 'note.svg')

    def test_svgz_is_decompressed(self, simple_svg):
        decoded = decode_file(gzip.compress(simple_svg.encode('utf-8')), 'logo.svgz')
        assert isinstance(decoded.source, VectorSource)
        assert decoded.source.svg_content == simple_svg
        assert (decoded.width, decoded.height) == (100, 50)

    def test_corrupt_svgz(self):
        with pytest.raises(ImportDecodeError, match='not a valid gzip file'):
            decode_file(b'\x1f\x8b' + b'\x00' * 16, 'broken.svgz')

    def test_huge_svg_keeps_natural_size_with_bounded_preview(self, monkeypatch):
        monkeypatch.setattr('stagcompose.config.settings.MAX_RASTER_SIZE', 128)
        decoded = decode_file(_svg('width="50000" height="25000"'), 'poster.svg')
        assert (decoded.width, decoded.height) == (50000, 25000)
        assert decoded.drawable.size == (128, 64)

    def test_render_failure_is_a_decode_error(self, monkeypatch, simple_svg):
        def fail(*args, **kwargs):
            raise RuntimeError('renderer crashed')

        monkeypatch.setattr('stagcompose.importer.rasterize_svg', fail)
        with pytest.raises(ImportDecodeError, match='could not be rendered'):
            decode_file(simple_svg.encode('utf-8'), 'logo.svg')


class TestHelpers:
    @pytest.mark.parametrize("value,expected", [
        ('10', 10),
        ('10px', 10),
        ('2.5cm', 2.5 * 96 / 2.54),
        ('25.4mm', 96),
        ('1pc', 16),
        (' 12 ', 12),
    ])
    def test_parse_length(self, value, expected):
        assert parse_length(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, '', '50%', '10em', 'abc', '0', '-5', '1e400'])
    def test_parse_length_rejects(self, value):
        assert parse_length(value) is None

    def test_is_svg(self, png_bytes):
        assert is_svg(b'', 'logo.SVG')
        assert is_svg(b'  <?xml version="1.0"?>\n<svg/>')
        assert not is_svg(png_bytes(4, 4), 'logo.png')


class TestLayerPlacement:
    def test_centered_at_intrinsic_size(self, png_bytes):
        layer = create_layer(decode_file(png_bytes(200, 150), 'photo.png'), 800, 600)
        transform = layer.transform
        assert (transform.x, transform.y) == (300, 225)
        assert (transform.width, transform.height) == (200, 150)
        assert transform.rotation == 0
        assert layer.visible
        assert layer.name == 'photo.png'
        assert layer.drawable is not None

    def test_larger_than_canvas_is_not_scaled(self, png_bytes):
        layer = create_layer(decode_file(png_bytes(1000, 800), 'big.png'), 800, 600)
        assert (layer.transform.x, layer.transform.y) == (-100, -100)
        assert (layer.transform.width, layer.transform.height) == (1000, 800)

    def test_load_layer_off_the_event_loop(self, simple_svg):
        layer = asyncio.run(load_layer(simple_svg.encode('utf-8'), 'banner.svg', 300, 200))
        assert layer.is_vector()
        assert (layer.transform.x, layer.transform.y) == (100, 75)

    def test_load_layer_propagates_decode_errors(self):
        with pytest.raises(ImportDecodeError):
            asyncio.run(load_layer(b'garbage', 'x.png', 300, 200))
