"""
Pytest fixtures for Stagcompose tests
"""

import io

import pytest
from PIL import Image

from stagcompose.layers import Layer, LayerStack, LayerTransform, RasterSource, VectorSource

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)

SIMPLE_SVG = '''<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50" viewBox="0 0 100 50">
  <rect x="0" y="0" width="100" height="50" fill="#FF0000"/>
</svg>'''

ANIMATED_SVG = '''<?xml version="1.0" encoding="UTF-8"?>
<!-- pulsing dot -->
<svg xmlns="http://www.w3.org/2000/svg" width="80" height="80" viewBox="0 0 80 80">
  <circle cx="40" cy="40" r="30" fill="#00FF00">
    <animate attributeName="r" values="30;10;30" dur="2s" repeatCount="indefinite"/>
  </circle>
</svg>'''


def encode_png(width: int, height: int, color=RED) -> bytes:
    """Encode a solid-color PNG."""
    buffer = io.BytesIO()
    Image.new('RGBA', (width, height), color).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Factory for solid-color PNG payloads."""
    return encode_png


@pytest.fixture
def make_layer():
    """Factory for solid-color raster layers with a ready drawable."""

    def _make(x=0.0, y=0.0, width=100.0, height=100.0, rotation=0.0,
              color=RED, name='layer', visible=True) -> Layer:
        size = (int(width), int(height))
        source = RasterSource(natural_width=size[0], natural_height=size[1])
        source.set_image_bytes(encode_png(size[0], size[1], color), 'png')
        return Layer(
            name=name,
            source=source,
            transform=LayerTransform(x=x, y=y, width=width, height=height, rotation=rotation),
            visible=visible,
            drawable=Image.new('RGBA', size, color),
        )

    return _make


@pytest.fixture
def make_vector_layer():
    """Factory for vector layers (drawable is rasterized by the compositor)."""

    def _make(svg=SIMPLE_SVG, x=0.0, y=0.0, width=100.0, height=50.0,
              natural=(100.0, 50.0), animated=False, name='vector.svg') -> Layer:
        return Layer(
            name=name,
            source=VectorSource(
                svg_content=svg,
                natural_width=natural[0],
                natural_height=natural[1],
                animated=animated,
            ),
            transform=LayerTransform(x=x, y=y, width=width, height=height),
        )

    return _make


@pytest.fixture
def stack() -> LayerStack:
    """An empty layer stack."""
    return LayerStack()


@pytest.fixture
def test_client():
    """TestClient for FastAPI unit testing without a server."""
    from starlette.testclient import TestClient
    from stagcompose.app import create_api_app
    from stagcompose.sessions import session_manager

    session_manager.clear()
    app = create_api_app()
    with TestClient(app) as client:
        yield client
    session_manager.clear()


@pytest.fixture
def api_client(test_client):
    """Alias for test_client."""
    return test_client


@pytest.fixture
def simple_svg() -> str:
    """Static 100x50 red rectangle."""
    return SIMPLE_SVG


@pytest.fixture
def animated_svg() -> str:
    """80x80 circle with a SMIL animation."""
    return ANIMATED_SVG
