"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Canvas defaults
    CANVAS_WIDTH: int = 800
    CANVAS_HEIGHT: int = 600

    # Layer geometry
    MIN_LAYER_SIZE: float = 20.0  # Floor for width/height after any resize
    HANDLE_SIZE: float = 10.0  # Side of the square corner handles
    ROTATION_HANDLE_OFFSET: float = 30.0  # Distance above the top edge
    ROTATION_HANDLE_RADIUS: float = 8.0

    # Wheel zoom step factors
    WHEEL_ZOOM_IN: float = 1.1
    WHEEL_ZOOM_OUT: float = 0.9

    # Editor decoration
    CHECKER_SIZE: int = 10
    CHECKER_LIGHT: str = "#ffffff"
    CHECKER_DARK: str = "#e0e0e0"
    SELECTION_COLOR: str = "#0000ff"
    SELECTION_WIDTH: int = 2
    HANDLE_FILL: str = "#ffffff"

    # Rendering
    ANIMATION_FPS: float = 60.0
    SVG_SUPERSAMPLE: int = 2
    MAX_RASTER_SIZE: int = 4096  # Longest side of a rasterized vector layer
    THUMBNAIL_SIZE: int = 48

    # Export
    EXPORT_BASENAME: str = "composition"
    JPEG_BACKGROUND: str = "#ffffff"

    # API settings
    MAX_UPLOAD_BYTES: int = 64 * 1024 * 1024

    model_config = {"env_prefix": "STAGCOMPOSE_"}


settings = Settings()
