"""pixelchain configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Defaults for the filters and collaborators, overridable via PIXELCHAIN_* variables."""

    # Text
    default_font_path: Path | None = None  # None = Pillow's bundled font
    default_font_size: int = 12
    default_line_height: float = 1.25

    # Face rectangles
    face_outline_color: str = "#01bf42"  # first face
    face_secondary_color: str = "#eded03"  # all other faces
    face_rectangle_min_size: int = 20
    face_rectangle_thickness: int = 2

    # Raster
    max_canvas_pixels: int = 16384 * 16384

    model_config = {"env_prefix": "PIXELCHAIN_"}
