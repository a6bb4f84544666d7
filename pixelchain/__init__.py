"""
PixelChain - Composable raster filters applied in priority ordered pipelines
"""

from .color import Color, Colors, ColorTypes, parse_color
from .geometry import Point, Box, Rectangle, HAnchor, VAnchor
from .image import Image
from .errors import (
    PixelChainError,
    RasterError,
    OutOfBounds,
    DimensionMismatch,
    FilterError,
    UnusableInput,
    HostOperationError,
)
from .diagnostics import Diagnostic, DiagnosticsSink, LoggingDiagnostics, CollectingDiagnostics
from .config import Settings
from .codec import PillowCodec
from .fonts import FontService, PillowFontService, TextStyle
from .faces import FaceDetector, HaarFaceDetector
from .filters import Filter, FilterContext, FilterResult, FilterPipeline, Transformation

__version__ = "0.1.0"

__all__ = [
    # Raster
    "Image",
    "Color",
    "Colors",
    "ColorTypes",
    "parse_color",
    "Point",
    "Box",
    "Rectangle",
    "HAnchor",
    "VAnchor",
    # Errors
    "PixelChainError",
    "RasterError",
    "OutOfBounds",
    "DimensionMismatch",
    "FilterError",
    "UnusableInput",
    "HostOperationError",
    # Diagnostics and configuration
    "Diagnostic",
    "DiagnosticsSink",
    "LoggingDiagnostics",
    "CollectingDiagnostics",
    "Settings",
    # Collaborators
    "PillowCodec",
    "FontService",
    "PillowFontService",
    "TextStyle",
    "FaceDetector",
    "HaarFaceDetector",
    # Filters
    "Filter",
    "FilterContext",
    "FilterResult",
    "FilterPipeline",
    "Transformation",
]
