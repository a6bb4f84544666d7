# PixelChain Filters Module
"""
Dataclass-based filter system for image processing.

All filters are JSON-serializable and can be composed into pipelines which
apply them in priority order.
"""

from .base import (
    Filter,
    FilterContext,
    FilterResult,
    FILTER_REGISTRY,
    register_filter,
    collaborator,
)

from .pipeline import (
    FilterPipeline,
    Transformation,
    PipelineStep,
    PipelineResult,
)

from .tonal import (
    SepiaSlow,
    SepiaFast,
    MonochromeMask,
    ReplaceColors,
    Greyscale,
    Negate,
    Brightness,
    Contrast,
    Colorize,
    Opacity,
    DominantColor,
)

from .convolution import (
    UnsharpMask,
    Blur,
    Smooth,
    SelectiveBlur,
    Scatter,
    Pixelate,
    EdgeDetect,
    Emboss,
    MeanRemoval,
    SharpenUniversal,
    Sobel,
    Lqip,
    Dot,
    AddNoise,
    HostFilter,
)

from .compositing import (
    ApplyMask,
    MaskBorder,
    BoxBorder,
    RoundedCorners,
    Mask,
    Reflection,
    Watermark,
    DrawRectangle,
    FaceRectangles,
)

from .text_overlay import (
    TextOverlay,
    TextOverlayParams,
    sanitize_text,
)

__all__ = [
    # Base
    'Filter',
    'FilterContext',
    'FilterResult',
    'FILTER_REGISTRY',
    'register_filter',
    'collaborator',
    # Pipeline
    'FilterPipeline',
    'Transformation',
    'PipelineStep',
    'PipelineResult',
    # Tonal
    'SepiaSlow',
    'SepiaFast',
    'MonochromeMask',
    'ReplaceColors',
    'Greyscale',
    'Negate',
    'Brightness',
    'Contrast',
    'Colorize',
    'Opacity',
    'DominantColor',
    # Convolution
    'UnsharpMask',
    'Blur',
    'Smooth',
    'SelectiveBlur',
    'Scatter',
    'Pixelate',
    'EdgeDetect',
    'Emboss',
    'MeanRemoval',
    'SharpenUniversal',
    'Sobel',
    'Lqip',
    'Dot',
    'AddNoise',
    'HostFilter',
    # Compositing
    'ApplyMask',
    'MaskBorder',
    'BoxBorder',
    'RoundedCorners',
    'Mask',
    'Reflection',
    'Watermark',
    'DrawRectangle',
    'FaceRectangles',
    # Text
    'TextOverlay',
    'TextOverlayParams',
    'sanitize_text',
]
