# PixelChain - Errors
"""
Exception hierarchy shared by the raster primitives, the host operations and
the filters.

Filters raise these from :meth:`Filter.apply`; :meth:`Filter.run` turns them
into a skipped :class:`~pixelchain.filters.base.FilterResult` so a pipeline
never aborts because one effect could not be applied.
"""

from __future__ import annotations

from typing import Any


class PixelChainError(Exception):
    """Base class of all errors raised by pixelchain."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.message = message
        "Human readable reason"
        self.payload = payload
        "Optional structured data describing the failure"


class RasterError(PixelChainError):
    """A raster buffer was used in a way its geometry does not allow."""


class OutOfBounds(RasterError, IndexError):
    """A pixel coordinate lies outside the image."""


class DimensionMismatch(RasterError, ValueError):
    """Two rasters that must have the same size do not."""


class FilterError(PixelChainError):
    """A filter could not produce its effect."""


class UnusableInput(FilterError):
    """A filter parameter is missing, empty or invalid for the given image."""


class HostOperationError(FilterError):
    """A host raster, codec or font operation rejected its parameters."""


__all__ = [
    "PixelChainError",
    "RasterError",
    "OutOfBounds",
    "DimensionMismatch",
    "FilterError",
    "UnusableInput",
    "HostOperationError",
]
