# PixelChain - Codec
"""
Codec collaborator: turns compressed image files into :class:`Image` rasters
and back. The filters never touch container formats, callers decode before
and encode after running a pipeline.
"""

from __future__ import annotations

import io
import logging
from typing import Protocol, runtime_checkable

import filetype
import PIL.Image

from .color import Color, ColorTypes, Colors
from .errors import HostOperationError
from .image import Image

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ["png", "jpeg", "webp", "gif", "bmp"]
"Formats which can be decoded and encoded"

_OPAQUE_ONLY_FORMATS = {"jpeg", "bmp"}


@runtime_checkable
class Codec(Protocol):
    """Decodes and encodes rasters."""

    def decode(self, data: bytes) -> Image:
        ...

    def encode(self, image: Image, format: str = "png", quality: int = 90) -> bytes:
        ...


def normalize_format(name: str) -> str:
    """Maps file extensions and MIME types to a format name, e.g. ``.JPG`` to ``jpeg``."""
    name = name.strip().lower().lstrip(".")
    if name.startswith("image/"):
        name = name[len("image/"):]
    if name == "jpg":
        name = "jpeg"
    return name


class PillowCodec:
    """
    :class:`Codec` implementation based on Pillow.

    :param background: Color transparent images are flattened onto when
        they are stored in a format without alpha channel
    """

    def __init__(self, background: ColorTypes = Colors.WHITE):
        self.background: Color = Color.coerce(background)

    @staticmethod
    def detect_format(data: bytes) -> str | None:
        """
        Detects the container format from the magic bytes.

        :return: The format name, e.g. "png", or None if unknown
        """
        kind = filetype.guess(data)
        if kind is None or not kind.mime.startswith("image/"):
            return None
        return normalize_format(kind.mime)

    def decode(self, data: bytes) -> Image:
        """
        Decodes compressed image data.

        :raises HostOperationError: If the data is empty, of an unsupported
            type or corrupt
        """
        if not data:
            raise HostOperationError("Can not decode empty image data")
        detected = self.detect_format(data)
        if detected is not None and detected not in SUPPORTED_FORMATS:
            raise HostOperationError(f"Unsupported image format: {detected}", {"format": detected})
        try:
            with PIL.Image.open(io.BytesIO(data)) as pil_image:
                pil_image.load()
                return Image.from_pil(pil_image)
        except (OSError, ValueError, PIL.Image.DecompressionBombError) as e:
            raise HostOperationError(f"Image data could not be decoded: {e}",
                                     {"format": detected, "size": len(data)}) from e

    def encode(self, image: Image, format: str = "png", quality: int = 90) -> bytes:
        """
        Encodes an image.

        :param image: The image
        :param format: Target format, e.g. "png", "jpg" or "webp"
        :param quality: Quality between 0 (worst) and 100 (best), ignored by
            lossless formats
        :return: The compressed data
        :raises HostOperationError: If format or quality are not supported
        """
        format = normalize_format(format)
        if format not in SUPPORTED_FORMATS:
            raise HostOperationError(f"Unsupported image format: {format}", {"format": format})
        if not 0 <= quality <= 100:
            raise HostOperationError(f"Quality must lie within 0 and 100, got {quality}",
                                     {"quality": quality})
        pil_image = image.to_pil()
        if format in _OPAQUE_ONLY_FORMATS:
            flattened = PIL.Image.new("RGB", pil_image.size, self.background.to_rgb())
            flattened.paste(pil_image, (0, 0), pil_image)
            pil_image = flattened
        parameters = {}
        if format in {"jpeg", "webp"}:
            parameters["quality"] = quality
        output_stream = io.BytesIO()
        try:
            pil_image.save(output_stream, format=format.upper(), **parameters)
        except (OSError, ValueError, KeyError) as e:
            raise HostOperationError(f"Image could not be encoded as {format}: {e}",
                                     {"format": format}) from e
        data = output_stream.getvalue()
        if not data:
            raise HostOperationError(f"Encoding as {format} produced no data", {"format": format})
        logger.debug("encoded %s as %s, %d bytes", image, format, len(data))
        return data


__all__ = ["Codec", "PillowCodec", "SUPPORTED_FORMATS", "normalize_format"]
