# PixelChain - Face Detection
"""
Face detection collaborator.

A :class:`FaceDetector` returns bounding boxes. By convention the first box
encloses all detected faces and the remaining boxes are the single faces,
which is what :class:`~pixelchain.filters.compositing.FaceRectangles` expects.

:class:`HaarFaceDetector` uses OpenCV's Haar cascades and needs the optional
``opencv-python-headless`` dependency (``pip install pixelchain[faces]``).
"""

from __future__ import annotations

import logging
import time
from typing import ClassVar, Protocol, runtime_checkable

import numpy as np

from .errors import HostOperationError
from .geometry import Rectangle
from .image import Image

logger = logging.getLogger(__name__)


@runtime_checkable
class FaceDetector(Protocol):
    """Anything which finds faces in an image."""

    def detect(self, image: Image, sensitivity: int = 3) -> list[Rectangle]:
        ...


def with_group_box(faces: list[Rectangle]) -> list[Rectangle]:
    """
    Prepends the rectangle enclosing all ``faces``.

    :return: An empty list if there are no faces, otherwise the group box
        followed by the faces
    """
    if not faces:
        return []
    min_x = min(face.x for face in faces)
    min_y = min(face.y for face in faces)
    max_x = max(face.x2 for face in faces)
    max_y = max(face.y2 for face in faces)
    return [Rectangle(min_x, min_y, max_x - min_x, max_y - min_y), *faces]


class HaarFaceDetector:
    """Detects frontal faces using OpenCV Haar cascades.

    The sensitivity (1 to 9, default 3) controls the working resolution: the
    image is scaled to (5 + sensitivity - 3) / 15 of its size before
    detection, so higher values find smaller faces at a higher cost.

    :param scale_factor: Scale factor of the detection pyramid
    :param min_neighbors: Minimum neighbors for a detection
    :param cascade_name: OpenCV cascade file name
    """

    _cascades: ClassVar[dict] = {}

    def __init__(self, scale_factor: float = 1.1, min_neighbors: int = 5,
                 cascade_name: str = "haarcascade_frontalface_alt.xml"):
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.cascade_name = cascade_name

    def _get_cascade(self):
        """Load (and cache) the Haar cascade classifier."""
        import cv2

        cascade = HaarFaceDetector._cascades.get(self.cascade_name)
        if cascade is None:
            cascade = cv2.CascadeClassifier(cv2.data.haarcascades + self.cascade_name)
            if cascade.empty():
                raise HostOperationError(f"Haar cascade {self.cascade_name} could not be loaded",
                                         {"cascade": self.cascade_name})
            HaarFaceDetector._cascades[self.cascade_name] = cascade
        return cascade

    @staticmethod
    def working_scale(sensitivity: int) -> float:
        """Scale factor the image is resized by for a given sensitivity."""
        sensitivity = min(max(1, int(sensitivity)), 9)
        return (5 + sensitivity - 3) / 15

    def detect(self, image: Image, sensitivity: int = 3) -> list[Rectangle]:
        """
        Finds faces.

        :param image: The image to search
        :param sensitivity: 1 (coarse, fast) to 9 (fine, slow)
        :return: The group box followed by one box per face, in image
            coordinates, or an empty list
        """
        import cv2

        start = time.perf_counter()
        scale = self.working_scale(sensitivity)
        rgb = np.ascontiguousarray(image.pixels[..., :3])
        gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
        width = max(1, int(round(image.width * scale)))
        height = max(1, int(round(image.height * scale)))
        if (width, height) != (image.width, image.height):
            gray = cv2.resize(gray, (width, height), interpolation=cv2.INTER_AREA)
        found = self._get_cascade().detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
        )
        faces = [
            Rectangle(int(round(x / scale)), int(round(y / scale)),
                      int(round(w / scale)), int(round(h / scale)))
            for (x, y, w, h) in found
        ]
        logger.debug("face detection found %d faces in %.3fs", len(faces),
                     time.perf_counter() - start)
        return with_group_box(faces)


__all__ = ["FaceDetector", "HaarFaceDetector", "with_group_box"]
