"""
Tests the face detection collaborator
"""

import numpy as np
import pytest

from pixelchain import Image, Rectangle
from pixelchain.faces import FaceDetector, HaarFaceDetector, with_group_box


def test_group_box():
    """
    The group box encloses all faces and comes first
    """
    faces = [Rectangle(10, 10, 20, 20), Rectangle(50, 5, 10, 30)]
    boxes = with_group_box(faces)
    assert boxes[0] == Rectangle(10, 5, 50, 30)
    assert boxes[1:] == faces
    assert with_group_box([]) == []


def test_working_scale():
    """
    Sensitivity is clamped to 1..9 and controls the working resolution
    """
    assert HaarFaceDetector.working_scale(3) == pytest.approx(5 / 15)
    assert HaarFaceDetector.working_scale(100) == HaarFaceDetector.working_scale(9)
    assert HaarFaceDetector.working_scale(-5) == pytest.approx(3 / 15)


def test_haar_detector_on_blank_image():
    """
    A blank image contains no faces
    """
    pytest.importorskip("cv2")
    detector = HaarFaceDetector()
    assert isinstance(detector, FaceDetector)
    image = Image(np.full((120, 160, 4), (200, 200, 200, 0), dtype=np.uint8))
    assert detector.detect(image, sensitivity=5) == []
