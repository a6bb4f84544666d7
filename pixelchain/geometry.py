# PixelChain - Geometry
"""
Integer geometry primitives used for placing, pasting and drawing.

* :class:`Point` - a signed (x, y) location, may lie outside an image
* :class:`Box` - a non-negative (width, height) extent
* :class:`Rectangle` - an axis-aligned region, e.g. a detected face
* :class:`HAnchor` / :class:`VAnchor` - the 3x3 anchor grid used to place a
  box relative to an image
* :func:`polygon_points` / :func:`star_points` - outlines of regular shapes
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


@dataclass(frozen=True)
class Point:
    """A signed integer location."""

    x: int = 0
    y: int = 0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> tuple[int, int]:
        return self.x, self.y

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def coerce(cls, value: PointTypes) -> Point:
        if isinstance(value, Point):
            return value
        if isinstance(value, dict):
            return cls(int(value.get("x", 0)), int(value.get("y", 0)))
        x, y = value
        return cls(int(x), int(y))


@dataclass(frozen=True)
class Box:
    """A width/height extent. Negative extents are rejected."""

    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Box dimensions may not be negative: {self.width}x{self.height}")

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def to_tuple(self) -> tuple[int, int]:
        return self.width, self.height

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def coerce(cls, value: BoxTypes) -> Box:
        if isinstance(value, Box):
            return value
        if isinstance(value, dict):
            return cls(int(value["width"]), int(value["height"]))
        width, height = value
        return cls(int(width), int(height))


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle (x, y, width, height)."""

    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        """Right edge x coordinate (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom edge y coordinate (exclusive)."""
        return self.y + self.height

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @property
    def box(self) -> Box:
        return Box(max(self.width, 0), max(self.height, 0))

    @property
    def center(self) -> tuple[float, float]:
        """Center point of the rectangle."""
        return self.x + self.width / 2, self.y + self.height / 2

    def with_min_size(self, min_width: int, min_height: int) -> Rectangle:
        """
        Grows the rectangle to the right and downwards so it is at least
        ``min_width`` x ``min_height`` large.
        """
        return Rectangle(self.x, self.y, max(self.width, min_width), max(self.height, min_height))

    def to_int_tuple(self) -> tuple[int, int, int, int]:
        """Return as (x, y, width, height) integer tuple."""
        return self.x, self.y, self.width, self.height

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def coerce(cls, value: RectangleTypes) -> Rectangle:
        if isinstance(value, Rectangle):
            return value
        if isinstance(value, dict):
            return cls(int(value["x"]), int(value["y"]),
                       int(value["width"]), int(value["height"]))
        x, y, width, height = value
        return cls(int(x), int(y), int(width), int(height))


PointTypes = Union[Point, tuple[int, int], dict[str, Any]]
BoxTypes = Union[Box, tuple[int, int], dict[str, Any]]
RectangleTypes = Union[Rectangle, tuple[int, int, int, int], dict[str, Any]]


class HAnchor(Enum):
    """Horizontal placement of a box within a container."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @classmethod
    def from_name(cls, name: str, default: HAnchor | None = None) -> HAnchor:
        name = (name or "").strip().lower()
        for anchor in cls:
            if anchor.value == name:
                return anchor
        if default is not None:
            return default
        raise ValueError(f"Unknown horizontal anchor: {name!r}")

    def offset(self, container: int, extent: int) -> int:
        """Coordinate of a box of size ``extent`` placed in ``container``."""
        if self is HAnchor.LEFT:
            return 0
        if self is HAnchor.RIGHT:
            return container - extent
        return int(round((container - extent) / 2))


class VAnchor(Enum):
    """Vertical placement of a box within a container."""

    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"

    @classmethod
    def from_name(cls, name: str, default: VAnchor | None = None) -> VAnchor:
        name = (name or "").strip().lower()
        for anchor in cls:
            if anchor.value == name:
                return anchor
        if default is not None:
            return default
        raise ValueError(f"Unknown vertical anchor: {name!r}")

    def offset(self, container: int, extent: int) -> int:
        """Coordinate of a box of size ``extent`` placed in ``container``."""
        if self is VAnchor.TOP:
            return 0
        if self is VAnchor.BOTTOM:
            return container - extent
        return int(round((container - extent) / 2))


def place(container: Box, box: Box, h_anchor: HAnchor, v_anchor: VAnchor,
          offset: Point | None = None) -> Point:
    """
    Computes the signed top-left coordinate of ``box`` anchored inside
    ``container``, shifted by ``offset``. The result may lie outside the
    container.
    """
    position = Point(h_anchor.offset(container.width, box.width),
                     v_anchor.offset(container.height, box.height))
    return position + offset if offset is not None else position


def polygon_points(center: Point, radius: int, vertices: int, rotation: float = 0) -> list[Point]:
    """
    Computes the corners of a regular polygon.

    The first vertex points straight up, the following ones run anti-clockwise.
    ``rotation`` turns the polygon clockwise by the given degrees.

    :param center: Center of the enclosing circle
    :param radius: Radius of the enclosing circle
    :param vertices: Number of corners, at least 3
    :param rotation: Rotation in degrees
    """
    if vertices < 3:
        raise ValueError(f"A polygon requires at least 3 vertices, got {vertices}")
    step = 360 / vertices
    return [_on_circle(center, radius, 270 - step * index + rotation) for index in range(vertices)]


def star_points(center: Point, radius: int, spikes: int, split: float = 0.5,
                rotation: float = 0) -> list[Point]:
    """
    Computes the outline of a star, alternating spike tips and inner corners.

    :param center: Center of the star
    :param radius: Distance of the spike tips from the center
    :param spikes: Number of spikes, at least 3
    :param split: Distance of the inner corners as fraction of ``radius``
    :param rotation: Rotation in degrees
    """
    if spikes < 3:
        raise ValueError(f"A star requires at least 3 spikes, got {spikes}")
    step = 360 / spikes
    outer = [_on_circle(center, radius, 270 - step * index + rotation) for index in range(spikes)]
    inner = [_on_circle(center, split * radius, 90 - step * index + rotation) for index in range(spikes)]
    # the inner corner opposite to a tip lies half a turn further along the list
    shift = spikes // 2 + 1
    inner = inner[shift:] + inner[:shift]
    return [point for pair in zip(outer, inner) for point in pair]


def _on_circle(center: Point, radius: float, degrees: float) -> Point:
    angle = math.radians(degrees)
    return Point(int(round(center.x + radius * math.cos(angle))),
                 int(round(center.y + radius * math.sin(angle))))


__all__ = [
    "Point",
    "Box",
    "Rectangle",
    "PointTypes",
    "BoxTypes",
    "RectangleTypes",
    "HAnchor",
    "VAnchor",
    "place",
    "polygon_points",
    "star_points",
]
