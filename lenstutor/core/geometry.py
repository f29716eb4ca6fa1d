"""World-space geometry for the ray diagram.

World coordinates put the optical axis on x and the transverse height on y,
with the lens plane at x = 0. Display coordinates are canvas pixels with
the origin at the top-left corner and y growing downwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from lenstutor.core.errors import InvalidParameterError

OBJECT_HEIGHT = 120.0
LENS_HALF_HEIGHT = 170.0
RAY_FAR_X = 430.0
RAY_NEAR_X = -430.0

DEFAULT_CANVAS_WIDTH = 900
DEFAULT_CANVAS_HEIGHT = 460

MIN_FOCAL_LENGTH = 40.0
# Room left between the outermost object tip and the canvas edge.
SCENE_MARGIN = 20.0
# Outermost snap targets sit at 1.3 F either side of the lens.
OUTER_SNAP_FACTOR = 1.3


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Segment:
    a: Point
    b: Point


@dataclass(frozen=True)
class Viewport:
    """Affine, y-flipped mapping between world units and canvas pixels."""

    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT
    scale: float = 1.0

    def __post_init__(self) -> None:
        for name in ("width", "height", "scale"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise InvalidParameterError(f"viewport {name} must be positive, got {value!r}")

    def world_to_display(self, point: Point) -> Point:
        return Point(
            self.width / 2 + point.x * self.scale,
            self.height / 2 - point.y * self.scale,
        )

    def display_to_world(self, point: Point) -> Point:
        return Point(
            (point.x - self.width / 2) / self.scale,
            (self.height / 2 - point.y) / self.scale,
        )


def object_distance(distance_factor: float, focal_length: float) -> float:
    """Magnitude of the object distance u = k * f."""
    return distance_factor * focal_length


def object_tip(distance_factor: float, focal_length: float) -> Point:
    """Tip of the object arrow, left of the lens at height OBJECT_HEIGHT."""
    return Point(-object_distance(distance_factor, focal_length), OBJECT_HEIGHT)


def optical_center() -> Point:
    return Point(0.0, 0.0)


def point_on_line(p: Point, q: Point, x: float) -> Point:
    """Point at abscissa ``x`` on the line through ``p`` and ``q``.

    ``p`` and ``q`` must not share an abscissa.
    """
    slope = (q.y - p.y) / (q.x - p.x)
    return Point(x, p.y + slope * (x - p.x))


def max_focal_length(distance_factors: Iterable[float], viewport: Optional[Viewport] = None) -> float:
    """Largest focal length that keeps every object tip and snap target on the canvas."""
    viewport = viewport or Viewport()
    factors = list(distance_factors)
    if not factors:
        raise InvalidParameterError("at least one distance factor is required")
    widest = max(max(factors), OUTER_SNAP_FACTOR)
    half_width = viewport.width / 2 / viewport.scale
    return (half_width - SCENE_MARGIN) / widest
