"""Candidate points a learner can pick as the second point of a ray."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from lenstutor.core.geometry import OBJECT_HEIGHT, Point
from lenstutor.core.optics import validate_positive

TRUE = "true"
DISTRACTOR = "distractor"
CENTER = "center"

OPTICAL_CENTRE = "Optical centre"
SNAP_RADIUS = 28.0


@dataclass(frozen=True)
class SnapTarget:
    name: str
    x: float
    y: float
    kind: str

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


def generate_snap_targets(focal_length: float) -> list[SnapTarget]:
    """Return the 11 targets for ``focal_length``: both focal points, eight
    distractors and the optical centre, in a fixed order."""
    f = validate_positive("focal length", focal_length)
    h = 0.3 * OBJECT_HEIGHT
    return [
        SnapTarget("+F", f, 0.0, TRUE),
        SnapTarget("-F", -f, 0.0, TRUE),
        SnapTarget("+0.7F", 0.7 * f, 0.0, DISTRACTOR),
        SnapTarget("-0.7F", -0.7 * f, 0.0, DISTRACTOR),
        SnapTarget("+1.3F", 1.3 * f, 0.0, DISTRACTOR),
        SnapTarget("-1.3F", -1.3 * f, 0.0, DISTRACTOR),
        SnapTarget("+F,+0.3h", f, h, DISTRACTOR),
        SnapTarget("+F,-0.3h", f, -h, DISTRACTOR),
        SnapTarget("-F,+0.3h", -f, h, DISTRACTOR),
        SnapTarget("-F,-0.3h", -f, -h, DISTRACTOR),
        SnapTarget(OPTICAL_CENTRE, 0.0, 0.0, CENTER),
    ]


def find_target(targets: Sequence[SnapTarget], name: str) -> SnapTarget:
    for target in targets:
        if target.name == name:
            return target
    raise KeyError(name)


def closest_snap(
    targets: Sequence[SnapTarget],
    point: Point,
    radius: float = SNAP_RADIUS,
) -> Optional[SnapTarget]:
    """Nearest target strictly within ``radius`` of ``point``, or None."""
    best: Optional[SnapTarget] = None
    best_distance = float("inf")
    for target in targets:
        d = point.distance_to(target.point)
        if d < best_distance:
            best, best_distance = target, d
    return best if best_distance < radius else None
