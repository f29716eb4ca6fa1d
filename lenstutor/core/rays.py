"""Construction of the two canonical rays through a thin lens.

A ray always carries the physically correct path for the current lens.
The target the learner picked is stored next to the name of the target
they should have picked, so scoring never has to re-derive geometry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from lenstutor.core.errors import InvalidParameterError
from lenstutor.core.geometry import (
    RAY_FAR_X,
    RAY_NEAR_X,
    Point,
    Segment,
    object_tip,
    optical_center,
    point_on_line,
)
from lenstutor.core.optics import (
    CONVEX,
    ImageSolution,
    is_virtual_configuration,
    solve,
    validate_lens_kind,
    validate_positive,
)
from lenstutor.core.snap_targets import OPTICAL_CENTRE, SnapTarget, generate_snap_targets, find_target

PARALLEL = "parallel"
CENTRAL = "central"
RAY_KINDS = (PARALLEL, CENTRAL)


@dataclass(frozen=True)
class Ray:
    kind: str
    chosen_target: SnapTarget
    correct_target_name: str
    segments: Tuple[Segment, ...]
    back_extensions: Tuple[Segment, ...] = ()

    @property
    def is_correct(self) -> bool:
        return self.chosen_target.name == self.correct_target_name


def construct_ray(
    ray_kind: str,
    lens: str,
    focal_length: float,
    chosen_target: SnapTarget,
    distance_factor: float,
) -> Ray:
    """Build the correct path of ``ray_kind`` for an object ``distance_factor``
    focal lengths in front of the lens."""
    validate_lens_kind(lens)
    f = validate_positive("focal length", focal_length)
    k = validate_positive("distance factor", distance_factor)
    if ray_kind == PARALLEL:
        return _parallel_ray(lens, f, k, chosen_target)
    if ray_kind == CENTRAL:
        return _central_ray(lens, f, k, chosen_target)
    raise InvalidParameterError(f"unknown ray kind {ray_kind!r}, expected one of {RAY_KINDS}")


def _near_x(lens: str, f: float, k: float) -> float:
    """Left end for backward extensions: far enough to reach a virtual image."""
    solution = solve(lens, f, k)
    if isinstance(solution, ImageSolution) and solution.is_virtual:
        return min(RAY_NEAR_X, solution.x)
    return RAY_NEAR_X


def _parallel_ray(lens: str, f: float, k: float, chosen_target: SnapTarget) -> Ray:
    tip = object_tip(k, f)
    at_lens = Point(0.0, tip.y)
    incident = Segment(tip, at_lens)

    if lens == CONVEX:
        # Converges through +F on the transmission side.
        through = Point(f, 0.0)
        refracted = Segment(at_lens, point_on_line(at_lens, through, RAY_FAR_X))
        back: Tuple[Segment, ...] = ()
        if k < 1.0:
            # Object inside F: the refracted ray only meets the central ray behind the lens.
            back = (Segment(at_lens, point_on_line(at_lens, through, _near_x(lens, f, k))),)
        return Ray(PARALLEL, chosen_target, "+F", (incident, refracted), back)

    # Diverges as though it came from -F on the incidence side.
    apparent_source = Point(-f, 0.0)
    refracted = Segment(at_lens, point_on_line(apparent_source, at_lens, RAY_FAR_X))
    back = (Segment(at_lens, point_on_line(apparent_source, at_lens, _near_x(lens, f, k))),)
    return Ray(PARALLEL, chosen_target, "-F", (incident, refracted), back)


def _central_ray(lens: str, f: float, k: float, chosen_target: SnapTarget) -> Ray:
    tip = object_tip(k, f)
    center = optical_center()
    forward = Segment(tip, point_on_line(tip, center, RAY_FAR_X))
    back: Tuple[Segment, ...] = ()
    if is_virtual_configuration(lens, k):
        back = (Segment(tip, point_on_line(tip, center, _near_x(lens, f, k))),)
    return Ray(CENTRAL, chosen_target, OPTICAL_CENTRE, (forward,), back)


def ideal_rays(lens: str, focal_length: float, distance_factor: float) -> Tuple[Ray, Ray]:
    """Both construction rays drawn with the correct targets, for the solution overlay."""
    targets = generate_snap_targets(focal_length)
    parallel_target = "+F" if validate_lens_kind(lens) == CONVEX else "-F"
    return (
        construct_ray(PARALLEL, lens, focal_length, find_target(targets, parallel_target), distance_factor),
        construct_ray(CENTRAL, lens, focal_length, find_target(targets, OPTICAL_CENTRE), distance_factor),
    )
