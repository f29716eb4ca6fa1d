"""Thin-lens image solver.

Sign convention: the object sits left of the lens at distance ``u > 0``; a
real image on the transmission side has ``v > 0``. Convex lenses have a
positive signed focal length, concave lenses a negative one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

from lenstutor.core.errors import InvalidParameterError
from lenstutor.core.geometry import OBJECT_HEIGHT, object_distance

CONVEX = "convex"
CONCAVE = "concave"
LENS_KINDS = (CONVEX, CONCAVE)


@dataclass(frozen=True)
class ImageSolution:
    """Image position and size derived from the current lens setup.

    Rebuild it after any change of focal length or level; it carries no
    link back to the parameters it came from.
    """

    x: float
    y: float
    magnification: float
    image_distance: float
    object_distance: float
    signed_focal_length: float

    @property
    def is_virtual(self) -> bool:
        return self.image_distance < 0

    @property
    def is_upright(self) -> bool:
        return self.y > 0


@dataclass(frozen=True)
class DegenerateConfiguration:
    """The object sits on the focal point: refracted rays never meet."""

    object_distance: float
    signed_focal_length: float
    reason: str = "image at infinity"


SolveResult = Union[ImageSolution, DegenerateConfiguration]


def validate_lens_kind(lens: str) -> str:
    if lens not in LENS_KINDS:
        raise InvalidParameterError(f"unknown lens kind {lens!r}, expected one of {LENS_KINDS}")
    return lens


def validate_positive(name: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number) or number <= 0:
        raise InvalidParameterError(f"{name} must be positive, got {value!r}")
    return number


def signed_focal_length(lens: str, focal_length: float) -> float:
    validate_lens_kind(lens)
    f = validate_positive("focal length", focal_length)
    return -f if lens == CONCAVE else f


def is_virtual_configuration(lens: str, distance_factor: float) -> bool:
    """True when the two construction rays only meet when extended backwards."""
    validate_lens_kind(lens)
    return lens == CONCAVE or validate_positive("distance factor", distance_factor) < 1.0


def thin_lens_image_distance(fs: float, u: float) -> float:
    """Solve 1/v = 1/fs - 1/u for v. Callers must rule out u == fs."""
    return 1.0 / (1.0 / fs - 1.0 / u)


def solve(lens: str, focal_length: float, distance_factor: float) -> SolveResult:
    """Locate the image for an object at ``distance_factor`` focal lengths."""
    fs = signed_focal_length(lens, focal_length)
    k = validate_positive("distance factor", distance_factor)
    u = object_distance(k, abs(fs))
    if math.isclose(u, fs, rel_tol=1e-12):
        return DegenerateConfiguration(object_distance=u, signed_focal_length=fs)
    v = thin_lens_image_distance(fs, u)
    m = v / u
    return ImageSolution(
        x=v,
        y=-m * OBJECT_HEIGHT,
        magnification=m,
        image_distance=v,
        object_distance=u,
        signed_focal_length=fs,
    )
