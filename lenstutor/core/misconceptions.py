"""Rule-based misconception detection for a submitted ray diagram.

Every rule is checked independently and every failure is reported, so a
learner sees all of the problems with an attempt at once. ``evaluate``
covers the geometry and classification rules; ``evaluate_attempt`` adds
the checks that depend on the vocabulary and explanation panels.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from lenstutor.core.geometry import OBJECT_HEIGHT
from lenstutor.core.levels import LevelConfig
from lenstutor.core.optics import (
    CONCAVE,
    DegenerateConfiguration,
    SolveResult,
    is_virtual_configuration,
    thin_lens_image_distance,
)
from lenstutor.core.rays import CENTRAL, PARALLEL, Ray
from lenstutor.core.snap_targets import OPTICAL_CENTRE

logger = logging.getLogger(__name__)

INCOMPLETE_CONSTRUCTION = "incomplete-construction"
WRONG_FOCAL_SNAP = "wrong-focal-snap"
WRONG_CENTER_SNAP = "wrong-center-snap"
IMPOSSIBLE_REAL_IMAGE = "impossible-real-image"
EXPECTED_DIMINISHED_VIOLATED = "expected-diminished-violated"
MISSING_VIRTUAL_CONSTRUCTION = "missing-virtual-construction"
WRONG_CLASSIFICATION = "wrong-classification"
WRONG_ORIENTATION = "wrong-orientation"
CONCAVE_CANNOT_BE_REAL = "concave-cannot-be-real"
CONCAVE_CANNOT_MAGNIFY = "concave-cannot-magnify"
LENS_EQUATION_VIOLATED = "lens-equation-violated"
DEGENERATE_CONFIGURATION = "degenerate-configuration"
VOCABULARY_MISMATCH = "vocabulary-mismatch"
INSUFFICIENT_EXPLANATION = "insufficient-explanation"
MISSING_CLASSIFICATION = "missing-classification"

LENS_EQUATION_TOLERANCE = 0.12

VOCABULARY_TERMS = ("Principal axis", "Focal point", "Focal length")
CLASSIFICATION_OPTIONS = (
    "Real, inverted, diminished",
    "Real, inverted, magnified",
    "Virtual, upright, magnified",
    "Virtual, upright, diminished",
)

MIN_EXPLANATION_LENGTH = 80
VIRTUAL_IMAGE_PHRASES = ("diverge", "appear to meet", "backward extension", "cannot be projected")
REAL_IMAGE_PHRASES = ("principal axis", "focal point", "real image")


@dataclass(frozen=True)
class ViolatedRule:
    code: str
    message: str


def _find(rays: Sequence[Ray], kind: str) -> Optional[Ray]:
    return next((r for r in rays if r.kind == kind), None)


def evaluate(
    rays: Sequence[Ray],
    level: LevelConfig,
    classification: str,
    solution: SolveResult,
) -> list[ViolatedRule]:
    """Check the constructed rays and the declared classification against
    the solved image. Never raises; an empty list means nothing is wrong."""
    violations: list[ViolatedRule] = []

    def violate(code: str, message: str) -> None:
        violations.append(ViolatedRule(code, message))

    parallel_count = sum(1 for r in rays if r.kind == PARALLEL)
    central_count = sum(1 for r in rays if r.kind == CENTRAL)
    if parallel_count != 1 or central_count != 1:
        violate(INCOMPLETE_CONSTRUCTION, "You must construct both the parallel ray and central ray.")

    parallel = _find(rays, PARALLEL)
    central = _find(rays, CENTRAL)

    if parallel is not None and parallel.chosen_target.name != parallel.correct_target_name:
        violate(
            WRONG_FOCAL_SNAP,
            "Parallel ray misconception: you did not choose the correct focal point snap target.",
        )
    if central is not None and central.chosen_target.name != OPTICAL_CENTRE:
        violate(
            WRONG_CENTER_SNAP,
            "Central ray misconception: central ray should pass through optical centre undeviated.",
        )

    concave = level.lens == CONCAVE
    degenerate = isinstance(solution, DegenerateConfiguration)

    if degenerate:
        violate(
            DEGENERATE_CONFIGURATION,
            "The object sits on the focal point, so no image forms; this setup cannot be scored.",
        )
    else:
        if concave and solution.x > 0:
            violate(IMPOSSIBLE_REAL_IMAGE, "Concave lens cannot produce a real image on the opposite side.")
        if concave and abs(solution.y) >= OBJECT_HEIGHT:
            violate(EXPECTED_DIMINISHED_VIOLATED, "Concave lens image should be diminished.")

    if is_virtual_configuration(level.lens, level.distance_factor) and not (
        parallel is not None and parallel.back_extensions
    ):
        violate(MISSING_VIRTUAL_CONSTRUCTION, "Virtual image construction needs backward ray extensions.")

    classification = classification or ""
    if classification and classification != level.expected_classification:
        violate(WRONG_CLASSIFICATION, "Image classification is incorrect for this object position.")

    if not degenerate:
        expected_upright = "upright" in level.expected_classification
        declared_upright = "upright" in classification if classification else solution.is_upright
        if expected_upright != solution.is_upright or declared_upright != solution.is_upright:
            violate(WRONG_ORIENTATION, "Incorrect image orientation detected.")

    if concave and "Real" in classification:
        violate(CONCAVE_CANNOT_BE_REAL, "Concave lens producing real image is a misconception.")
    if concave and "magnified" in classification:
        violate(CONCAVE_CANNOT_MAGNIFY, "Concave lens image larger than object is incorrect.")

    if not degenerate and not _satisfies_lens_equation(solution):
        violate(LENS_EQUATION_VIOLATED, "Image position does not satisfy thin lens equation within tolerance.")

    logger.debug("Level %s evaluation: %s", level.id, [v.code for v in violations])
    return violations


def _satisfies_lens_equation(solution) -> bool:
    try:
        expected_v = thin_lens_image_distance(solution.signed_focal_length, solution.object_distance)
    except ZeroDivisionError:
        return False
    if not math.isfinite(expected_v) or not math.isfinite(solution.image_distance):
        return False
    return abs(solution.image_distance - expected_v) <= LENS_EQUATION_TOLERANCE * abs(expected_v)


def check_vocabulary(placements: Mapping[str, str]) -> bool:
    """Every term must sit in the drop zone named after it."""
    return all(placements.get(term) == term for term in VOCABULARY_TERMS)


def check_explanation(text: str, virtual_image: bool) -> bool:
    txt = (text or "").lower()
    if len(txt) < MIN_EXPLANATION_LENGTH:
        return False
    if virtual_image:
        return sum(1 for phrase in VIRTUAL_IMAGE_PHRASES if phrase in txt) >= 2
    return any(phrase in txt for phrase in REAL_IMAGE_PHRASES)


def evaluate_attempt(
    rays: Sequence[Ray],
    level: LevelConfig,
    classification: str,
    solution: SolveResult,
    placements: Mapping[str, str],
    explanation: str,
) -> list[ViolatedRule]:
    """All rules for a submitted attempt; the attempt passes iff this is empty."""
    violations = evaluate(rays, level, classification, solution)
    if not check_vocabulary(placements):
        violations.append(
            ViolatedRule(
                VOCABULARY_MISMATCH,
                "Vocabulary placement incorrect: principal axis/focal point/focal length labels mismatch.",
            )
        )
    if not check_explanation(explanation, is_virtual_configuration(level.lens, level.distance_factor)):
        violations.append(
            ViolatedRule(
                INSUFFICIENT_EXPLANATION,
                "Explanation is insufficient. Include required terminology and minimum detail.",
            )
        )
    if not classification:
        violations.append(ViolatedRule(MISSING_CLASSIFICATION, "Select an image classification."))
    return violations
