"""Tests for lenstutor.core.snap_targets – candidate ray targets."""

from __future__ import annotations

import pytest

from lenstutor.core.errors import InvalidParameterError
from lenstutor.core.geometry import OBJECT_HEIGHT, Point
from lenstutor.core.snap_targets import (
    CENTER,
    DISTRACTOR,
    OPTICAL_CENTRE,
    TRUE,
    SnapTarget,
    closest_snap,
    find_target,
    generate_snap_targets,
)


# ---------------------------------------------------------------------------
# generate_snap_targets
# ---------------------------------------------------------------------------

class TestGenerate:
    def test_eleven_targets(self):
        assert len(generate_snap_targets(150)) == 11

    def test_kinds(self):
        targets = generate_snap_targets(150)
        kinds = [t.kind for t in targets]
        assert kinds.count(TRUE) == 2
        assert kinds.count(CENTER) == 1
        assert kinds.count(DISTRACTOR) == 8

    def test_names_are_unique(self):
        names = [t.name for t in generate_snap_targets(150)]
        assert len(set(names)) == len(names)

    def test_true_focal_points(self):
        targets = generate_snap_targets(150)
        assert find_target(targets, "+F") == SnapTarget("+F", 150, 0, TRUE)
        assert find_target(targets, "-F") == SnapTarget("-F", -150, 0, TRUE)

    def test_optical_centre(self):
        centre = find_target(generate_snap_targets(150), OPTICAL_CENTRE)
        assert (centre.x, centre.y, centre.kind) == (0, 0, CENTER)

    def test_off_axis_distractors(self):
        target = find_target(generate_snap_targets(100), "-F,+0.3h")
        assert target.x == pytest.approx(-100)
        assert target.y == pytest.approx(0.3 * OBJECT_HEIGHT)

    def test_on_axis_distractors_scale_with_f(self):
        small = {t.name: t for t in generate_snap_targets(100)}
        large = {t.name: t for t in generate_snap_targets(200)}
        for name in ("+0.7F", "-0.7F", "+1.3F", "-1.3F", "+F", "-F"):
            assert large[name].x == pytest.approx(2 * small[name].x)

    def test_idempotent(self):
        assert generate_snap_targets(137.5) == generate_snap_targets(137.5)

    def test_new_focal_length_replaces_set(self):
        assert generate_snap_targets(100) != generate_snap_targets(120)

    @pytest.mark.parametrize("f", [0, -5])
    def test_rejects_non_positive_focal_length(self, f: float):
        with pytest.raises(InvalidParameterError):
            generate_snap_targets(f)


# ---------------------------------------------------------------------------
# closest_snap / find_target
# ---------------------------------------------------------------------------

class TestClosestSnap:
    def test_exact_hit(self):
        targets = generate_snap_targets(150)
        assert closest_snap(targets, Point(150, 0)).name == "+F"

    def test_near_hit(self):
        targets = generate_snap_targets(150)
        assert closest_snap(targets, Point(5, -7)).name == OPTICAL_CENTRE

    def test_picks_nearest_of_neighbours(self):
        targets = generate_snap_targets(150)
        # +F at 150 and +F,+0.3h at (150, 36)
        assert closest_snap(targets, Point(150, 25)).name == "+F,+0.3h"

    def test_miss_returns_none(self):
        targets = generate_snap_targets(150)
        assert closest_snap(targets, Point(-300, 100)) is None

    def test_radius_is_exclusive(self):
        targets = [SnapTarget("a", 0, 0, TRUE)]
        assert closest_snap(targets, Point(28, 0)) is None
        assert closest_snap(targets, Point(27.9, 0)) is not None

    def test_empty_targets(self):
        assert closest_snap([], Point(0, 0)) is None

    def test_find_target_missing(self):
        with pytest.raises(KeyError):
            find_target(generate_snap_targets(150), "nowhere")
