"""Tests for lenstutor.core.session – pure session transitions."""

from __future__ import annotations

from dataclasses import replace

import pytest

from lenstutor.core.geometry import Point, max_focal_length, object_tip
from lenstutor.core.levels import LevelConfig, LevelRepository
from lenstutor.core.misconceptions import MISSING_CLASSIFICATION, VOCABULARY_TERMS
from lenstutor.core.rays import CENTRAL, PARALLEL
from lenstutor.core.session import (
    DEFAULT_FOCAL_LENGTH,
    ERROR,
    FREE,
    GUIDED,
    INFO,
    SUCCESS,
    UNLOCKED,
    SessionState,
    apply_classification,
    apply_click,
    apply_explanation,
    apply_focal_length_change,
    apply_level_change,
    apply_mode_change,
    apply_reset,
    apply_submit,
    apply_vocabulary_drop,
    current_solution,
    new_session,
    reset_attempt,
    scenario_summary,
)

REAL_EXPLANATION = (
    "The ray parallel to the principal axis refracts through the focal point, "
    "and the central ray meets it to form a real image."
)


def _tip(state: SessionState, level: LevelConfig) -> Point:
    return object_tip(level.distance_factor, state.focal_length)


def _draw(state: SessionState, level: LevelConfig, target: Point) -> SessionState:
    state = apply_click(state, level, _tip(state, level)).state
    return apply_click(state, level, target).state


def _solved_attempt(level: LevelConfig, state: SessionState) -> SessionState:
    f = state.focal_length
    state = _draw(state, level, Point(f, 0))
    state = _draw(state, level, Point(0, 0))
    for term in VOCABULARY_TERMS:
        state = apply_vocabulary_drop(state, term, term).state
    state = apply_classification(state, level.expected_classification).state
    return apply_explanation(state, REAL_EXPLANATION).state


# ---------------------------------------------------------------------------
# new_session
# ---------------------------------------------------------------------------

class TestNewSession:
    def test_starts_at_unlocked_level(self):
        s = new_session(3, 4)
        assert s.unlocked_level == 3
        assert s.current_level == 3
        assert s.focal_length == DEFAULT_FOCAL_LENGTH

    def test_clamps_to_catalog(self):
        assert new_session(9, 4).unlocked_level == 4
        assert new_session(0, 4).unlocked_level == 1

    def test_initial_attempt_is_empty(self):
        s = new_session(1, 4)
        assert s.rays == ()
        assert s.click_stage == 0
        assert s.pending_origin is None
        assert s.mode == GUIDED


# ---------------------------------------------------------------------------
# apply_click
# ---------------------------------------------------------------------------

class TestApplyClick:
    def test_first_click_on_tip(self, level1: LevelConfig):
        s = new_session(1, 4)
        t = apply_click(s, level1, Point(-415, 118))
        assert t.state.click_stage == 1
        assert t.state.pending_origin == _tip(s, level1)
        assert t.events[0].kind == INFO

    def test_first_click_elsewhere(self, level1: LevelConfig):
        s = new_session(1, 4)
        t = apply_click(s, level1, Point(0, 0))
        assert t.state is s
        assert t.events[0].kind == ERROR
        assert "object tip" in t.events[0].message

    def test_second_click_off_target(self, level1: LevelConfig):
        s = apply_click(new_session(1, 4), level1, Point(-420, 120)).state
        t = apply_click(s, level1, Point(300, 100))
        assert t.state is s
        assert t.state.click_stage == 1
        assert "snap point" in t.events[0].message

    def test_ray_kinds_follow_order(self, level1: LevelConfig):
        s = _draw(new_session(1, 4), level1, Point(-150, 0))
        s = _draw(s, level1, Point(150, 0))
        assert [r.kind for r in s.rays] == [PARALLEL, CENTRAL]
        assert s.rays[0].chosen_target.name == "-F"
        assert s.rays[1].chosen_target.name == "+F"

    def test_stage_alternates(self, level1: LevelConfig):
        s = new_session(1, 4)
        stages = []
        for point in (_tip(s, level1), Point(150, 0), _tip(s, level1), Point(0, 0)):
            s = apply_click(s, level1, point).state
            stages.append((s.click_stage, len(s.rays)))
        assert stages == [(1, 0), (0, 1), (1, 1), (0, 2)]

    def test_third_ray_refused(self, level1: LevelConfig):
        s = _draw(_draw(new_session(1, 4), level1, Point(150, 0)), level1, Point(0, 0))
        t = apply_click(s, level1, _tip(s, level1))
        assert t.state is s
        assert t.events[0].kind == ERROR
        assert len(t.state.rays) == 2

    def test_guided_step_advances(self, level1: LevelConfig):
        s = new_session(1, 4)
        s = _draw(s, level1, Point(150, 0))
        assert s.guided_step_index == 1
        s = _draw(s, level1, Point(0, 0))
        assert s.guided_step_index == 2

    def test_guided_step_capped_at_last_step(self, level1: LevelConfig):
        one_step = replace(level1, guided_steps=("Draw both rays.",))
        s = _draw(new_session(1, 4), one_step, Point(150, 0))
        assert s.guided_step_index == 0

    def test_free_mode_keeps_step(self, level1: LevelConfig):
        s = apply_mode_change(new_session(1, 4), FREE).state
        s = _draw(s, level1, Point(150, 0))
        assert s.guided_step_index == 0

    def test_previous_state_untouched(self, level1: LevelConfig):
        s = new_session(1, 4)
        _draw(s, level1, Point(150, 0))
        assert s.rays == ()


# ---------------------------------------------------------------------------
# apply_submit
# ---------------------------------------------------------------------------

class TestApplySubmit:
    def test_pass_unlocks_next_level(self, level1: LevelConfig):
        s = _solved_attempt(level1, new_session(1, 4))
        t = apply_submit(s, level1, 4)
        kinds = [e.kind for e in t.events]
        assert kinds == [SUCCESS, UNLOCKED]
        assert t.state.unlocked_level == 2
        assert t.state.show_ideal_solution

    def test_pass_on_replayed_level_does_not_unlock(self, level1: LevelConfig):
        s = apply_level_change(new_session(3, 4), 1, 4).state
        t = apply_submit(_solved_attempt(level1, s), level1, 4)
        assert [e.kind for e in t.events] == [SUCCESS]
        assert t.state.unlocked_level == 3

    def test_pass_on_last_level_does_not_exceed_catalog(self, catalog: LevelRepository):
        last = catalog.get(len(catalog))
        s = new_session(len(catalog), len(catalog))
        s = _draw(s, last, Point(-s.focal_length, 0))
        s = _draw(s, last, Point(0, 0))
        for term in VOCABULARY_TERMS:
            s = apply_vocabulary_drop(s, term, term).state
        s = apply_classification(s, last.expected_classification).state
        s = apply_explanation(
            s,
            "Rays diverge from the concave lens; a backward extension shows where they appear to meet, "
            "so the image cannot be projected.",
        ).state
        t = apply_submit(s, last, len(catalog))
        assert t.events[0].kind == SUCCESS
        assert t.state.unlocked_level == len(catalog)

    def test_failure_reports_all_violations(self, level1: LevelConfig):
        t = apply_submit(new_session(1, 4), level1, 4)
        (event,) = t.events
        assert event.kind == ERROR
        assert len(event.violations) == 4
        assert MISSING_CLASSIFICATION in {v.code for v in event.violations}
        assert event.message.count("\n") == 3
        assert t.state.unlocked_level == 1
        assert t.state.show_ideal_solution

    def test_uses_current_focal_length(self, level1: LevelConfig):
        s = apply_focal_length_change(new_session(1, 4), 100).state
        assert current_solution(s, level1).object_distance == pytest.approx(280)
        t = apply_submit(_solved_attempt(level1, s), level1, 4)
        assert t.events[0].kind == SUCCESS


# ---------------------------------------------------------------------------
# level / focal-length changes
# ---------------------------------------------------------------------------

class TestLevelChange:
    def test_locked_level_refused(self):
        s = new_session(1, 4)
        t = apply_level_change(s, 2, 4)
        assert t.state is s
        assert "locked" in t.events[0].message

    def test_unlock_all(self):
        s = new_session(1, 4, unlock_all=True)
        assert apply_level_change(s, 4, 4).state.current_level == 4

    def test_unknown_level(self):
        s = new_session(1, 4)
        assert apply_level_change(s, 7, 4).events[0].kind == ERROR

    def test_change_discards_attempt(self, level1: LevelConfig):
        s = _draw(new_session(2, 4), level1, Point(150, 0))
        s = apply_click(s, level1, _tip(s, level1)).state
        t = apply_level_change(s, 1, 4)
        assert t.state.current_level == 1
        assert t.state.rays == ()
        assert t.state.click_stage == 0
        assert t.state.pending_origin is None


class TestFocalLengthChange:
    def test_discards_rays_mid_attempt(self, level1: LevelConfig):
        s = _draw(new_session(1, 4), level1, Point(150, 0))
        s = apply_click(s, level1, _tip(s, level1)).state
        assert s.click_stage == 1
        t = apply_focal_length_change(s, 120)
        assert t.state.focal_length == 120
        assert t.state.rays == ()
        assert t.state.click_stage == 0
        assert t.state.pending_origin is None

    def test_snap_targets_follow_focal_length(self):
        s = apply_focal_length_change(new_session(1, 4), 120).state
        assert s.snap_targets()[0].x == 120

    @pytest.mark.parametrize("value", [0, -3, "abc", float("nan")])
    def test_invalid_value_rejected(self, value):
        s = new_session(1, 4)
        t = apply_focal_length_change(s, value)
        assert t.state is s
        assert t.events[0].kind == ERROR

    def test_unlocked_level_survives(self):
        s = new_session(3, 4)
        assert apply_focal_length_change(s, 90).state.unlocked_level == 3

    def test_value_beyond_canvas_limit_rejected(self):
        s = new_session(1, 4)
        t = apply_focal_length_change(s, 300, max_focal_length=150)
        assert t.state is s
        assert t.events[0].kind == ERROR
        assert "at most 150.0" in t.events[0].message

    def test_limit_itself_accepted(self):
        t = apply_focal_length_change(new_session(1, 4), 150, max_focal_length=150)
        assert t.state.focal_length == 150
        assert t.events == ()

    def test_level1_playable_at_canvas_limit(self, catalog: LevelRepository, level1: LevelConfig):
        limit = max_focal_length(level.distance_factor for level in catalog.all())
        s = apply_focal_length_change(new_session(1, 4), limit, limit).state
        t = apply_submit(_solved_attempt(level1, s), level1, 4)
        assert t.events[0].kind == SUCCESS


# ---------------------------------------------------------------------------
# remaining transitions
# ---------------------------------------------------------------------------

class TestOtherTransitions:
    def test_reset_clears_attempt(self, level1: LevelConfig):
        s = _solved_attempt(level1, new_session(1, 4))
        r = apply_reset(s).state
        assert r == reset_attempt(s)
        assert r.rays == ()
        assert r.vocabulary_placements == {}
        assert r.classification == ""
        assert r.explanation == ""
        assert r.focal_length == s.focal_length

    def test_vocabulary_drop_replaces_term(self):
        s = apply_vocabulary_drop(new_session(1, 4), "Focal point", "Focal length").state
        s = apply_vocabulary_drop(s, "Focal point", "Focal point").state
        assert s.vocabulary_placements == {"Focal point": "Focal point"}

    def test_vocabulary_drop_unknown_zone(self):
        s = new_session(1, 4)
        t = apply_vocabulary_drop(s, "Lens", "Focal point")
        assert t.state is s
        assert t.events[0].kind == ERROR

    def test_vocabulary_drop_does_not_mutate_previous(self):
        s = new_session(1, 4)
        apply_vocabulary_drop(s, "Focal point", "Focal point")
        assert s.vocabulary_placements == {}

    def test_unknown_mode(self):
        assert apply_mode_change(new_session(1, 4), "expert").events[0].kind == ERROR

    def test_scenario_summary(self, level1: LevelConfig):
        text = scenario_summary(level1, 150)
        assert text.startswith("Lens type: convex. Object distance u = 420.0.")


class TestStateValue:
    def test_state_is_hashable_with_placements(self):
        s = apply_vocabulary_drop(new_session(1, 4), "Focal point", "Focal point").state
        assert hash(s) == hash(replace(s))

    def test_placements_still_compared(self):
        s = new_session(1, 4)
        dropped = apply_vocabulary_drop(s, "Focal point", "Focal point").state
        assert dropped != s

    def test_refused_input_reports_error_kind(self):
        t = apply_level_change(new_session(1, 4), 2, 4)
        assert t.events[0].kind == ERROR == "error"
