"""Session state for one learner working through the ray-diagram levels.

The state is an immutable value. Each user action maps to one ``apply_*``
function that returns the next state together with the events the shell
should surface (feedback messages, unlock notifications). Nothing here
touches persistence; the shell saves progress when it sees an ``unlocked``
event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Mapping, NamedTuple, Optional, Tuple

from lenstutor.core.errors import InvalidParameterError
from lenstutor.core.geometry import Point, object_distance, object_tip
from lenstutor.core.levels import LevelConfig
from lenstutor.core.misconceptions import VOCABULARY_TERMS, ViolatedRule, evaluate_attempt
from lenstutor.core.optics import SolveResult, solve, validate_positive
from lenstutor.core.rays import CENTRAL, PARALLEL, Ray, construct_ray
from lenstutor.core.snap_targets import SnapTarget, closest_snap, generate_snap_targets

logger = logging.getLogger(__name__)

DEFAULT_FOCAL_LENGTH = 150.0
OBJECT_TIP_RADIUS = 25.0

GUIDED = "guided"
FREE = "free"
MODES = (GUIDED, FREE)

INFO = "info"
ERROR = "error"
SUCCESS = "success"
UNLOCKED = "unlocked"


@dataclass(frozen=True)
class SessionEvent:
    kind: str
    message: str
    violations: Tuple[ViolatedRule, ...] = ()


@dataclass(frozen=True)
class SessionState:
    unlocked_level: int = 1
    current_level: int = 1
    focal_length: float = DEFAULT_FOCAL_LENGTH
    mode: str = GUIDED
    guided_step_index: int = 0
    rays: Tuple[Ray, ...] = ()
    click_stage: int = 0
    pending_origin: Optional[Point] = None
    show_ideal_solution: bool = False
    vocabulary_placements: Mapping[str, str] = field(default_factory=dict, hash=False)
    classification: str = ""
    explanation: str = ""
    unlock_all: bool = False

    def is_unlocked(self, level_id: int) -> bool:
        return self.unlock_all or level_id <= self.unlocked_level

    def snap_targets(self) -> List[SnapTarget]:
        return generate_snap_targets(self.focal_length)


class Transition(NamedTuple):
    state: SessionState
    events: Tuple[SessionEvent, ...]


def _info(message: str) -> SessionEvent:
    return SessionEvent(INFO, message)


def _error(message: str) -> SessionEvent:
    return SessionEvent(ERROR, message)


def new_session(
    unlocked_level: int,
    level_count: int,
    focal_length: float = DEFAULT_FOCAL_LENGTH,
    unlock_all: bool = False,
) -> SessionState:
    """Start at the highest unlocked level, bounded by the catalog size."""
    unlocked = max(1, min(int(unlocked_level), level_count))
    return SessionState(
        unlocked_level=unlocked,
        current_level=unlocked,
        focal_length=validate_positive("focal length", focal_length),
        unlock_all=unlock_all,
    )


def reset_attempt(state: SessionState) -> SessionState:
    """Discard everything the learner built for the current level."""
    return replace(
        state,
        guided_step_index=0,
        rays=(),
        click_stage=0,
        pending_origin=None,
        show_ideal_solution=False,
        vocabulary_placements={},
        classification="",
        explanation="",
    )


def current_solution(state: SessionState, level: LevelConfig) -> SolveResult:
    return solve(level.lens, state.focal_length, level.distance_factor)


def scenario_summary(level: LevelConfig, focal_length: float) -> str:
    u = object_distance(level.distance_factor, focal_length)
    return (
        f"Lens type: {level.lens}. Object distance u = {u:.1f}. "
        "Use principal axis, focal point and focal length correctly."
    )


def apply_click(state: SessionState, level: LevelConfig, world_point: Point) -> Transition:
    """First click picks the object tip as origin, the second snaps the
    target and completes a ray. Ray kinds follow drawing order."""
    if state.click_stage == 0:
        if len(state.rays) >= 2:
            return Transition(state, (_error("Both rays are already drawn. Reset to start again."),))
        tip = object_tip(level.distance_factor, state.focal_length)
        if world_point.distance_to(tip) < OBJECT_TIP_RADIUS:
            next_state = replace(state, click_stage=1, pending_origin=tip)
            return Transition(next_state, (_info("Start accepted. Now click a snap point target."),))
        return Transition(state, (_error("First click must be on object tip."),))

    snapped = closest_snap(state.snap_targets(), world_point)
    if snapped is None:
        return Transition(state, (_error("Second click must be on a snap point."),))

    kind = PARALLEL if not state.rays else CENTRAL
    ray = construct_ray(kind, level.lens, state.focal_length, snapped, level.distance_factor)
    guided_step = state.guided_step_index
    if state.mode == GUIDED:
        guided_step = min(len(level.guided_steps) - 1, guided_step + 1)
    logger.debug("Level %s: %s ray snapped to %s", level.id, kind, snapped.name)
    next_state = replace(
        state,
        rays=state.rays + (ray,),
        click_stage=0,
        pending_origin=None,
        guided_step_index=guided_step,
    )
    return Transition(next_state, ())


def apply_submit(state: SessionState, level: LevelConfig, level_count: int) -> Transition:
    """Score the attempt against the solver output for the current setup."""
    solution = current_solution(state, level)
    violations = evaluate_attempt(
        state.rays,
        level,
        state.classification,
        solution,
        state.vocabulary_placements,
        state.explanation,
    )
    shown = replace(state, show_ideal_solution=True)
    if violations:
        logger.info("Level %s attempt failed with %d issue(s)", level.id, len(violations))
        message = "\n".join(v.message for v in violations)
        return Transition(shown, (SessionEvent(ERROR, message, tuple(violations)),))

    events: List[SessionEvent] = []
    if state.current_level < level_count and state.unlocked_level == state.current_level:
        shown = replace(shown, unlocked_level=state.unlocked_level + 1)
        logger.info("Unlocked level %d", shown.unlocked_level)
        events.append(SessionEvent(UNLOCKED, f"Unlocked up to Level {shown.unlocked_level}."))
    events.insert(
        0,
        SessionEvent(
            SUCCESS,
            "Excellent. Diagram geometry, terminology, and explanation are correct. "
            "Next level unlocked (if available).",
        ),
    )
    return Transition(shown, tuple(events))


def apply_level_change(state: SessionState, level_id: int, level_count: int) -> Transition:
    if not 1 <= level_id <= level_count:
        return Transition(state, (_error(f"Level {level_id} does not exist."),))
    if not state.is_unlocked(level_id):
        return Transition(state, (_error(f"Level {level_id} is locked. Pass the earlier levels first."),))
    return Transition(reset_attempt(replace(state, current_level=level_id)), ())


def apply_focal_length_change(
    state: SessionState,
    focal_length: float,
    max_focal_length: Optional[float] = None,
) -> Transition:
    """A new focal length invalidates every ray drawn so far.

    ``max_focal_length`` is the largest value that still fits the canvas;
    anything beyond it would push the object tip out of reach.
    """
    try:
        f = validate_positive("focal length", focal_length)
    except InvalidParameterError as e:
        return Transition(state, (_error(f"Focal length must be a positive number ({e})."),))
    if max_focal_length is not None and f > max_focal_length:
        return Transition(
            state, (_error(f"Focal length must be at most {max_focal_length:.1f} to fit the diagram."),)
        )
    return Transition(reset_attempt(replace(state, focal_length=f)), ())


def apply_reset(state: SessionState) -> Transition:
    return Transition(reset_attempt(state), ())


def apply_mode_change(state: SessionState, mode: str) -> Transition:
    if mode not in MODES:
        return Transition(state, (_error(f"Unknown mode {mode!r}."),))
    return Transition(replace(state, mode=mode), ())


def apply_vocabulary_drop(state: SessionState, zone_key: str, term: str) -> Transition:
    if zone_key not in VOCABULARY_TERMS:
        return Transition(state, (_error(f"Unknown drop zone {zone_key!r}."),))
    placements = dict(state.vocabulary_placements)
    placements[zone_key] = term
    return Transition(replace(state, vocabulary_placements=placements), ())


def apply_classification(state: SessionState, classification: str) -> Transition:
    return Transition(replace(state, classification=classification or ""), ())


def apply_explanation(state: SessionState, explanation: str) -> Transition:
    return Transition(replace(state, explanation=explanation or ""), ())
