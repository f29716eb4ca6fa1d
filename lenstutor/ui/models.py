"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from lenstutor.core.levels import LevelConfig
from lenstutor.core.session import SessionState

LOCK_MARK = "\U0001F512"


@dataclass
class LevelState:
    """UI state for a single level: unlock status and selection."""

    level: LevelConfig
    unlocked: bool
    is_current: bool = False

    @property
    def label(self) -> str:
        return self.level.name if self.unlocked else f"{self.level.name} {LOCK_MARK}"


def build_level_states(levels: list[LevelConfig], state: SessionState) -> list[LevelState]:
    return [
        LevelState(
            level=level,
            unlocked=state.is_unlocked(level.id),
            is_current=level.id == state.current_level,
        )
        for level in levels
    ]
