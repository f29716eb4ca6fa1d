from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

FIRST_LEVEL = 1


class ProgressStore:
    """Persists the highest unlocked level across app restarts.
    File: ~/.lenstutor/progress.json. Saving is fire-and-forget: failures are
    logged, never raised."""

    def __init__(self, file_path: Optional[Path] = None, level_count: Optional[int] = None) -> None:
        self._file_path = file_path or Path.home() / ".lenstutor" / "progress.json"
        self._level_count = level_count

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> int:
        """Return the saved unlocked level, falling back to level 1 for
        absent or malformed data."""
        if not self._file_path.exists():
            return FIRST_LEVEL
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return FIRST_LEVEL

        if not isinstance(payload, dict):
            logger.warning("Ignoring progress in %s: expected a JSON object", self._file_path)
            return FIRST_LEVEL
        value = payload.get("unlocked_level")
        if isinstance(value, bool) or not isinstance(value, int) or value < FIRST_LEVEL:
            return FIRST_LEVEL
        if self._level_count is not None:
            value = min(value, self._level_count)
        return value

    def save(self, unlocked_level: int) -> None:
        payload = {"unlocked_level": int(unlocked_level)}
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)

    def reset(self) -> None:
        """Clear progress back to the first level."""
        self.save(FIRST_LEVEL)
