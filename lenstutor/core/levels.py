from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from lenstutor.core.optics import LENS_KINDS

logger = logging.getLogger(__name__)

DEFAULT_LEVELS_DIR = Path(__file__).resolve().parent.parent / "data" / "levels"


@dataclass(frozen=True)
class LevelConfig:
    id: int
    name: str
    lens: str
    distance_factor: float
    guided_steps: Tuple[str, ...]
    expected_classification: str

    @property
    def key(self) -> str:
        return f"level{self.id}"


class LevelRepository:
    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or DEFAULT_LEVELS_DIR
        self._levels = self._load_levels()

    def all(self) -> List[LevelConfig]:
        return list(self._levels.values())

    def get(self, level_id: int) -> LevelConfig:
        return self._levels[level_id]

    def __len__(self) -> int:
        return len(self._levels)

    def _load_levels(self) -> Dict[int, LevelConfig]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        levels: Dict[int, LevelConfig] = {}
        pattern = re.compile(r"^level(\d+)$")

        def _sort_key(p: Path) -> tuple[int, str]:
            m = pattern.match(p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for level_path in sorted(base_dir.glob("level*.yaml"), key=_sort_key):
            m = pattern.match(level_path.stem)
            if not m:
                logger.warning("Skipping %s: file name must be level<N>.yaml", level_path.name)
                continue
            level = self._parse_level(int(m.group(1)), level_path)
            levels[level.id] = level

        if not levels:
            raise ValueError("No level files (level*.yaml) found in data/levels")
        logger.info("Loaded %d levels from %s", len(levels), base_dir)
        return levels

    @staticmethod
    def _parse_level(level_id: int, level_path: Path) -> LevelConfig:
        raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{level_path.name}: expected YAML mapping with 'title' and 'lens'")
        title = raw.get("title")
        if not title or not isinstance(title, str):
            raise ValueError(f"{level_path.name}: missing or invalid 'title'")
        lens = raw.get("lens")
        if lens not in LENS_KINDS:
            raise ValueError(f"{level_path.name}: 'lens' must be one of {', '.join(LENS_KINDS)}")
        factor = raw.get("distance_factor")
        if isinstance(factor, bool) or not isinstance(factor, (int, float)) or factor <= 0:
            raise ValueError(f"{level_path.name}: 'distance_factor' must be a positive number")
        expected = raw.get("expected_classification")
        if not expected or not isinstance(expected, str):
            raise ValueError(f"{level_path.name}: missing or invalid 'expected_classification'")

        steps_raw = raw.get("guided_steps")
        if steps_raw is None:
            raise ValueError(f"{level_path.name}: missing 'guided_steps'")
        if isinstance(steps_raw, list):
            steps = [str(item).strip() for item in steps_raw if str(item).strip()]
        else:
            # allow steps as multiline string
            text = str(steps_raw).strip()
            steps = [line.strip() for line in text.splitlines() if line.strip()]
        if not steps:
            raise ValueError(f"{level_path.name}: 'guided_steps' has no steps")

        return LevelConfig(
            id=level_id,
            name=title.strip(),
            lens=lens,
            distance_factor=float(factor),
            guided_steps=tuple(steps),
            expected_classification=expected.strip(),
        )
