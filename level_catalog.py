from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

from config import LEVELS_FILE
from drink_catalog import DEFAULT_DRINK_DEFINITIONS

ALL_DRINKS: Tuple[str, ...] = ("hot", "boba", "strawberry", "lavender", "galaxy")


@dataclass(frozen=True)
class LevelDefinition:
    level_id: int
    name: str
    goal: int
    drinks: Tuple[str, ...]


DEFAULT_LEVELS: Dict[int, LevelDefinition] = {
    1: LevelDefinition(1, "Day 1", 120, ("hot", "boba")),
    2: LevelDefinition(2, "Day 2", 180, ("hot", "boba", "strawberry")),
    3: LevelDefinition(3, "Day 3", 200, ALL_DRINKS),
    4: LevelDefinition(4, "Day 4 (Bonus)", 500, ALL_DRINKS),
    5: LevelDefinition(5, "Day 5 (Bonus)", 1000, ALL_DRINKS),
}


def _is_positive_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer() and value > 0
    return isinstance(value, int) and value > 0


def _coerce_str_list(value: Any) -> Tuple[str, ...] | None:
    if not isinstance(value, list) or not all(isinstance(i, str) for i in value):
        return None
    return tuple(value)


def _parse_level_entry(key: str, entry: Dict[str, Any]) -> LevelDefinition | None:
    try:
        level_id = int(key)
    except ValueError:
        return None
    if level_id <= 0:
        return None

    name = entry.get("name", f"Day {level_id}")
    goal = entry.get("goal")
    drinks = _coerce_str_list(entry.get("drinks"))

    if not isinstance(name, str) or not name.strip():
        return None
    if not _is_positive_int(goal):
        return None
    if not drinks or len(set(drinks)) != len(drinks):
        return None

    return LevelDefinition(
        level_id=level_id,
        name=name.strip(),
        goal=int(goal),
        drinks=drinks,
    )


def _ordered_catalog(levels: Iterable[LevelDefinition]) -> Dict[int, LevelDefinition]:
    ordered = sorted(levels, key=lambda level: level.level_id)
    return {level.level_id: level for level in ordered}


def _has_gaps(levels: Dict[int, LevelDefinition]) -> bool:
    return sorted(levels) != list(range(1, len(levels) + 1))


def _has_unknown_drinks(levels: Dict[int, LevelDefinition], drink_keys: Iterable[str]) -> bool:
    known = set(drink_keys)
    return any(drink not in known for level in levels.values() for drink in level.drinks)


def load_level_catalog(
    path: Path = LEVELS_FILE,
    drink_keys: Iterable[str] = tuple(DEFAULT_DRINK_DEFINITIONS),
) -> Dict[int, LevelDefinition]:
    """Load level definitions keyed by level id.

    Levels must be numbered 1..N without gaps and may only reference known
    drinks; any violation discards the file in favour of the defaults.
    """
    drink_keys = tuple(drink_keys)
    defaults = _ordered_catalog(DEFAULT_LEVELS.values())
    if not path.exists():
        return defaults

    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return defaults

    if not isinstance(raw, dict):
        return defaults

    parsed: Dict[int, LevelDefinition] = {}
    for key, entry in raw.items():
        if not isinstance(key, str) or not isinstance(entry, dict):
            continue
        level = _parse_level_entry(key, entry)
        if level is None:
            continue
        parsed[level.level_id] = level

    if not parsed or _has_gaps(parsed) or _has_unknown_drinks(parsed, drink_keys):
        return defaults

    return _ordered_catalog(parsed.values())
