from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable

from config import DIFFICULTIES_FILE


@dataclass(frozen=True)
class DifficultyDefinition:
    key: str
    label: str
    line_cap: int
    patience: float
    tip_max: int

    def describe(self) -> str:
        return f"{self.label}: line {self.line_cap}, patience {self.patience:g}s, tip max ${self.tip_max}"


DEFAULT_DIFFICULTIES: Dict[str, DifficultyDefinition] = {
    "easy": DifficultyDefinition(key="easy", label="Easy", line_cap=3, patience=20.0, tip_max=7),
    "medium": DifficultyDefinition(key="medium", label="Medium", line_cap=5, patience=15.0, tip_max=7),
    "hard": DifficultyDefinition(key="hard", label="Hard", line_cap=7, patience=10.0, tip_max=7),
}


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def _parse_difficulty_entry(key: str, entry: Dict[str, Any]) -> DifficultyDefinition | None:
    if not isinstance(key, str) or not key:
        return None

    label = entry.get("label", key.title())
    line_cap = entry.get("line_cap")
    patience = entry.get("patience")
    tip_max = entry.get("tip_max", 7)

    if not isinstance(label, str) or not label.strip():
        return None
    if not isinstance(line_cap, int) or isinstance(line_cap, bool) or line_cap < 1:
        return None
    if not _is_positive_number(patience):
        return None
    if not isinstance(tip_max, int) or isinstance(tip_max, bool) or tip_max < 0:
        return None

    return DifficultyDefinition(
        key=key,
        label=label.strip(),
        line_cap=line_cap,
        patience=float(patience),
        tip_max=tip_max,
    )


def _ordered_catalog(difficulties: Iterable[DifficultyDefinition]) -> Dict[str, DifficultyDefinition]:
    # Easiest first: shortest line, then most patience.
    ordered = sorted(difficulties, key=lambda difficulty: (difficulty.line_cap, -difficulty.patience, difficulty.key))
    return {difficulty.key: difficulty for difficulty in ordered}


def easiest_difficulty(catalog: Dict[str, DifficultyDefinition]) -> str:
    return next(iter(catalog))


def load_difficulty_catalog(path: Path = DIFFICULTIES_FILE) -> Dict[str, DifficultyDefinition]:
    if not path.exists():
        return _ordered_catalog(DEFAULT_DIFFICULTIES.values())

    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return _ordered_catalog(DEFAULT_DIFFICULTIES.values())

    if not isinstance(raw, dict):
        return _ordered_catalog(DEFAULT_DIFFICULTIES.values())

    difficulties: Dict[str, DifficultyDefinition] = {}
    for key, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        difficulty = _parse_difficulty_entry(key, entry)
        if difficulty is None:
            continue
        difficulties[key] = difficulty

    if not difficulties:
        return _ordered_catalog(DEFAULT_DIFFICULTIES.values())

    return _ordered_catalog(difficulties.values())
