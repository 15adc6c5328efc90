"""Two-field progress save: highest unlocked level and selected difficulty."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable

from config import SAVE_FILE
from logger import get_logger

log = get_logger("progress")


@dataclass
class Progress:
    unlocked_level: int = 1
    selected_difficulty: str = "easy"


class ProgressStore:
    """JSON-file backed store that never blocks startup.

    Missing, unreadable or malformed saves load as defaults; write failures
    are logged and otherwise ignored.
    """

    def __init__(
        self,
        path: Path = SAVE_FILE,
        *,
        difficulties: Iterable[str] = ("easy", "medium", "hard"),
        max_level: int = 5,
    ) -> None:
        self.path = path
        self.difficulties = list(difficulties)
        self.max_level = max(1, max_level)

    def defaults(self) -> Progress:
        return Progress(unlocked_level=1, selected_difficulty=self.difficulties[0] if self.difficulties else "easy")

    def load(self) -> Progress:
        progress = self.defaults()
        if not self.path.exists():
            return progress
        try:
            raw = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            log.warning("Ignoring unreadable save %s: %s", self.path, exc)
            return progress
        if not isinstance(raw, dict):
            log.warning("Ignoring malformed save %s", self.path)
            return progress
        return self._normalize(raw, progress)

    def _normalize(self, raw: Dict, progress: Progress) -> Progress:
        level = raw.get("unlocked_level")
        if isinstance(level, (int, float)) and not isinstance(level, bool):
            try:
                progress.unlocked_level = int(max(1, min(self.max_level, int(level))))
            except (OverflowError, ValueError):
                pass
        difficulty = raw.get("selected_difficulty")
        if isinstance(difficulty, str) and difficulty in self.difficulties:
            progress.selected_difficulty = difficulty
        return progress

    def save(self, progress: Progress) -> None:
        try:
            self.path.write_text(json.dumps(asdict(progress), indent=2))
        except OSError as exc:
            log.warning("Could not write save %s: %s", self.path, exc)

    def reset(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            log.warning("Could not remove save %s: %s", self.path, exc)
