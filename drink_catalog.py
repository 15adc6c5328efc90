from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable

from config import DRINKS_FILE, INGREDIENT_IDS

DRINK_ID_RE = re.compile(r"^[a-z][a-z0-9_]*$")
MAX_INGREDIENTS = 6


@dataclass(frozen=True)
class DrinkDefinition:
    key: str
    display_name: str
    ingredients: tuple[str, ...]
    order_lines: tuple[str, ...]
    cup_image: str = "empty-cup.png"

    @property
    def required(self) -> frozenset[str]:
        return frozenset(self.ingredients)


DEFAULT_DRINK_DEFINITIONS: Dict[str, DrinkDefinition] = {
    "hot": DrinkDefinition(
        key="hot",
        display_name="Hot Matcha",
        ingredients=("matcha_powder", "water", "milk"),
        order_lines=(
            "One hot matcha please.",
            "Can I get a classic hot matcha?",
            "Warm matcha moment, please.",
        ),
        cup_image="hot-matcha.png",
    ),
    "strawberry": DrinkDefinition(
        key="strawberry",
        display_name="Strawberry Matcha",
        ingredients=("strawberry_puree", "matcha_powder", "water", "milk"),
        order_lines=(
            "Strawberry matcha, pretty please.",
            "I'm feeling pink today. Strawberry matcha!",
            "Strawberry matcha... as a treat.",
        ),
        cup_image="strawberry-matcha.png",
    ),
    "boba": DrinkDefinition(
        key="boba",
        display_name="Boba Matcha",
        ingredients=("boba", "matcha_powder", "water", "milk"),
        order_lines=(
            "Boba matcha please.",
            "Boba matcha, extra cozy.",
            "Matcha with boba... you get me.",
        ),
        cup_image="boba-matcha.png",
    ),
    "lavender": DrinkDefinition(
        key="lavender",
        display_name="Lavender Matcha",
        ingredients=("lavender_syrup", "matcha_powder", "water", "milk"),
        order_lines=(
            "Lavender matcha please.",
            "Lavender matcha, soft day.",
            "A lavender matcha would save me.",
        ),
        cup_image="lavender-matcha.png",
    ),
    "galaxy": DrinkDefinition(
        key="galaxy",
        display_name="Galaxy Matcha",
        ingredients=("shimmer", "matcha_powder", "water", "milk"),
        order_lines=(
            "Galaxy matcha please!",
            "One galaxy matcha. Starry vibes.",
            "I want the sparkly one. Galaxy!",
        ),
        cup_image="galaxy-matcha.png",
    ),
}


def _coerce_str_list(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, list) or not all(isinstance(i, str) for i in value):
        return None
    return tuple(value)


def _is_valid_drink_id(value: str) -> bool:
    return bool(DRINK_ID_RE.fullmatch(value))


def _parse_drink_entry(key: str, entry: Dict[str, Any]) -> DrinkDefinition | None:
    if not _is_valid_drink_id(key):
        return None

    display_name = entry.get("display_name")
    cup_image = entry.get("cup_image", "empty-cup.png")
    ingredients = _coerce_str_list(entry.get("ingredients"))
    order_lines = _coerce_str_list(entry.get("order_lines", []))

    if not isinstance(display_name, str) or not display_name.strip():
        return None
    if not isinstance(cup_image, str) or not cup_image.strip():
        return None
    if ingredients is None or order_lines is None:
        return None
    if not ingredients or len(ingredients) > MAX_INGREDIENTS:
        return None
    if len(set(ingredients)) != len(ingredients):
        return None
    if any(ingredient not in INGREDIENT_IDS for ingredient in ingredients):
        return None

    lines = tuple(line.strip() for line in order_lines if line.strip())
    if not lines:
        lines = (f"One {display_name.strip()} please.",)

    return DrinkDefinition(
        key=key,
        display_name=display_name.strip(),
        ingredients=ingredients,
        order_lines=lines,
        cup_image=cup_image.strip(),
    )


def _ordered_catalog(drinks: Iterable[DrinkDefinition]) -> Dict[str, DrinkDefinition]:
    return {drink.key: drink for drink in drinks}


def load_drink_catalog(path: Path = DRINKS_FILE) -> Dict[str, DrinkDefinition]:
    if not path.exists():
        return _ordered_catalog(DEFAULT_DRINK_DEFINITIONS.values())

    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return _ordered_catalog(DEFAULT_DRINK_DEFINITIONS.values())

    if not isinstance(raw, dict):
        return _ordered_catalog(DEFAULT_DRINK_DEFINITIONS.values())

    drinks: Dict[str, DrinkDefinition] = {}
    for key, entry in raw.items():
        if not isinstance(key, str) or not isinstance(entry, dict):
            continue
        drink = _parse_drink_entry(key, entry)
        if drink is None:
            continue
        drinks[key] = drink

    if not drinks:
        return _ordered_catalog(DEFAULT_DRINK_DEFINITIONS.values())

    return _ordered_catalog(drinks.values())
