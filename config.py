"""Centralised configuration constants for Matcha Mother."""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# World / display
# ---------------------------------------------------------------------------
WORLD_W: int = 960
WORLD_H: int = 540
WINDOW_W: int = 1280
WINDOW_H: int = 720
TARGET_FPS: int = 60

# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------
SAVE_FILE: Path = Path("matcha_mother_save.json")
DRINKS_FILE: Path = Path("data/drinks.json")
LEVELS_FILE: Path = Path("data/levels.json")
DIFFICULTIES_FILE: Path = Path("data/difficulties.json")
ASSETS_DIR: Path = Path("assets")
MUSIC_FILE: str = "SunnyRetro2.mp3"

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------
MAX_FRAME_DT: float = 0.05             # largest delta applied in one frame
SPAWN_INTERVAL_MIN: float = 4.0        # seconds until the next spawn attempt
SPAWN_INTERVAL_SPREAD: float = 3.0     # reseed draws from [min, min + spread)
ROUND_DURATION_MIN: int = 150          # round length drawn from [min, max]
ROUND_DURATION_MAX: int = 270
SECOND_CUSTOMER_CHANCE: float = 0.5    # chance of a second customer at round start

# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------
BASE_PRICE: int = 5
COMBO_BONUS_CAP: int = 5

# ---------------------------------------------------------------------------
# Interaction
# ---------------------------------------------------------------------------
WHISK_TAP_STEP: float = 0.06           # whisk progress gained per tap
BOUNCE_BACK_EASE: float = 0.25         # fraction of the remaining distance per frame
BOUNCE_BACK_SNAP_DISTANCE: float = 2.0
EVENT_LOG_SIZE: int = 12

# ---------------------------------------------------------------------------
# Zones (world coordinates: x, y, w, h)
# ---------------------------------------------------------------------------
ZONES: dict[str, tuple[int, int, int, int]] = {
    "cup": (360, 220, 220, 220),
    "whisk": (620, 280, 140, 140),
    "serve": (780, 420, 150, 80),
    "tray": (40, 390, 300, 120),
    "line": (40, 90, 300, 260),
    "barista": (700, 110, 220, 220),
}

TRAY_SLOT_SIZE: int = 52
TRAY_SLOT_GAP: int = 10
TRAY_SLOT_PADDING: int = 10
TRAY_COLUMNS: int = 4

# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
CUSTOMER_IDENTITIES: dict[str, dict[str, str]] = {
    "Jenny": {
        "happy": "customer-jenny-happy.png",
        "mad": "customer-jenny-mad.png",
    },
    "Kevin": {
        "happy": "customer-kevin-happy.png",
        "mad": "customer-kevin-mad.png",
    },
}

# ---------------------------------------------------------------------------
# Ingredients (tray order: id, label, image)
# ---------------------------------------------------------------------------
INGREDIENTS: list[tuple[str, str, str]] = [
    ("matcha_powder", "Matcha", "matcha-powder.png"),
    ("water", "Water", "water.png"),
    ("milk", "Milk", "milk.png"),
    ("strawberry_puree", "Strawberry", "strawberry-puree.png"),
    ("lavender_syrup", "Lavender", "lavender-syrup.png"),
    ("boba", "Boba", "boba.png"),
    ("shimmer", "Shimmer", "shimmer.png"),
]

INGREDIENT_IDS: list[str] = [ingredient_id for ingredient_id, _, _ in INGREDIENTS]

# ---------------------------------------------------------------------------
# Player-facing feedback (keyed by order signal value)
# ---------------------------------------------------------------------------
FEEDBACK_MESSAGES: dict[str, str] = {
    "no_order": "No customers right now.",
    "drop_outside_target": "Drop ingredients into the cup.",
    "wrong_ingredient": "Oops! That's not for this drink.",
    "already_added": "Already added.",
    "added": "Nice! Keep going.",
    "ingredients_complete": "Now whisk! Tap fast in the whisk circle.",
    "needs_ingredients": "Add every ingredient before whisking.",
    "whisked": "Whisking... tap fast!",
    "ready": "Ready! Tap Serve.",
    "not_ready": "Not ready yet. Add ingredients and whisk.",
    "served": "Served!",
    "perfect": "Perfect serve! Combo up!",
    "customer_left": "A customer left... Try serving faster next time.",
}
