from __future__ import annotations

import argparse
import math
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

try:
    import pygame  # type: ignore
except Exception:
    pygame = None

from config import (
    ASSETS_DIR,
    INGREDIENTS,
    MUSIC_FILE,
    SAVE_FILE,
    TARGET_FPS,
    WHISK_TAP_STEP,
    WINDOW_H,
    WINDOW_W,
    WORLD_H,
    WORLD_W,
    ZONES,
)
from game import RoundController, RoundMode
from game.entities import Rect
from game.progress import ProgressStore
from game.round_controller import DIFFICULTIES, LEVELS
from game.viewport import Viewport
from logger import get_logger, set_verbose

log = get_logger("main")

INGREDIENT_IMAGES: Dict[str, str] = {ingredient_id: image for ingredient_id, _, image in INGREDIENTS}
INGREDIENT_LABELS: Dict[str, str] = {ingredient_id: label for ingredient_id, label, _ in INGREDIENTS}


class AutoBarista:
    """Scripted player for headless runs: one action per reaction interval."""

    def __init__(self, controller: RoundController, reaction: float = 0.3) -> None:
        self.controller = controller
        self.reaction = max(0.0, reaction)
        self.cooldown = 0.0
        self.cup_center = Rect(*ZONES["cup"]).center
        self.whisk_center = Rect(*ZONES["whisk"]).center
        self.slot_centers = {slot.ingredient_id: slot.rect.center for slot in controller.drag.slots}

    def step(self, dt: float) -> None:
        self.cooldown -= dt
        if self.cooldown > 0:
            return
        self.cooldown = self.reaction

        order = self.controller.snapshot().order
        if order is None:
            return
        if order.ready:
            self.controller.serve()
            return
        missing = [ingredient for ingredient in order.required if ingredient not in order.added]
        if missing:
            self.controller.pointer_down(self.slot_centers[missing[0]])
            self.controller.pointer_move(self.cup_center)
            self.controller.pointer_up()
            return
        self.controller.pointer_down(self.whisk_center)


def run_headless(
    ticks: int,
    dt: float,
    *,
    seed: Optional[int],
    level: Optional[int],
    difficulty: Optional[str],
    reaction: float,
    save_path: Path,
) -> RoundController:
    store = ProgressStore(save_path, difficulties=DIFFICULTIES, max_level=max(LEVELS))
    controller = RoundController(seed, store=store)
    if difficulty and not controller.select_difficulty(difficulty):
        log.warning("Unknown difficulty %r, keeping %s", difficulty, controller.selected_difficulty)
    controller.start_level(level if level is not None else controller.next_playable_level())

    barista = AutoBarista(controller, reaction)
    for _ in range(ticks):
        if controller.mode != RoundMode.PLAY:
            break
        barista.step(dt)
        controller.tick(dt)

    snap = controller.snapshot()
    outcome = {True: "passed", False: "repeat", None: "unfinished"}[snap.success]
    print(
        f"headless_done level={snap.level_id} diff={snap.difficulty_key} "
        f"t_left={snap.time_left:.1f} result={outcome} "
        f"economy[earned=${snap.earned},goal=${snap.goal},tips=${snap.tip_total},bonus=${snap.combo_bonus_total}] "
        f"service[served={snap.served},left={snap.customers_lost},best_combo={snap.best_combo}] "
        f"unlocked={snap.unlocked_level}"
    )
    if snap.mode == RoundMode.RESULTS:
        for label, value in controller.receipt():
            print(f"  {label:<24}{value:>8}")
    return controller


class AssetCache:
    """Image lookup that returns ``None`` for anything that fails to load."""

    def __init__(self, root: Path = ASSETS_DIR) -> None:
        self.root = root
        self._images: Dict[str, Optional["pygame.Surface"]] = {}

    def get(self, name: str) -> Optional["pygame.Surface"]:
        if name not in self._images:
            path = self.root / name
            try:
                self._images[name] = pygame.image.load(str(path)).convert_alpha()
            except (pygame.error, FileNotFoundError, OSError):
                log.debug("asset %s unavailable, using placeholder", path)
                self._images[name] = None
        return self._images[name]


class MusicPlayer:
    """Best-effort looping background music; failures leave it switched off."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.on = False
        self._loaded = False

    def toggle(self) -> bool:
        self.set(not self.on)
        return self.on

    def set(self, on: bool) -> None:
        self.on = on
        try:
            if on:
                if not self._loaded:
                    if not pygame.mixer.get_init():
                        pygame.mixer.init()
                    pygame.mixer.music.load(str(self.path))
                    pygame.mixer.music.set_volume(0.4)
                    self._loaded = True
                pygame.mixer.music.play(loops=-1)
            elif self._loaded:
                pygame.mixer.music.pause()
        except (pygame.error, FileNotFoundError, OSError) as exc:
            log.debug("music unavailable: %s", exc)
            self.on = False


class GameUI:
    def __init__(self, controller: RoundController):
        if pygame is None:
            raise RuntimeError("pygame is required for graphical mode. Relaunch with --headless.")
        pygame.init()
        if not pygame.display.get_init():
            raise RuntimeError("Display subsystem is unavailable. Relaunch with --headless.")
        try:
            self.screen = pygame.display.set_mode((WINDOW_W, WINDOW_H), pygame.RESIZABLE)
        except pygame.error as exc:
            raise RuntimeError(f"Could not open a window ({exc}). Relaunch with --headless.") from exc
        pygame.display.set_caption("Matcha Mother")
        self.controller = controller
        self.clock = pygame.time.Clock()
        self.world = pygame.Surface((WORLD_W, WORLD_H))
        self.font = pygame.font.SysFont("arial", 20)
        self.small = pygame.font.SysFont("arial", 15)
        self.big = pygame.font.SysFont("arial", 34, bold=True)
        self.viewport = Viewport()
        self.viewport.resize(*self.screen.get_size())
        self.assets = AssetCache()
        self.music = MusicPlayer(ASSETS_DIR / MUSIC_FILE)
        self.running = True

        self.palette = {
            "bg": (244, 232, 214),
            "panel": (255, 255, 255),
            "border": (53, 34, 34),
            "text": (53, 34, 34),
            "muted": (120, 96, 90),
            "patience": (68, 162, 162),
            "whisk": (244, 207, 72),
            "serve": (68, 162, 162),
            "tray": (185, 192, 140),
            "placeholder": (220, 220, 220),
            "overlay": (20, 16, 16),
        }

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self) -> None:
        ctrl = self.controller
        for ev in pygame.event.get():
            if ev.type == pygame.QUIT:
                self.running = False
            elif ev.type == pygame.VIDEORESIZE:
                self.viewport.resize(ev.w, ev.h)
            elif ev.type == pygame.KEYDOWN:
                self._handle_key(ev.key)
            elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
                ctrl.pointer_down(self.viewport.to_world(*ev.pos))
            elif ev.type == pygame.MOUSEMOTION:
                ctrl.pointer_move(self.viewport.to_world(*ev.pos))
            elif ev.type == pygame.MOUSEBUTTONUP and ev.button == 1:
                ctrl.pointer_up()

    def _handle_key(self, key: int) -> None:
        ctrl = self.controller
        if key == pygame.K_p:
            ctrl.toggle_pause()
        elif key == pygame.K_m:
            self.music.toggle()
        elif key == pygame.K_w:
            ctrl.advance_whisk(WHISK_TAP_STEP)
        elif key == pygame.K_s:
            ctrl.serve()
        elif ctrl.mode == RoundMode.MENU:
            if key in (pygame.K_RETURN, pygame.K_SPACE):
                if not self.music.on:
                    self.music.set(True)
                ctrl.start_next()
            elif key == pygame.K_r:
                ctrl.reset_progress()
            elif pygame.K_1 <= key <= pygame.K_9:
                keys = list(ctrl.difficulties)
                idx = key - pygame.K_1
                if idx < len(keys):
                    ctrl.select_difficulty(keys[idx])
        elif ctrl.mode == RoundMode.RESULTS:
            if key in (pygame.K_RETURN, pygame.K_SPACE):
                ctrl.continue_after_results()
            elif key == pygame.K_ESCAPE:
                ctrl.return_to_menu()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _rect(self, zone: Tuple[float, float, float, float]) -> "pygame.Rect":
        return pygame.Rect(*(int(v) for v in zone))

    def draw_image_or_fallback(self, name: str, rect: "pygame.Rect") -> None:
        image = self.assets.get(name) if name else None
        if image is not None:
            self.world.blit(pygame.transform.smoothscale(image, rect.size), rect.topleft)
            return
        pygame.draw.rect(self.world, self.palette["placeholder"], rect)
        pygame.draw.rect(self.world, self.palette["border"], rect, width=1)

    def _panel(self, zone_name: str, color: Tuple[int, int, int]) -> "pygame.Rect":
        rect = self._rect(ZONES[zone_name])
        pygame.draw.rect(self.world, color, rect, border_radius=12)
        pygame.draw.rect(self.world, self.palette["border"], rect, width=3, border_radius=12)
        return rect

    def _text(self, text: str, pos: Tuple[float, float], font=None, color=None) -> None:
        surface = (font or self.small).render(text, True, color or self.palette["text"])
        self.world.blit(surface, (int(pos[0]), int(pos[1])))

    def draw_line(self, snap) -> None:
        line = self._panel("line", self.palette["panel"])
        self._text("Line", (line.x + 12, line.y + 8), self.font)
        for idx, customer in enumerate(snap.customers):
            sprite = pygame.Rect(line.x + 12, line.y + 36 + idx * 70, 56, 56)
            if sprite.bottom > line.bottom:
                break
            self.draw_image_or_fallback(customer.sprite, sprite)
            bar = pygame.Rect(sprite.x + 66, sprite.y + 10, 160, 10)
            pygame.draw.rect(self.world, (210, 200, 190), bar)
            fill = pygame.Rect(bar.x, bar.y, int(bar.w * customer.patience_fraction), bar.h)
            pygame.draw.rect(self.world, self.palette["patience"], fill)
            self._text(f"{customer.name}: {customer.drink_name}  tip ${customer.tip}", (bar.x, bar.y + 16))

    def draw_station(self, snap) -> None:
        cup = self._panel("cup", self.palette["panel"])
        order = snap.order
        cup_image = order.cup_image if order is not None and order.ready else "empty-cup.png"
        self.draw_image_or_fallback(cup_image, pygame.Rect(cup.x + 60, cup.y + 30, 100, 160))
        if order is not None:
            self._text(f"Needs ({len(order.added)}/{len(order.required)})", (cup.x + 12, cup.y + 6))
            for idx, ingredient in enumerate(order.required):
                icon = pygame.Rect(cup.x + 12 + idx * 34, cup.y + 26, 28, 28)
                self.draw_image_or_fallback(INGREDIENT_IMAGES.get(ingredient, ""), icon)
                if ingredient in order.added:
                    pygame.draw.line(self.world, (30, 140, 60), icon.bottomleft, icon.topright, 3)

        whisk = self._panel("whisk", self.palette["whisk"])
        center = (whisk.centerx, whisk.centery + 10)
        pygame.draw.circle(self.world, self.palette["border"], center, 42, width=2)
        progress = order.whisk_progress if order is not None else 0.0
        if progress > 0:
            arc = pygame.Rect(0, 0, 84, 84)
            arc.center = center
            pygame.draw.arc(self.world, self.palette["patience"], arc, math.pi / 2, math.pi / 2 + progress * 2 * math.pi, 6)
        self._text(f"Whisk {int(progress * 100)}%", (whisk.x + 10, whisk.y + 6))

        serve = self._panel("serve", self.palette["serve"])
        self._text("SERVE", (serve.x + 40, serve.y + 28), self.font)

        tray = self._panel("tray", self.palette["tray"])
        for slot in self.controller.drag.slots:
            rect = self._rect((slot.rect.x, slot.rect.y, slot.rect.w, slot.rect.h))
            if rect.bottom > tray.bottom + 8:
                continue
            self.draw_image_or_fallback(INGREDIENT_IMAGES[slot.ingredient_id], rect)
            self._text(INGREDIENT_LABELS[slot.ingredient_id][:6], (rect.x + 2, rect.bottom - 16))

        if snap.drag is not None:
            token = pygame.Rect(0, 0, 46, 46)
            token.center = (int(snap.drag.x), int(snap.drag.y))
            self.draw_image_or_fallback(INGREDIENT_IMAGES.get(snap.drag.ingredient_id, ""), token)

    def draw_hud(self, snap) -> None:
        hud = (
            f"{snap.difficulty_label} | Level {snap.level_id} | {math.ceil(snap.time_left)}s | "
            f"Goal ${snap.goal} | Earned ${snap.earned} | Served {snap.served} | "
            f"Combo {snap.combo} (best {snap.best_combo})"
        )
        self._text(hud, (16, 12), self.font)
        if snap.order is not None:
            self._text(f"{snap.order.customer_name}: \"{snap.order.order_line}\"", (16, 44))
        self._text(snap.feedback, (360, 446), self.small, self.palette["muted"])

    def draw_overlay(self, snap) -> None:
        shade = pygame.Surface((WORLD_W, WORLD_H), pygame.SRCALPHA)
        shade.fill((*self.palette["overlay"], 170))
        self.world.blit(shade, (0, 0))
        white = (255, 255, 255)
        if snap.mode == RoundMode.PAUSE:
            self._text("Paused (P to resume)", (340, 240), self.big, white)
            return
        if snap.mode == RoundMode.MENU:
            level_line, difficulty_line = self.controller.menu_info()
            self._text("Matcha Mother", (340, 120), self.big, white)
            self._text("Drag ingredients into the cup, tap whisk fast, then serve.", (220, 180), self.font, white)
            self._text(level_line, (220, 230), self.font, white)
            self._text(difficulty_line, (220, 260), self.font, white)
            self._text("Enter: start  1-3: difficulty  R: reset progress  M: music", (220, 310), self.font, white)
            return
        title = f"{snap.level_name} complete!" if snap.success else f"{snap.level_name} failed..."
        self._text(title, (300, 60), self.big, white)
        for idx, (label, value) in enumerate(self.controller.receipt()):
            self._text(label, (300, 120 + idx * 26), self.font, white)
            self._text(value, (600, 120 + idx * 26), self.font, white)
        action = "Next Level" if snap.success else "Retry Level"
        self._text(f"Enter: {action}   Esc: Back to Menu", (300, 120 + 12 * 26), self.font, white)

    def draw(self) -> None:
        snap = self.controller.snapshot()
        self.world.fill(self.palette["bg"])
        background = self.assets.get("cafe-background.png")
        if background is not None:
            self.world.blit(pygame.transform.smoothscale(background, (WORLD_W, WORLD_H)), (0, 0))
        self.draw_image_or_fallback("jolene-idle-1.png", self._rect(ZONES["barista"]))
        self.draw_line(snap)
        self.draw_station(snap)
        self.draw_hud(snap)
        if snap.mode != RoundMode.PLAY:
            self.draw_overlay(snap)

        self.screen.fill((0, 0, 0))
        width = int(WORLD_W * self.viewport.scale)
        height = int(WORLD_H * self.viewport.scale)
        scaled = pygame.transform.scale(self.world, (width, height))
        self.screen.blit(scaled, (int(self.viewport.off_x), int(self.viewport.off_y)))
        pygame.display.flip()

    def run(self) -> None:
        while self.running:
            dt = self.clock.tick(TARGET_FPS) / 1000.0
            self.handle_input()
            self.controller.tick(dt)
            self.draw()
        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Matcha Mother cafe game")
    parser.add_argument("--headless", action="store_true", help="auto-play one level without graphics")
    parser.add_argument("--ticks", type=int, default=6000, help="headless frame limit")
    parser.add_argument("--dt", type=float, default=0.05, help="headless frame time in seconds")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible runs")
    parser.add_argument("--level", type=int, default=None, help="headless level to play")
    parser.add_argument("--difficulty", default=None, help="difficulty key (easy, medium, hard)")
    parser.add_argument("--reaction", type=float, default=0.3, help="headless player seconds per action")
    parser.add_argument("--save", type=Path, default=SAVE_FILE, help="progress save file")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    args = parser.parse_args()
    set_verbose(args.verbose)

    if args.headless:
        run_headless(
            args.ticks,
            args.dt,
            seed=args.seed,
            level=args.level,
            difficulty=args.difficulty,
            reaction=args.reaction,
            save_path=args.save,
        )
        return

    store = ProgressStore(args.save, difficulties=DIFFICULTIES, max_level=max(LEVELS))
    controller = RoundController(args.seed, store=store)
    try:
        ui = GameUI(controller)
    except RuntimeError as exc:
        print(f"Startup error: {exc}", file=sys.stderr)
        sys.exit(1)
    ui.run()


if __name__ == "__main__":
    main()
