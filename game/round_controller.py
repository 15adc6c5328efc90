"""RoundController: single owner of the cafe simulation state.

All mutations happen inside :meth:`tick` or an explicit command method;
:meth:`snapshot` is read-only and is what the presentation layer draws from.
The simulation has no pygame dependency and is safe to import headless.
"""
from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple

from config import (
    DIFFICULTIES_FILE,
    DRINKS_FILE,
    EVENT_LOG_SIZE,
    FEEDBACK_MESSAGES,
    LEVELS_FILE,
    MAX_FRAME_DT,
    ROUND_DURATION_MAX,
    ROUND_DURATION_MIN,
    SECOND_CUSTOMER_CHANCE,
    SPAWN_INTERVAL_MIN,
    SPAWN_INTERVAL_SPREAD,
    WHISK_TAP_STEP,
    ZONES,
)
from difficulty_catalog import DifficultyDefinition, easiest_difficulty, load_difficulty_catalog
from drink_catalog import DrinkDefinition, load_drink_catalog
from game.customer_queue import CustomerQueue
from game.drag import DragInteraction
from game.economy import ComboEconomy, ServeResult
from game.entities import Point, Rect
from game.order_session import OrderSession, OrderSignal
from game.progress import Progress, ProgressStore
from game.state import CustomerView, DragView, OrderView, RoundMode, RoundSnapshot, RoundState
from level_catalog import LevelDefinition, load_level_catalog
from logger import get_logger

DRINKS = load_drink_catalog(DRINKS_FILE)
LEVELS = load_level_catalog(LEVELS_FILE, DRINKS)
DIFFICULTIES = load_difficulty_catalog(DIFFICULTIES_FILE)

log = get_logger("round")


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


class RoundController:
    """Level timer, spawning, mode transitions and progression."""

    def __init__(
        self,
        seed: Optional[int] = 7,
        *,
        store: Optional[ProgressStore] = None,
        drinks: Optional[Dict[str, DrinkDefinition]] = None,
        levels: Optional[Dict[int, LevelDefinition]] = None,
        difficulties: Optional[Dict[str, DifficultyDefinition]] = None,
    ) -> None:
        self.rng = random.Random(seed)
        self.drinks = drinks if drinks is not None else DRINKS
        self.levels = levels if levels is not None else LEVELS
        self.difficulties = difficulties if difficulties is not None else DIFFICULTIES
        self.store = store

        progress = store.load() if store is not None else Progress(1, easiest_difficulty(self.difficulties))
        self.unlocked_level: int = int(clamp(progress.unlocked_level, 1, self.max_level))
        self.selected_difficulty: str = (
            progress.selected_difficulty
            if progress.selected_difficulty in self.difficulties
            else easiest_difficulty(self.difficulties)
        )

        self.state = RoundState(level_id=self.next_playable_level())
        self.queue = CustomerQueue(self.rng, self.difficulty, self.level.drinks)
        self.session = OrderSession(self.drinks, Rect(*ZONES["cup"]), self.rng)
        self.economy = ComboEconomy()
        self.drag = DragInteraction()
        self.whisk_zone = Rect(*ZONES["whisk"])
        self.serve_zone = Rect(*ZONES["serve"])
        self.feedback: str = ""
        self.event_log: List[str] = []
        self.last_serve: Optional[ServeResult] = None
        self._persist()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def mode(self) -> RoundMode:
        return self.state.mode

    @property
    def difficulty(self) -> DifficultyDefinition:
        return self.difficulties[self.selected_difficulty]

    @property
    def level(self) -> LevelDefinition:
        return self.levels[self.state.level_id]

    @property
    def max_level(self) -> int:
        return max(self.levels)

    def next_playable_level(self) -> int:
        return min(self.unlocked_level, self.max_level)

    def menu_info(self) -> Tuple[str, str]:
        level = self.levels[self.next_playable_level()]
        drink_names = " + ".join(self.drinks[drink].display_name for drink in level.drinks)
        return f"Level {level.level_id}: {drink_names} - Goal ${level.goal}", self.difficulty.describe()

    # ------------------------------------------------------------------
    # Event log / persistence
    # ------------------------------------------------------------------

    def _log_event(self, message: str) -> None:
        self.event_log.append(message)
        self.event_log = self.event_log[-EVENT_LOG_SIZE:]

    def _report(self, signal: OrderSignal) -> OrderSignal:
        message = FEEDBACK_MESSAGES.get(signal.value)
        if message:
            self.feedback = message
        return signal

    def _persist(self) -> None:
        if self.store is None:
            return
        self.store.save(Progress(self.unlocked_level, self.selected_difficulty))

    # ------------------------------------------------------------------
    # Menu commands
    # ------------------------------------------------------------------

    def select_difficulty(self, key: str) -> bool:
        if self.mode in (RoundMode.PLAY, RoundMode.PAUSE):
            return False
        if key not in self.difficulties:
            return False
        self.selected_difficulty = key
        self._log_event(f"Difficulty set: {self.difficulty.label}")
        self._persist()
        return True

    def reset_progress(self) -> None:
        self.unlocked_level = 1
        if self.store is not None:
            self.store.reset()
        self._persist()
        self._log_event("Progress reset to Level 1")

    def start_level(self, level_id: int) -> int:
        """Start ``level_id`` (or the next playable level if it is locked).

        Returns the level id actually started.
        """
        if level_id not in self.levels or level_id > self.unlocked_level:
            level_id = self.next_playable_level()
        level = self.levels[level_id]
        duration = float(self.rng.randint(ROUND_DURATION_MIN, ROUND_DURATION_MAX))
        self.state.reset(level_id, level.goal, duration)

        self.queue.configure(self.difficulty, level.drinks)
        self.queue.clear()
        self.session.clear()
        self.drag.cancel()
        self.last_serve = None
        self.feedback = ""

        self.queue.enqueue()
        if self.rng.random() < SECOND_CUSTOMER_CHANCE:
            self.queue.enqueue()
        self._sync_session()

        self.state.mode = RoundMode.PLAY
        self._log_event(f"{level.name} started. Goal ${level.goal}")
        log.info("level %d started on %s (%.0fs)", level_id, self.selected_difficulty, duration)
        return level_id

    def start_next(self) -> int:
        return self.start_level(self.next_playable_level())

    def continue_after_results(self) -> Optional[int]:
        if self.mode != RoundMode.RESULTS:
            return None
        if self.state.success:
            return self.start_level(min(self.max_level, self.state.level_id + 1))
        return self.start_level(self.state.level_id)

    def return_to_menu(self) -> bool:
        if self.mode != RoundMode.RESULTS:
            return False
        self.state.mode = RoundMode.MENU
        return True

    def pause(self) -> bool:
        if self.mode != RoundMode.PLAY:
            return False
        self.state.mode = RoundMode.PAUSE
        self._log_event("Paused")
        return True

    def resume(self) -> bool:
        if self.mode != RoundMode.PAUSE:
            return False
        self.state.mode = RoundMode.PLAY
        self._log_event("Resume")
        return True

    def toggle_pause(self) -> bool:
        return self.pause() or self.resume()

    # ------------------------------------------------------------------
    # Order commands
    # ------------------------------------------------------------------

    def add_ingredient(self, ingredient_id: str, pos: Point) -> OrderSignal:
        if self.mode != RoundMode.PLAY:
            return OrderSignal.ROUND_INACTIVE
        return self._report(self.session.add_ingredient(ingredient_id, pos))

    def advance_whisk(self, amount: float = WHISK_TAP_STEP) -> OrderSignal:
        if self.mode != RoundMode.PLAY:
            return OrderSignal.ROUND_INACTIVE
        return self._report(self.session.advance_whisk(amount))

    def serve(self) -> Tuple[OrderSignal, Optional[ServeResult]]:
        if self.mode != RoundMode.PLAY:
            return OrderSignal.ROUND_INACTIVE, None
        customer = self.session.customer
        if customer is None:
            return self._report(OrderSignal.NO_ORDER), None

        signal, result = self.session.serve(self.economy, self.state, self.difficulty.tip_max)
        self._report(signal)
        if result is None:
            return signal, None

        self.queue.remove(customer)
        self.last_serve = result
        if result.perfect:
            self.feedback = FEEDBACK_MESSAGES["perfect"]
            self._log_event(f"Perfect! +${result.earned}")
        else:
            self._log_event(f"Served! +${result.earned}")
        self._sync_session()
        return signal, result

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------

    def pointer_down(self, pos: Point) -> Optional[OrderSignal]:
        if self.mode != RoundMode.PLAY:
            return None
        if self.whisk_zone.contains(pos):
            return self.advance_whisk(WHISK_TAP_STEP)
        if self.serve_zone.contains(pos):
            signal, _ = self.serve()
            return signal
        self.drag.pointer_down(pos)
        return None

    def pointer_move(self, pos: Point) -> None:
        if self.mode != RoundMode.PLAY:
            return
        self.drag.pointer_move(pos)

    def pointer_up(self) -> Optional[OrderSignal]:
        if self.mode != RoundMode.PLAY:
            return None
        signal = self.drag.pointer_up(self.session)
        if signal is None:
            return None
        return self._report(signal)

    # ------------------------------------------------------------------
    # Main tick
    # ------------------------------------------------------------------

    def _next_spawn_interval(self) -> float:
        return SPAWN_INTERVAL_MIN + self.rng.random() * SPAWN_INTERVAL_SPREAD

    def _sync_session(self) -> None:
        front = self.queue.front()
        if front is self.session.customer:
            return
        if front is None:
            self.session.clear()
        else:
            self.session.new_order(front)

    def _end_level(self) -> None:
        state = self.state
        state.time_left = 0.0
        state.success = state.earned >= state.goal
        state.mode = RoundMode.RESULTS
        self.drag.cancel()
        if state.success:
            self.unlocked_level = max(self.unlocked_level, min(self.max_level, state.level_id + 1))
            self._persist()
            self._log_event(f"{self.level.name} complete!")
        else:
            self._log_event(f"{self.level.name} failed...")
        log.info(
            "level %d finished: earned $%d of $%d (%s)",
            state.level_id,
            state.earned,
            state.goal,
            "passed" if state.success else "repeat",
        )

    def tick(self, dt: float) -> None:
        dt = clamp(dt, 0.0, MAX_FRAME_DT)
        if self.mode != RoundMode.PLAY:
            return

        state = self.state
        state.time_left -= dt
        if state.time_left <= 0:
            self._end_level()
            return

        state.spawn_timer -= dt
        if state.spawn_timer <= 0:
            self.queue.enqueue()
            state.spawn_timer = self._next_spawn_interval()

        self.queue.tick(dt)
        removed = self.queue.reap()
        if removed:
            state.customers_lost += removed
            self.feedback = FEEDBACK_MESSAGES["customer_left"]
            self._log_event("A customer left...")

        self._sync_session()
        self.drag.update()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def receipt(self) -> List[Tuple[str, str]]:
        state = self.state
        base_price = self.economy.base_price
        return [
            ("Level", str(state.level_id)),
            ("Duration", f"{round(state.duration)}s"),
            ("Served", str(state.served)),
            ("Customers who left", str(state.customers_lost)),
            (f"Base (${base_price} x {state.served})", f"${state.base_total}"),
            ("Tips", f"${state.tip_total}"),
            ("Combo Bonus", f"${state.combo_bonus_total}"),
            ("TOTAL", f"${state.earned}"),
            ("Goal", f"${state.goal}"),
            ("Best Combo", str(state.best_combo)),
            ("Perfect Serves", str(state.perfect_serves)),
        ]

    def snapshot(self) -> RoundSnapshot:
        state = self.state
        patience = self.difficulty.patience
        customers = tuple(
            CustomerView(
                customer_id=customer.customer_id,
                name=customer.name,
                drink_id=customer.drink_id,
                drink_name=self.drinks[customer.drink_id].display_name,
                patience_fraction=clamp(customer.patience_left / patience, 0.0, 1.0),
                tip=customer.tip,
                mood=customer.mood.value,
                sprite=customer.sprite,
            )
            for customer in self.queue
        )

        order: Optional[OrderView] = None
        session = self.session
        if session.customer is not None and session.drink is not None:
            order = OrderView(
                customer_name=session.customer.name,
                drink_id=session.drink.key,
                drink_name=session.drink.display_name,
                required=session.drink.ingredients,
                added=frozenset(session.added),
                whisk_progress=session.whisk_progress,
                order_line=session.order_line,
                state=session.state.value,
                ready=session.is_ready(),
                cup_image=session.drink.cup_image,
                tip=session.customer.tip,
            )

        drag: Optional[DragView] = None
        if self.drag.token is not None:
            token = self.drag.token
            drag = DragView(token.ingredient_id, token.x, token.y, token.bounce_back)

        return RoundSnapshot(
            mode=state.mode,
            level_id=state.level_id,
            level_name=self.level.name,
            goal=state.goal,
            duration=state.duration,
            time_left=state.time_left,
            earned=state.earned,
            served=state.served,
            base_total=state.base_total,
            tip_total=state.tip_total,
            combo_bonus_total=state.combo_bonus_total,
            customers_lost=state.customers_lost,
            combo=state.combo,
            best_combo=state.best_combo,
            perfect_serves=state.perfect_serves,
            difficulty_key=self.selected_difficulty,
            difficulty_label=self.difficulty.label,
            unlocked_level=self.unlocked_level,
            success=state.success,
            customers=customers,
            order=order,
            drag=drag,
            feedback=self.feedback,
        )
