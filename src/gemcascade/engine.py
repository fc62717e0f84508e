"""Public entry point: one GameEngine owns one game.

The engine wires the ECS world, the event bus and every system, then exposes the
operations a host (UI, bot, test) drives. Every mutating call runs under a single
re-entrant lock so a multi-threaded host can call ``tick`` from a timer thread while
input arrives from another.
"""
from __future__ import annotations

import random
import threading
import time
from typing import Any, Callable, List, Optional, Tuple

from gemcascade.components.game_state import GameState
from gemcascade.config import GameConfig, default_config
from gemcascade.events.bus import EVENT_TICK, EventBus
from gemcascade.systems.board import BoardSystem
from gemcascade.systems.board_ops import find_valid_swaps
from gemcascade.systems.game_flow_system import GameFlowSystem
from gemcascade.systems.match import MatchSystem
from gemcascade.systems.match_resolution import MatchResolutionSystem
from gemcascade.systems.progression_system import ProgressionSystem
from gemcascade.systems.timer_system import TimerSystem
from gemcascade.utils.game_state import get_game_state
from gemcascade.utils.snapshot import GameSnapshot, take_snapshot
from gemcascade.world import create_world

Position = Tuple[int, int]


def _as_position(value: Any) -> Optional[Position]:
    try:
        row, col = value
    except (TypeError, ValueError):
        return None
    if not isinstance(row, int) or not isinstance(col, int):
        return None
    return row, col


class GameEngine:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        *,
        difficulty: Optional[str] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.config = (config or default_config()).validate()
        self.event_bus = event_bus or EventBus()
        self.random = rng or random.Random(seed)
        self.clock = clock or time.monotonic
        self._lock = threading.RLock()
        self.world = create_world(
            self.event_bus, self.config, difficulty=difficulty, rng=self.random, clock=self.clock
        )
        self.match_system = MatchSystem(self.world, self.event_bus)
        self.board_system = BoardSystem(
            self.world,
            self.event_bus,
            self.config.grid_size,
            min_match_length=self.config.min_match_length,
            rng=self.random,
            clock=self.clock,
        )
        self.resolution_system = MatchResolutionSystem(
            self.world, self.event_bus, score_table=self.config.score, rng=self.random
        )
        self.progression_system = ProgressionSystem(
            self.world,
            self.event_bus,
            level_thresholds=self.config.level_thresholds,
            achievements=self.config.achievements,
            clock=self.clock,
        )
        self.timer_system = TimerSystem(self.world, self.event_bus)
        self.flow_system = GameFlowSystem(self.world, self.event_bus, self.config, clock=self.clock)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        with self._lock:
            return self.flow_system.start_game()

    def pause(self) -> bool:
        """Toggle pause; returns True when the game is now paused."""
        with self._lock:
            return self.flow_system.toggle_pause()

    def end(self) -> bool:
        with self._lock:
            return self.flow_system.end_game()

    def reset(self, difficulty: Optional[str] = None) -> GameSnapshot:
        with self._lock:
            self.flow_system.reset_game(difficulty)
            return take_snapshot(self.world)

    def set_difficulty(self, difficulty: str) -> bool:
        with self._lock:
            return self.flow_system.set_difficulty(difficulty)

    def tick(self, dt: float) -> None:
        """Advance the countdown by dt seconds of wall time."""
        with self._lock:
            self.event_bus.emit(EVENT_TICK, dt=dt)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def select(self, row: int, col: int) -> bool:
        position = _as_position((row, col))
        if position is None:
            return False
        with self._lock:
            return self.board_system.select(*position)

    def deselect(self) -> bool:
        with self._lock:
            return self.board_system.deselect()

    def attempt_swap(self, src: Position, dst: Position) -> bool:
        a = _as_position(src)
        b = _as_position(dst)
        if a is None or b is None:
            return False
        with self._lock:
            return self.board_system.attempt_swap(a, b)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return get_game_state(self.world)

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return take_snapshot(self.world)

    def get_stats(self) -> dict:
        return self.snapshot().stats()

    def find_valid_swaps(self) -> List[Tuple[Position, Position]]:
        with self._lock:
            return find_valid_swaps(self.world)

    def subscribe(self, name: str, fn) -> None:
        self.event_bus.subscribe(name, fn)
