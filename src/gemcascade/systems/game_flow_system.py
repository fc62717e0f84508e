"""High-level coordinator for the game lifecycle: start, pause, end, reset and difficulty."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from esper import World

from gemcascade.components.game_state import GameState
from gemcascade.config import GameConfig
from gemcascade.events.bus import (
    EVENT_DIFFICULTY_CHANGED,
    EVENT_GAME_ENDED,
    EVENT_GAME_PAUSED,
    EVENT_GAME_RESET,
    EVENT_GAME_RESUMED,
    EVENT_GAME_STARTED,
    EVENT_TIME_EXPIRED,
    EventBus,
)
from gemcascade.systems.board_ops import set_spawnable_tile_types
from gemcascade.utils.game_state import get_game_state, get_or_create_cascade_state, replace_game_state

logger = logging.getLogger(__name__)


def new_game_state(config: GameConfig, difficulty: Optional[str] = None) -> GameState:
    key = difficulty if difficulty in config.difficulties else config.default_difficulty
    return GameState(difficulty=key, time_remaining=config.difficulties[key].time_limit)


class GameFlowSystem:
    """Owns the running/paused/ended flags and the difficulty selection."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        config: GameConfig,
        *,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.config = config
        self.clock = clock or getattr(world, "clock", None) or time.monotonic
        self.event_bus.subscribe(EVENT_TIME_EXPIRED, self._on_time_expired)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_time_expired(self, sender, **payload) -> None:
        self.end_game(reason="timeout")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_game(self) -> bool:
        state = get_game_state(self.world)
        if state.is_running or state.has_ended:
            return False
        state.is_running = True
        state.is_paused = False
        state.game_start_time = self.clock()
        logger.info("Game started on %s with %ds on the clock", state.difficulty, state.time_remaining)
        self.event_bus.emit(EVENT_GAME_STARTED, difficulty=state.difficulty, time_remaining=state.time_remaining)
        return True

    def toggle_pause(self) -> bool:
        """Flip the paused flag of a running game; returns the resulting paused state."""
        state = get_game_state(self.world)
        if not state.is_running:
            return state.is_paused
        state.is_paused = not state.is_paused
        logger.info("Game %s", "paused" if state.is_paused else "resumed")
        self.event_bus.emit(EVENT_GAME_PAUSED if state.is_paused else EVENT_GAME_RESUMED)
        return state.is_paused

    def end_game(self, reason: str = "ended") -> bool:
        state = get_game_state(self.world)
        if not state.is_running:
            return False
        state.is_running = False
        state.is_paused = False
        state.has_ended = True
        state.selected = None
        self.event_bus.emit(EVENT_GAME_ENDED, reason=reason)
        logger.info("Game ended (%s) with score %d", reason, state.score)
        return True

    def reset_game(self, difficulty: Optional[str] = None) -> GameState:
        """Discard the current GameState and start over in the READY phase."""
        previous = get_game_state(self.world)
        target = difficulty if difficulty is not None else previous.difficulty
        state = replace_game_state(self.world, new_game_state(self.config, target))
        cascade = get_or_create_cascade_state(self.world)
        cascade.cascade_depth = 0
        set_spawnable_tile_types(self.world, self.config.kinds_for(state.difficulty))
        self.event_bus.emit(EVENT_GAME_RESET, difficulty=state.difficulty)
        return state

    def set_difficulty(self, difficulty: str) -> bool:
        """Switch difficulty and refill the time budget. Unknown ids change nothing."""
        level = self.config.difficulties.get(difficulty)
        if level is None:
            logger.debug("Ignoring unknown difficulty %r", difficulty)
            return False
        state = get_game_state(self.world)
        previous = state.difficulty
        state.difficulty = difficulty
        state.time_remaining = level.time_limit
        set_spawnable_tile_types(self.world, self.config.kinds_for(difficulty))
        self.event_bus.emit(
            EVENT_DIFFICULTY_CHANGED,
            previous=previous,
            difficulty=difficulty,
            time_remaining=state.time_remaining,
        )
        return True
