"""Level thresholds and achievements.

The module-level functions operate on a bare GameState so they can be reused by tools and
tests; ProgressionSystem wires them to the event bus. Achievements are evaluated in
declaration order and their rewards are added to the score immediately, so a later
achievement in the same pass sees the updated score. ``time_limit`` achievements measure
the whole session and are only checked once the game has ended.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

from esper import World

from gemcascade.config import AchievementDef
from gemcascade.components.game_state import GameState
from gemcascade.events.bus import (
    EventBus,
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_GAME_ENDED,
    EVENT_LEVEL_UP,
    EVENT_RESOLUTION_STEP_SCORED,
    EVENT_SCORE_CHANGED,
)
from gemcascade.utils.game_state import get_game_state

logger = logging.getLogger(__name__)


def check_level_up(state: GameState, thresholds: Sequence[int]) -> List[int]:
    """Advance state.level past every threshold the score has reached; return the new levels."""
    reached: List[int] = []
    while state.level < len(thresholds) and state.score >= thresholds[state.level]:
        state.level += 1
        reached.append(state.level)
    return reached


def achievement_earned(
    achievement: AchievementDef, state: GameState, now: float, *, game_over: bool = False
) -> bool:
    kind = achievement.type
    if kind == "gems_collected":
        return state.gems >= achievement.requirement
    if kind == "matches":
        return state.matches >= achievement.requirement
    if kind == "combo":
        return state.combo >= achievement.requirement
    if kind == "time_limit":
        # Session length is only known once the game has ended.
        if not game_over or state.game_start_time is None:
            return False
        return (now - state.game_start_time) <= achievement.requirement
    if kind == "perfect_level":
        return state.level > 1 and state.invalid_moves == 0
    return False


def check_achievements(
    state: GameState,
    achievements: Sequence[AchievementDef],
    now: float,
    *,
    game_over: bool = False,
) -> List[AchievementDef]:
    """Unlock every achievement whose predicate holds; each id is awarded at most once."""
    unlocked: List[AchievementDef] = []
    for achievement in achievements:
        if achievement.id in state.achievements:
            continue
        if not achievement_earned(achievement, state, now, game_over=game_over):
            continue
        state.achievements.append(achievement.id)
        state.score += achievement.reward
        unlocked.append(achievement)
    return unlocked


class ProgressionSystem:
    """Applies level-ups and achievements after each scored cascade step and at game end."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        level_thresholds: Optional[Sequence[int]] = None,
        achievements: Optional[Sequence[AchievementDef]] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        config = getattr(world, "config", None)
        if level_thresholds is None:
            level_thresholds = config.level_thresholds if config is not None else [0]
        if achievements is None:
            achievements = config.achievements if config is not None else ()
        self.level_thresholds = list(level_thresholds)
        self.achievements = list(achievements)
        self.clock = clock or getattr(world, "clock", None) or time.monotonic
        self.event_bus.subscribe(EVENT_RESOLUTION_STEP_SCORED, self._on_step_scored)
        self.event_bus.subscribe(EVENT_GAME_ENDED, self._on_game_ended)

    def _on_step_scored(self, sender, **payload) -> None:
        self.update()

    def _on_game_ended(self, sender, **payload) -> None:
        self.evaluate_achievements(game_over=True)

    def update(self) -> None:
        self.apply_level_ups()
        self.evaluate_achievements()

    def apply_level_ups(self) -> List[int]:
        state = get_game_state(self.world)
        previous = state.level
        reached = check_level_up(state, self.level_thresholds)
        for level in reached:
            logger.info("Level up: %d -> %d at score %d", previous, level, state.score)
            self.event_bus.emit(EVENT_LEVEL_UP, previous_level=previous, level=level, score=state.score)
            previous = level
        return reached

    def evaluate_achievements(self, game_over: bool = False) -> List[str]:
        state = get_game_state(self.world)
        unlocked = check_achievements(state, self.achievements, self.clock(), game_over=game_over)
        for achievement in unlocked:
            logger.info("Achievement unlocked: %s (+%d)", achievement.name, achievement.reward)
            self.event_bus.emit(
                EVENT_ACHIEVEMENT_UNLOCKED,
                achievement_id=achievement.id,
                name=achievement.name,
                reward=achievement.reward,
            )
            self.event_bus.emit(
                EVENT_SCORE_CHANGED, score=state.score, delta=achievement.reward, reason="achievement"
            )
        if unlocked:
            # Rewards can push the score over the next threshold.
            self.apply_level_ups()
        return [achievement.id for achievement in unlocked]
