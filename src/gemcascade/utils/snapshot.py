from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from esper import World

from gemcascade.systems.board_ops import board_layout
from gemcascade.utils.game_state import get_game_state

BoardRows = Tuple[Tuple[Optional[str], ...], ...]


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """Read-only view of one game handed to renderers and persistence."""

    board: BoardRows
    score: int
    level: int
    gems: int
    matches: int
    combo: int
    time_remaining: int
    is_running: bool
    is_paused: bool
    has_ended: bool
    difficulty: str
    selected: Optional[Tuple[int, int]]
    achievements: Tuple[str, ...]
    invalid_moves: int
    game_start_time: Optional[float]
    last_move_time: Optional[float]

    def stats(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "gems": self.gems,
            "combo": self.combo,
            "time_remaining": self.time_remaining,
            "is_running": self.is_running,
            "is_paused": self.is_paused,
            "difficulty": self.difficulty,
            "achievements": len(self.achievements),
        }


def take_snapshot(world: World) -> GameSnapshot:
    state = get_game_state(world)
    board = tuple(tuple(row) for row in board_layout(world))
    return GameSnapshot(
        board=board,
        score=state.score,
        level=state.level,
        gems=state.gems,
        matches=state.matches,
        combo=state.combo,
        time_remaining=state.time_remaining,
        is_running=state.is_running,
        is_paused=state.is_paused,
        has_ended=state.has_ended,
        difficulty=state.difficulty,
        selected=state.selected,
        achievements=tuple(state.achievements),
        invalid_moves=state.invalid_moves,
        game_start_time=state.game_start_time,
        last_move_time=state.last_move_time,
    )
