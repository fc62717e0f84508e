"""Game state resource describing score, progression and lifecycle flags."""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple


class GamePhase(Enum):
    """Lifecycle phase derived from the running/paused/ended flags."""
    READY = auto()
    RUNNING = auto()
    PAUSED = auto()
    ENDED = auto()


@dataclass
class GameState:
    """Singleton component owned by the game-state entity.

    Replaced wholesale when the game is reset.
    """
    difficulty: str
    time_remaining: int
    score: int = 0
    level: int = 1
    gems: int = 0
    matches: int = 0
    combo: int = 0
    is_running: bool = False
    is_paused: bool = False
    has_ended: bool = False
    selected: Optional[Tuple[int, int]] = None
    achievements: List[str] = field(default_factory=list)
    invalid_moves: int = 0
    game_start_time: Optional[float] = None
    last_move_time: Optional[float] = None

    @property
    def phase(self) -> GamePhase:
        if self.has_ended:
            return GamePhase.ENDED
        if not self.is_running:
            return GamePhase.READY
        return GamePhase.PAUSED if self.is_paused else GamePhase.RUNNING

    @property
    def accepts_input(self) -> bool:
        return self.is_running and not self.is_paused
