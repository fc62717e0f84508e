"""Headless bots that drive a GameEngine through legal swaps.

Used by ``main.py`` for demo sessions and by the test-suite for end-to-end games.
"""
from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from gemcascade.engine import GameEngine
from gemcascade.systems.board_ops import active_tile_type_map, find_matches_in_grid, get_tile_registry
from gemcascade.systems.scoring import calculate_match_score
from gemcascade.utils.snapshot import GameSnapshot

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Swap = Tuple[Position, Position]


class AutoplayAgent(ABC):
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.random = rng or random.Random()

    def choose_swap(self, engine: GameEngine) -> Optional[Swap]:
        candidates = engine.find_valid_swaps()
        if not candidates:
            return None
        return self._pick(engine, candidates)

    @abstractmethod
    def _pick(self, engine: GameEngine, candidates: List[Swap]) -> Swap:
        ...


class RandomAgent(AutoplayAgent):
    """Plays a uniformly random legal swap."""

    def _pick(self, engine: GameEngine, candidates: List[Swap]) -> Swap:
        return self.random.choice(candidates)


class GreedyAgent(AutoplayAgent):
    """Plays the legal swap whose first resolution step scores the most; ties break randomly."""

    def _pick(self, engine: GameEngine, candidates: List[Swap]) -> Swap:
        world = engine.world
        types = active_tile_type_map(world)
        registry = get_tile_registry(world)
        size = engine.config.grid_size
        best: List[Swap] = []
        best_score = -1
        for src, dst in candidates:
            swapped: Dict[Position, str] = types.copy()
            swapped[src], swapped[dst] = swapped[dst], swapped[src]
            score = 0
            for match in find_matches_in_grid(swapped, size, size, engine.config.min_match_length):
                rarity = registry.rarity_for(swapped[match[0]])
                score += calculate_match_score(len(match), rarity, engine.config.score)
            if score > best_score:
                best, best_score = [(src, dst)], score
            elif score == best_score:
                best.append((src, dst))
        return self.random.choice(best)


@dataclass(slots=True)
class SessionResult:
    moves: int
    snapshot: GameSnapshot
    stalled: bool


def play_game(
    engine: GameEngine,
    agent: AutoplayAgent,
    *,
    max_moves: int = 200,
    seconds_per_move: float = 1.0,
) -> SessionResult:
    """Start the game if needed and play until time runs out, no move remains or max_moves."""
    if not engine.state.is_running:
        engine.start()
    moves = 0
    stalled = False
    while engine.state.is_running and moves < max_moves:
        swap = agent.choose_swap(engine)
        if swap is None:
            logger.info("No legal swap left after %d moves", moves)
            stalled = True
            engine.end()
            break
        if engine.attempt_swap(*swap):
            moves += 1
        engine.tick(seconds_per_move)
    return SessionResult(moves=moves, snapshot=engine.snapshot(), stalled=stalled)
