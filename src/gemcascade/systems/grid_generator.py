"""Initial board generation.

``generate_grid`` fills a board uniformly at random and re-rolls matched cells until the
layout is matchless. Termination is not guaranteed for every catalog size (two kinds on a
large board rarely settles), so the loop stops after ``max_iterations`` rounds, logs a
warning and hands back the best-effort layout.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Sequence

from gemcascade.constants import GENERATION_MAX_ITERATIONS
from gemcascade.systems.board_ops import Position, find_matches_in_grid

logger = logging.getLogger(__name__)

Layout = List[List[str]]


@dataclass(slots=True)
class GenerationReport:
    layout: Layout
    iterations: int
    clean: bool


def generate_grid(
    size: int,
    kinds: Sequence[str],
    rng: random.Random | None = None,
    *,
    min_match_length: int = 3,
    max_iterations: int = GENERATION_MAX_ITERATIONS,
) -> Layout:
    """Return a size x size row-major layout with no run of min_match_length equal gems."""
    return generate_grid_report(
        size, kinds, rng, min_match_length=min_match_length, max_iterations=max_iterations
    ).layout


def generate_grid_report(
    size: int,
    kinds: Sequence[str],
    rng: random.Random | None = None,
    *,
    min_match_length: int = 3,
    max_iterations: int = GENERATION_MAX_ITERATIONS,
) -> GenerationReport:
    if not kinds:
        raise ValueError("generate_grid needs at least one gem kind")
    rng = rng or random.Random()
    choices = list(kinds)
    layout: Layout = [[rng.choice(choices) for _ in range(size)] for _ in range(size)]

    iterations = 0
    while iterations < max_iterations:
        types: Dict[Position, str] = {
            (r, c): layout[r][c] for r in range(size) for c in range(size)
        }
        matches = find_matches_in_grid(types, size, size, min_match_length)
        if not matches:
            return GenerationReport(layout=layout, iterations=iterations, clean=True)
        # Each matched cell is redrawn independently; overlapping cells are redrawn once per match.
        for match in matches:
            for row, col in match:
                layout[row][col] = rng.choice(choices)
        iterations += 1

    types = {(r, c): layout[r][c] for r in range(size) for c in range(size)}
    clean = not find_matches_in_grid(types, size, size, min_match_length)
    if not clean:
        logger.warning(
            "Board generation hit the %d iteration cap with %d kinds on a %dx%d grid; "
            "returning a board that still contains matches",
            max_iterations, len(choices), size, size,
        )
    return GenerationReport(layout=layout, iterations=iterations, clean=clean)
