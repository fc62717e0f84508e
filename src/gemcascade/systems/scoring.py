"""Score arithmetic shared by the resolution loop and the tuning tools."""
from __future__ import annotations

import math
from typing import Sequence

from gemcascade.config import ScoreTable


def base_score_for_length(length: int, table: ScoreTable) -> int:
    """Flat base for runs of 3/4/5; longer runs extrapolate linearly from the 5-run base."""
    if length <= 3:
        return table.match3
    if length == 4:
        return table.match4
    if length == 5:
        return table.match5
    return table.match5 * (length - 4)


def calculate_match_score(length: int, rarity: str, table: ScoreTable) -> int:
    multiplier = table.rarity_multipliers.get(rarity, 1.0)
    return math.floor(base_score_for_length(length, table) * multiplier)


def combo_multiplier(combo: int, multipliers: Sequence[float]) -> float:
    """Multiplier for a 1-indexed combo count; saturates at the last table entry."""
    if not multipliers:
        return 1.0
    index = min(max(combo - 1, 0), len(multipliers) - 1)
    return multipliers[index]


def apply_combo(total: int, combo: int, multipliers: Sequence[float]) -> int:
    return math.floor(total * combo_multiplier(combo, multipliers))


def level_for_score(score: int, thresholds: Sequence[int]) -> int:
    """Largest 1-indexed level whose threshold is at or below score."""
    level = 1
    while level < len(thresholds) and score >= thresholds[level]:
        level += 1
    return level
