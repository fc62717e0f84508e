import sys
from pathlib import Path

import numpy as np

SRC_PATH = Path(__file__).parent / "src"
if SRC_PATH.exists() and str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from gemcascade.config import default_config  # noqa: E402
from gemcascade.systems.scoring import apply_combo, calculate_match_score  # noqa: E402


def match_score_curves(config=None, max_length=8):
    """Score of a single match per run length (3..max_length), one row per rarity tier."""
    config = config or default_config()
    lengths = np.arange(config.min_match_length, max_length + 1)
    rarities = list(config.score.rarity_multipliers)
    curves = np.array(
        [[calculate_match_score(int(n), rarity, config.score) for n in lengths] for rarity in rarities]
    )
    return lengths, rarities, curves


def combo_curve(base=30, config=None, max_combo=10):
    """Points a base-score step earns at each combo depth."""
    config = config or default_config()
    combos = np.arange(1, max_combo + 1)
    points = np.array([apply_combo(base, int(c), config.score.combo_multipliers) for c in combos])
    return combos, points


def main():
    import matplotlib.pyplot as plt

    config = default_config()
    lengths, rarities, curves = match_score_curves(config)
    combos, points = combo_curve(config=config)

    fig, (left, right) = plt.subplots(1, 2, figsize=(11, 4))
    for rarity, curve in zip(rarities, curves):
        left.plot(lengths, curve, marker="o", label=rarity)
    left.axvline(5, color="gray", linestyle="--", label="Linear extrapolation starts")
    left.set_xlabel("Match length")
    left.set_ylabel("Points")
    left.set_title("Single match score by rarity")
    left.legend()
    left.grid(True)

    right.step(combos, points, where="mid", label="base 30")
    right.axhline(points[-1], color="gray", linestyle=":", label="Combo table saturates")
    right.set_xlabel("Combo")
    right.set_ylabel("Points")
    right.set_title("Combo multiplier applied to a 3-match")
    right.legend()
    right.grid(True)
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
