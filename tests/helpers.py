from __future__ import annotations

from typing import Iterable, Optional, Sequence

from gemcascade.config import GameConfig
from gemcascade.engine import GameEngine
from gemcascade.systems.board_ops import apply_layout

SMALL_KINDS = ['a', 'b', 'c', 'd', 'e', 'f', 'g', 'h']


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedRandom:
    """RNG stand-in: ``choice`` pops scripted values first, then cycles through the sequence."""

    def __init__(self, script: Iterable[str] = ()):
        self.script = list(script)
        self.calls = 0
        self._cursor = 0

    def queue(self, *values: str) -> None:
        self.script.extend(values)

    def choice(self, seq: Sequence[str]) -> str:
        self.calls += 1
        if self.script:
            value = self.script.pop(0)
            assert value in seq, f"scripted value {value!r} not spawnable from {list(seq)}"
            return value
        value = seq[self._cursor % len(seq)]
        self._cursor += 1
        return value

    def rewind(self) -> None:
        self._cursor = 0


class ConstantRandom:
    """Always draws the first kind; no board generated from it can ever be matchless."""

    def __init__(self):
        self.calls = 0

    def choice(self, seq: Sequence[str]) -> str:
        self.calls += 1
        return seq[0]


def small_config(size: int = 4, kinds: int = 8, achievements: Optional[list] = None, **extra) -> GameConfig:
    data = {
        "grid_size": size,
        "gem_types": {name: {"rarity": "common", "value": 10} for name in SMALL_KINDS[:kinds]},
        "difficulty_levels": {"test": {"gem_types": kinds, "time_limit": 60}},
        "default_difficulty": "test",
        "achievements": achievements if achievements is not None else [],
    }
    data.update(extra)
    return GameConfig.from_mapping(data)


def make_engine(layout=None, *, config=None, rng=None, clock=None, start=True) -> GameEngine:
    engine = GameEngine(config or small_config(), rng=rng or ScriptedRandom(), clock=clock or FakeClock())
    if layout is not None:
        apply_layout(engine.world, [row.split() if isinstance(row, str) else row for row in layout])
    if start:
        engine.start()
    return engine
