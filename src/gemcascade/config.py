"""Static game configuration: gem catalog, difficulty table, score tables and achievements.

The engine treats configuration as read-only input. ``default_config`` builds the stock
catalog from :mod:`gemcascade.constants`; ``GameConfig.from_mapping`` and ``load_config``
accept externally supplied data (plain dicts or a TOML file). Invalid configuration is a
programming error and surfaces as :class:`ConfigError` when the world is created.
"""
from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from gemcascade import constants


class ConfigError(ValueError):
    """Raised when the supplied configuration cannot drive a game."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class GemKind:
    name: str
    rarity: str = "common"
    value: int = 0


@dataclass(frozen=True, slots=True)
class DifficultyLevel:
    id: str
    gem_types: int
    time_limit: int
    bonus_multiplier: float = 1.0


@dataclass(frozen=True, slots=True)
class AchievementDef:
    id: str
    name: str
    type: str
    requirement: float
    reward: int


@dataclass(frozen=True, slots=True)
class ScoreTable:
    match3: int = constants.BASE_SCORE_MATCH3
    match4: int = constants.BASE_SCORE_MATCH4
    match5: int = constants.BASE_SCORE_MATCH5
    combo_multipliers: Tuple[float, ...] = tuple(constants.COMBO_MULTIPLIERS)
    rarity_multipliers: Mapping[str, float] = field(
        default_factory=lambda: dict(constants.RARITY_MULTIPLIERS)
    )


@dataclass(frozen=True, slots=True)
class GameConfig:
    grid_size: int = constants.GRID_SIZE
    min_match_length: int = constants.MIN_MATCH_LENGTH
    gem_types: Tuple[GemKind, ...] = ()
    difficulties: Mapping[str, DifficultyLevel] = field(default_factory=dict)
    score: ScoreTable = field(default_factory=ScoreTable)
    level_thresholds: Tuple[int, ...] = tuple(constants.LEVEL_THRESHOLDS)
    achievements: Tuple[AchievementDef, ...] = ()
    default_difficulty: str = constants.DEFAULT_DIFFICULTY
    cascade_step_delay: float = constants.CASCADE_STEP_DELAY

    def kinds_for(self, difficulty: str) -> List[str]:
        """Return the spawnable gem names for a difficulty (the first K catalog entries)."""
        level = self.difficulties[difficulty]
        return [gem.name for gem in self.gem_types[: level.gem_types]]

    def rarity_of(self, gem_name: str) -> str:
        for gem in self.gem_types:
            if gem.name == gem_name:
                return gem.rarity
        raise KeyError(gem_name)

    def with_overrides(self, **changes: Any) -> "GameConfig":
        return replace(self, **changes)

    def validate(self) -> "GameConfig":
        """Raise ConfigError describing the first problem found; return self when valid."""
        if self.min_match_length < 2:
            raise ConfigError(f"min_match_length must be at least 2, got {self.min_match_length}")
        if self.grid_size < self.min_match_length:
            raise ConfigError(
                f"grid_size {self.grid_size} is smaller than min_match_length {self.min_match_length}"
            )
        if not self.gem_types:
            raise ConfigError("gem catalog is empty")
        names = [gem.name for gem in self.gem_types]
        if len(set(names)) != len(names):
            raise ConfigError(f"duplicate gem names in catalog: {names}")
        rarities = self.score.rarity_multipliers
        for gem in self.gem_types:
            if gem.rarity not in rarities:
                raise ConfigError(f"gem '{gem.name}' has unknown rarity '{gem.rarity}'")
        if not self.difficulties:
            raise ConfigError("difficulty table is empty")
        for key, level in self.difficulties.items():
            if level.gem_types < 1 or level.gem_types > len(self.gem_types):
                raise ConfigError(
                    f"difficulty '{key}' requests {level.gem_types} gem types; "
                    f"catalog holds {len(self.gem_types)}"
                )
            if level.time_limit <= 0:
                raise ConfigError(f"difficulty '{key}' has non-positive time limit {level.time_limit}")
        if self.default_difficulty not in self.difficulties:
            raise ConfigError(f"default difficulty '{self.default_difficulty}' is not defined")
        if not self.score.combo_multipliers:
            raise ConfigError("combo multiplier table is empty")
        thresholds = list(self.level_thresholds)
        if not thresholds:
            raise ConfigError("level thresholds are empty")
        if thresholds[0] != 0:
            raise ConfigError(f"level thresholds must start at 0: {thresholds}")
        if any(b <= a for a, b in zip(thresholds, thresholds[1:])):
            raise ConfigError(f"level thresholds must be strictly ascending: {thresholds}")
        seen: set[str] = set()
        for achievement in self.achievements:
            if achievement.type not in constants.ACHIEVEMENT_TYPES:
                raise ConfigError(
                    f"achievement '{achievement.id}' has unknown type '{achievement.type}'"
                )
            if not _is_number(achievement.requirement) or achievement.requirement < 0:
                raise ConfigError(
                    f"achievement '{achievement.id}' needs a non-negative numeric requirement, "
                    f"got {achievement.requirement!r}"
                )
            if not _is_number(achievement.reward) or achievement.reward < 0:
                raise ConfigError(f"achievement '{achievement.id}' has invalid reward {achievement.reward!r}")
            if achievement.id in seen:
                raise ConfigError(f"duplicate achievement id '{achievement.id}'")
            seen.add(achievement.id)
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GameConfig":
        """Build a config from plain data; keys that are absent keep their defaults."""
        base = default_config()
        try:
            gem_types = base.gem_types
            if "gem_types" in data:
                gem_types = tuple(
                    GemKind(name=name, rarity=entry.get("rarity", "common"), value=int(entry.get("value", 0)))
                    for name, entry in data["gem_types"].items()
                )
            difficulties = base.difficulties
            if "difficulty_levels" in data:
                difficulties = {
                    key: DifficultyLevel(
                        id=key,
                        gem_types=int(entry["gem_types"]),
                        time_limit=int(entry["time_limit"]),
                        bonus_multiplier=float(entry.get("bonus_multiplier", 1.0)),
                    )
                    for key, entry in data["difficulty_levels"].items()
                }
            score = base.score
            if "score" in data:
                raw = data["score"]
                score = ScoreTable(
                    match3=int(raw.get("match3", score.match3)),
                    match4=int(raw.get("match4", score.match4)),
                    match5=int(raw.get("match5", score.match5)),
                    combo_multipliers=tuple(float(v) for v in raw.get("combo_multipliers", score.combo_multipliers)),
                    rarity_multipliers={
                        str(k): float(v)
                        for k, v in raw.get("rarity_multipliers", score.rarity_multipliers).items()
                    },
                )
            achievements = base.achievements
            if "achievements" in data:
                achievements = tuple(
                    AchievementDef(
                        id=entry["id"],
                        name=entry.get("name", entry["id"]),
                        type=entry["type"],
                        requirement=float(entry["requirement"]),
                        reward=int(entry.get("reward", 0)),
                    )
                    for entry in data["achievements"]
                )
            config = cls(
                grid_size=int(data.get("grid_size", base.grid_size)),
                min_match_length=int(data.get("min_match_length", base.min_match_length)),
                gem_types=gem_types,
                difficulties=difficulties,
                score=score,
                level_thresholds=tuple(int(v) for v in data.get("level_thresholds", base.level_thresholds)),
                achievements=achievements,
                default_difficulty=str(data.get("default_difficulty", base.default_difficulty)),
                cascade_step_delay=float(data.get("cascade_step_delay", base.cascade_step_delay)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ConfigError(f"malformed configuration: {exc!r}") from exc
        return config.validate()


def default_config() -> GameConfig:
    gem_types = tuple(
        GemKind(name=name, rarity=rarity, value=value)
        for name, (rarity, value) in constants.GEM_TYPES.items()
    )
    difficulties: Dict[str, DifficultyLevel] = {
        key: DifficultyLevel(id=key, gem_types=count, time_limit=limit, bonus_multiplier=bonus)
        for key, (count, limit, bonus) in constants.DIFFICULTY_LEVELS.items()
    }
    achievements = tuple(
        AchievementDef(id=aid, name=name, type=kind, requirement=req, reward=reward)
        for aid, name, kind, req, reward in constants.ACHIEVEMENTS
    )
    return GameConfig(gem_types=gem_types, difficulties=difficulties, achievements=achievements)


def load_config(path: str | Path) -> GameConfig:
    """Read a TOML file and build a validated GameConfig from it."""
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc
    return GameConfig.from_mapping(data)
