import logging
import random
from typing import List, Optional

from esper import World

from gemcascade.config import ScoreTable
from gemcascade.constants import CASCADE_MAX_DEPTH
from gemcascade.events.bus import (
    EventBus,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_RESOLUTION_STEP_SCORED,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_SWAP_FINALIZE,
)
from gemcascade.systems.board_ops import (
    Match,
    active_tile_type_map,
    apply_gravity_moves,
    clear_tiles,
    compute_gravity_moves,
    find_all_matches,
    get_tile_registry,
    refill_inactive_tiles,
)
from gemcascade.systems.scoring import apply_combo, calculate_match_score
from gemcascade.utils.game_state import get_game_state, get_or_create_cascade_state
from gemcascade.utils.snapshot import take_snapshot

logger = logging.getLogger(__name__)


class MatchResolutionSystem:
    """Runs the clear -> gravity -> refill loop after a committed swap until the board is stable.

    Every iteration is resolved synchronously. Renderers that want to animate the chain
    listen for EVENT_CASCADE_STEP, which carries a snapshot of the board after the step.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        score_table: Optional[ScoreTable] = None,
        rng: Optional[random.Random] = None,
        max_depth: int = CASCADE_MAX_DEPTH,
    ):
        self.world = world
        self.event_bus = event_bus
        config = getattr(world, "config", None)
        self.score_table = score_table or (config.score if config is not None else ScoreTable())
        self.random = rng or getattr(world, "random", None) or random.Random()
        self.max_depth = max_depth
        self.event_bus.subscribe(EVENT_TILE_SWAP_FINALIZE, self.on_swap_finalize)

    def on_swap_finalize(self, sender, **kwargs):
        self.resolve(reason="swap")

    def resolve(self, reason: str = "swap") -> int:
        """Resolve matches to a fixpoint; returns the number of steps that cleared gems."""
        cascade = get_or_create_cascade_state(self.world)
        if cascade.cascade_active:
            return 0
        cascade.cascade_active = True
        cascade.cascade_depth = 0
        total_delta = 0
        try:
            while True:
                matches = find_all_matches(self.world)
                if not matches:
                    get_game_state(self.world).combo = 0
                    break
                if cascade.cascade_depth >= self.max_depth:
                    logger.warning(
                        "Cascade stopped after %d steps with %d matches still on the board",
                        cascade.cascade_depth, len(matches),
                    )
                    break
                cascade.cascade_depth += 1
                total_delta += self._resolve_step(matches, cascade.cascade_depth, reason)
        finally:
            cascade.cascade_active = False
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=cascade.cascade_depth, score_delta=total_delta)
        return cascade.cascade_depth

    def _resolve_step(self, matches: List[Match], depth: int, reason: str) -> int:
        state = get_game_state(self.world)
        registry = get_tile_registry(self.world)
        types = active_tile_type_map(self.world)

        step_score = 0
        gem_count = 0
        for match in matches:
            # Every member shares the first member's kind by construction.
            rarity = registry.rarity_for(types[match[0]])
            step_score += calculate_match_score(len(match), rarity, self.score_table)
            gem_count += len(match)

        flat_positions = sorted({pos for group in matches for pos in group})
        self.event_bus.emit(
            EVENT_MATCH_FOUND, matches=matches, positions=flat_positions, depth=depth, reason=reason
        )
        typed = clear_tiles(self.world, flat_positions)

        state.combo += 1
        delta = apply_combo(step_score, state.combo, self.score_table.combo_multipliers)
        state.score += delta
        state.gems += gem_count
        state.matches += len(matches)
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=flat_positions, types=typed)

        moves, cascades = compute_gravity_moves(self.world)
        if moves:
            apply_gravity_moves(self.world, moves)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves, cascades=cascades)
        new_tiles = refill_inactive_tiles(self.world, self.random)
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)

        logger.debug(
            "Cascade step %d cleared %d gems in %d matches for %d points (combo %d)",
            depth, gem_count, len(matches), delta, state.combo,
        )
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=delta, reason="cascade")
        # Level-ups and achievements land before the step snapshot is taken.
        self.event_bus.emit(EVENT_RESOLUTION_STEP_SCORED, depth=depth, score_delta=delta)
        self.event_bus.emit(
            EVENT_CASCADE_STEP,
            depth=depth,
            positions=flat_positions,
            score_delta=delta,
            snapshot=take_snapshot(self.world),
        )
        return delta
