import random
import time
from typing import Callable, List, Optional, Tuple

from esper import World

from gemcascade.components.active_switch import ActiveSwitch
from gemcascade.components.board import Board
from gemcascade.components.board_position import BoardPosition
from gemcascade.components.tile import TileType
from gemcascade.events.bus import (
    EventBus,
    EVENT_BOARD_GENERATED,
    EVENT_GAME_RESET,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_FINALIZE,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from gemcascade.systems.board_ops import (
    apply_layout,
    get_tile_registry,
    swap_tile_types,
)
from gemcascade.systems.grid_generator import generate_grid_report
from gemcascade.utils.game_state import get_game_state, get_or_create_cascade_state

Position = Tuple[int, int]


class BoardSystem:
    """Owns the tile entities and the two-click selection protocol.

    A first click records the pending selection. A second click asks MatchSystem whether
    the pair is a legal swap; a legal swap is committed here and handed to
    MatchResolutionSystem via EVENT_TILE_SWAP_FINALIZE. A rejected pair leaves the board
    alone and moves the pending selection to the second click.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        size: int = 8,
        *,
        min_match_length: int = 3,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.random = rng or getattr(world, "random", None) or random.Random()
        self.clock = clock or getattr(world, "clock", None) or time.monotonic
        # Create a single board entity with Board component
        self.board_entity = self.world.create_entity()
        self.world.add_component(self.board_entity, Board(size=size, min_match_length=min_match_length))
        self._swap_committed = False
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_TILE_SWAP_VALID, self.on_swap_valid)
        self.event_bus.subscribe(EVENT_TILE_SWAP_INVALID, self.on_swap_invalid)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_game_reset)
        self._init_board()

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    def _init_board(self):
        board = self.board
        for r in range(board.rows):
            for c in range(board.cols):
                self.world.create_entity(BoardPosition(row=r, col=c), TileType(type_name=""), ActiveSwitch(active=False))
        self.regenerate()

    def regenerate(self) -> List[List[str]]:
        """Replace every tile with a freshly generated matchless layout."""
        board = self.board
        kinds = get_tile_registry(self.world).spawnable_types()
        report = generate_grid_report(
            board.size, kinds, self.random, min_match_length=board.min_match_length
        )
        apply_layout(self.world, report.layout)
        self.event_bus.emit(
            EVENT_BOARD_GENERATED,
            size=board.size,
            kinds=kinds,
            iterations=report.iterations,
            clean=report.clean,
        )
        return report.layout

    def on_game_reset(self, sender, **kwargs):
        self.regenerate()

    # ------------------------------------------------------------------
    # Selection protocol
    # ------------------------------------------------------------------

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.select(row, col)

    def select(self, row: int, col: int) -> bool:
        """Two-phase click handling; True for an accepted selection or a committed swap."""
        state = get_game_state(self.world)
        if not state.accepts_input:
            return False
        if not self.board.contains(row, col):
            return False
        if state.selected is None:
            state.selected = (row, col)
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
            return True
        src = state.selected
        if self.attempt_swap(src, (row, col)):
            return True
        # Rejected pair: the second click becomes the pending selection.
        state.selected = (row, col)
        self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
        return False

    def deselect(self, reason: str = "cancel") -> bool:
        state = get_game_state(self.world)
        prev = state.selected
        if prev is None:
            return False
        state.selected = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])
        return True

    def attempt_swap(self, src: Position, dst: Position) -> bool:
        """Validate and, when legal, commit and resolve a swap. True iff the board changed."""
        state = get_game_state(self.world)
        if not state.accepts_input:
            return False
        if get_or_create_cascade_state(self.world).cascade_active:
            return False
        board = self.board
        if not (board.contains(*src) and board.contains(*dst)):
            return False
        self._swap_committed = False
        self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=dst)
        return self._swap_committed

    def on_swap_valid(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        if not swap_tile_types(self.world, src, dst):
            return
        state = get_game_state(self.world)
        state.selected = None
        state.last_move_time = self.clock()
        self._swap_committed = True
        self.event_bus.emit(EVENT_TILE_SWAP_FINALIZE, src=src, dst=dst)

    def on_swap_invalid(self, sender, **kwargs):
        get_game_state(self.world).invalid_moves += 1
