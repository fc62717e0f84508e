from typing import Tuple
from esper import World

from gemcascade.events.bus import EventBus, EVENT_TILE_SWAP_REQUEST, EVENT_TILE_SWAP_VALID, EVENT_TILE_SWAP_INVALID
from gemcascade.systems.board_ops import (
    find_all_matches,
    get_board,
    is_adjacent,
    swap_tile_types,
)


class MatchSystem:
    """Decides whether a requested swap is legal."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        if not is_adjacent(src, dst):
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason="not_adjacent")
            return
        if self.creates_match(src, dst):
            self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
        else:
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason="no_match")

    def creates_match(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """Swap, scan the whole board, swap back. The board is left as it was found."""
        board = get_board(self.world)
        if board is None or not (board.contains(*a) and board.contains(*b)):
            return False
        if not swap_tile_types(self.world, a, b):
            return False
        try:
            return bool(find_all_matches(self.world))
        finally:
            swap_tile_types(self.world, a, b)
