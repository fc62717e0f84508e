from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from esper import World

from gemcascade.components.active_switch import ActiveSwitch
from gemcascade.components.board import Board
from gemcascade.components.board_position import BoardPosition
from gemcascade.components.tile import TileType
from gemcascade.components.tile_type_registry import TileTypeRegistry
from gemcascade.components.tile_types import TileTypes

Position = Tuple[int, int]
Match = List[Position]
TypeEntry = Tuple[int, int, str]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    type_name: str


def get_tile_registry(world: World) -> TileTypes:
    for entity, _ in world.get_component(TileTypeRegistry):
        return world.component_for_entity(entity, TileTypes)
    raise RuntimeError("TileTypes definitions not found")


def get_board(world: World) -> Board | None:
    for _, board in world.get_component(Board):
        return board
    return None


def board_dimensions(world: World) -> Tuple[int, int] | None:
    board = get_board(world)
    if board is None:
        return None
    return board.rows, board.cols


def set_spawnable_tile_types(world: World, type_names: Iterable[str]) -> List[str]:
    registry = get_tile_registry(world)
    registry.set_spawnable(type_names)
    return registry.spawnable_types()


def position_index(world: World) -> Dict[Position, int]:
    return {(pos.row, pos.col): entity for entity, pos in world.get_component(BoardPosition)}


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for entity, position in world.get_component(BoardPosition):
        if position.row == row and position.col == col:
            return entity
    return None


def active_tile_type_map(world: World) -> Dict[Position, str]:
    """Return mapping of active tile positions to their type names."""
    mapping: Dict[Position, str] = {}
    for entity, position in world.get_component(BoardPosition):
        try:
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if not switch.active:
                continue
            tile: TileType = world.component_for_entity(entity, TileType)
        except KeyError:
            continue
        mapping[(position.row, position.col)] = tile.type_name
    return mapping


def board_layout(world: World) -> List[List[Optional[str]]]:
    """Row-major copy of the board; empty cells are None."""
    dims = board_dimensions(world)
    if not dims:
        return []
    rows, cols = dims
    types = active_tile_type_map(world)
    return [[types.get((r, c)) for c in range(cols)] for r in range(rows)]


def apply_layout(world: World, layout: Sequence[Sequence[Optional[str]]]) -> None:
    """Write a row-major layout onto the tile entities; None marks a cell empty."""
    index = position_index(world)
    for row, values in enumerate(layout):
        for col, type_name in enumerate(values):
            entity = index.get((row, col))
            if entity is None:
                continue
            tile_switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if type_name is None:
                tile_switch.active = False
                continue
            world.component_for_entity(entity, TileType).type_name = type_name
            tile_switch.active = True


def swap_tile_types(world: World, src: Position, dst: Position) -> bool:
    """Swap the TileType values for two active tile entities."""

    src_entity = get_entity_at(world, src[0], src[1])
    dst_entity = get_entity_at(world, dst[0], dst[1])
    if src_entity is None or dst_entity is None:
        return False
    try:
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
        if not (src_switch.active and dst_switch.active):
            return False
        src_tile: TileType = world.component_for_entity(src_entity, TileType)
        dst_tile: TileType = world.component_for_entity(dst_entity, TileType)
    except KeyError:
        return False
    src_tile.type_name, dst_tile.type_name = dst_tile.type_name, src_tile.type_name
    return True


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return abs(ar - br) + abs(ac - bc) == 1


def find_matches_in_grid(
    types: Mapping[Position, str], rows: int, cols: int, min_length: int = 3
) -> List[Match]:
    """Detect every maximal horizontal or vertical run of at least min_length equal gems.

    Both axes are scanned unconditionally. A cell shared by a horizontal and a vertical run
    (L and T shapes) appears in both matches; callers clear the union.
    """
    matches: List[Match] = []
    # Horizontal runs
    for r in range(rows):
        run: Match = []
        last_type = None
        for c in range(cols):
            tval = types.get((r, c))
            if tval is not None and tval == last_type:
                run.append((r, c))
            else:
                if len(run) >= min_length:
                    matches.append(run)
                run = [(r, c)] if tval is not None else []
                last_type = tval
        if len(run) >= min_length:
            matches.append(run)
    # Vertical runs
    for c in range(cols):
        run = []
        last_type = None
        for r in range(rows):
            tval = types.get((r, c))
            if tval is not None and tval == last_type:
                run.append((r, c))
            else:
                if len(run) >= min_length:
                    matches.append(run)
                run = [(r, c)] if tval is not None else []
                last_type = tval
        if len(run) >= min_length:
            matches.append(run)
    return matches


def find_all_matches(world: World) -> List[Match]:
    """Detect all contiguous horizontal or vertical matches on the live board."""
    board = get_board(world)
    if board is None:
        return []
    types = active_tile_type_map(world)
    if not types:
        return []
    return find_matches_in_grid(types, board.rows, board.cols, board.min_match_length)


def predict_swap_creates_match(
    world: World, src: Position, dst: Position, *, types: Dict[Position, str] | None = None
) -> bool:
    """Return True if the board holds at least one match once src and dst are swapped.

    The swap is applied to a copy of the type map, so the live board is never touched.
    """

    board = get_board(world)
    if board is None:
        return False
    tile_map = types if types is not None else active_tile_type_map(world)
    if src not in tile_map or dst not in tile_map:
        return False
    swapped = tile_map.copy()
    swapped[src], swapped[dst] = swapped[dst], swapped[src]
    return bool(find_matches_in_grid(swapped, board.rows, board.cols, board.min_match_length))


def find_valid_swaps(world: World) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would produce a match."""

    dims = board_dimensions(world)
    if not dims:
        return []
    rows, cols = dims
    tile_map = active_tile_type_map(world)
    if not tile_map:
        return []
    swaps: List[Tuple[Position, Position]] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            if pos not in tile_map:
                continue
            right = (row, col + 1)
            if col + 1 < cols and right in tile_map:
                if predict_swap_creates_match(world, pos, right, types=tile_map):
                    swaps.append((pos, right))
            down = (row + 1, col)
            if row + 1 < rows and down in tile_map:
                if predict_swap_creates_match(world, pos, down, types=tile_map):
                    swaps.append((pos, down))
    return swaps


def clear_tiles(world: World, positions: Iterable[Position]) -> List[TypeEntry]:
    """Mark the tiles at positions empty and return what they held."""
    index = position_index(world)
    typed: List[TypeEntry] = []
    for row, col in sorted(set(positions)):
        entity = index.get((row, col))
        if entity is None:
            continue
        tile_switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not tile_switch.active:
            continue
        tile_type: TileType = world.component_for_entity(entity, TileType)
        typed.append((row, col, tile_type.type_name))
        tile_switch.active = False
    return typed


def compute_gravity_moves(world: World) -> Tuple[List[GravityMove], int]:
    """Plan how active tiles fall toward the last row; returns moves and affected column count.

    Row 0 is the top of the board. Relative order inside each column is preserved.
    """
    board = get_board(world)
    if board is None:
        return [], 0
    index = position_index(world)
    moves: List[GravityMove] = []
    cascades = 0
    for col in range(board.cols):
        column_moved = False
        write_row = board.rows - 1
        for row in range(board.rows - 1, -1, -1):
            entity = index.get((row, col))
            if entity is None:
                continue
            tile_switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if not tile_switch.active:
                continue
            if row != write_row:
                tile_type = world.component_for_entity(entity, TileType)
                moves.append(GravityMove(source=(row, col), target=(write_row, col), type_name=tile_type.type_name))
                column_moved = True
            write_row -= 1
        if column_moved:
            cascades += 1
    return moves, cascades


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    # Moves are planned bottom-up per column, so each target is already vacated when reached.
    index = position_index(world)
    for move in moves:
        src_entity = index.get(move.source)
        dst_entity = index.get(move.target)
        if src_entity is None or dst_entity is None:
            continue
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
        if not src_switch.active:
            continue
        dst_tile: TileType = world.component_for_entity(dst_entity, TileType)
        dst_tile.type_name = move.type_name
        dst_switch.active = True
        src_switch.active = False


def refill_inactive_tiles(world: World, rng: random.Random | None = None) -> List[Position]:
    """Fill every empty cell with a random spawnable gem, column by column from the top."""
    rng = rng or getattr(world, "random", None) or random.Random()
    spawned: List[Position] = []
    registry = get_tile_registry(world)
    choices = registry.spawnable_types()
    entries = sorted(
        world.get_component(BoardPosition), key=lambda item: (item[1].col, item[1].row)
    )
    for entity, position in entries:
        tile_switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if tile_switch.active:
            continue
        tile_type: TileType = world.component_for_entity(entity, TileType)
        tile_type.type_name = rng.choice(choices)
        tile_switch.active = True
        spawned.append((position.row, position.col))
    return spawned
