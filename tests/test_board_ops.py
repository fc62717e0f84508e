from gemcascade.systems.board_ops import (
    apply_gravity_moves,
    board_layout,
    compute_gravity_moves,
    find_all_matches,
    find_matches_in_grid,
    find_valid_swaps,
    is_adjacent,
    predict_swap_creates_match,
    refill_inactive_tiles,
)
from tests.helpers import ScriptedRandom, make_engine


def grid(rows):
    return {(r, c): value for r, row in enumerate(rows) for c, value in enumerate(row.split())}


def test_ruby_row_yields_single_match():
    types = grid([
        'ruby emerald sapphire diamond',
        'emerald sapphire diamond ruby',
        'sapphire diamond emerald sapphire',
        'diamond emerald sapphire diamond',
    ])
    types.update({(0, 0): 'ruby', (0, 1): 'ruby', (0, 2): 'ruby', (0, 3): 'emerald'})
    matches = find_matches_in_grid(types, 4, 4, 3)
    assert matches == [[(0, 0), (0, 1), (0, 2)]]


def test_run_longer_than_minimum_is_reported_once():
    types = grid([
        'a a a a b',
        'b c d e f',
        'c d e f g',
        'd e f g h',
        'e f g h a',
    ])
    matches = find_matches_in_grid(types, 5, 5, 3)
    assert matches == [[(0, 0), (0, 1), (0, 2), (0, 3)]]


def test_overlapping_runs_are_both_reported():
    types = grid([
        'a a a b c',
        'a d e f g',
        'a h b c d',
        'b c d e f',
        'c d e f g',
    ])
    matches = find_matches_in_grid(types, 5, 5, 3)
    assert matches == [
        [(0, 0), (0, 1), (0, 2)],
        [(0, 0), (1, 0), (2, 0)],
    ]


def test_every_match_is_contiguous_single_kind_and_long_enough():
    types = grid([
        'a a a b b b',
        'c d e f g b',
        'c d e f g b',
        'c h h h g a',
        'a b c d e f',
        'b c d e f a',
    ])
    for min_length in (3, 4):
        for match in find_matches_in_grid(types, 6, 6, min_length):
            assert len(match) >= min_length
            assert len({types[pos] for pos in match}) == 1
            rows = {r for r, _ in match}
            cols = {c for _, c in match}
            assert len(rows) == 1 or len(cols) == 1
            for (r1, c1), (r2, c2) in zip(match, match[1:]):
                assert abs(r1 - r2) + abs(c1 - c2) == 1


def test_minimum_length_is_configurable():
    types = grid([
        'a a b',
        'c d e',
        'f g h',
    ])
    assert find_matches_in_grid(types, 3, 3, 3) == []
    assert find_matches_in_grid(types, 3, 3, 2) == [[(0, 0), (0, 1)]]


def test_empty_cells_never_match():
    types = {(0, 1): 'a', (0, 2): 'a'}
    assert find_matches_in_grid(types, 3, 3, 2) == [[(0, 1), (0, 2)]]
    assert find_matches_in_grid({}, 3, 3, 2) == []


def test_is_adjacent():
    assert is_adjacent((0, 0), (0, 1))
    assert is_adjacent((1, 0), (0, 0))
    assert not is_adjacent((0, 0), (1, 1))
    assert not is_adjacent((0, 0), (0, 2))
    assert not is_adjacent((2, 2), (2, 2))


def test_gravity_compacts_columns_downward_preserving_order():
    engine = make_engine([
        ['a', 'b', 'c', 'd'],
        [None, 'e', 'f', 'g'],
        ['b', 'h', 'a', 'b'],
        [None, 'f', 'g', 'h'],
    ], start=False)
    moves, cascades = compute_gravity_moves(engine.world)
    assert [(m.source, m.target, m.type_name) for m in moves] == [
        ((2, 0), (3, 0), 'b'),
        ((0, 0), (2, 0), 'a'),
    ]
    assert cascades == 1
    apply_gravity_moves(engine.world, moves)
    layout = board_layout(engine.world)
    assert [row[0] for row in layout] == [None, None, 'a', 'b']
    assert [row[1] for row in layout] == ['b', 'e', 'h', 'f']


def test_refill_fills_every_empty_cell_column_by_column():
    rng = ScriptedRandom()
    engine = make_engine([
        [None, None, 'c', 'd'],
        [None, 'e', 'f', 'g'],
        ['b', 'h', 'a', 'b'],
        ['a', 'f', 'g', 'h'],
    ], rng=rng, start=False)
    rng.queue('c', 'd', 'h')
    spawned = refill_inactive_tiles(engine.world, rng)
    assert spawned == [(0, 0), (1, 0), (0, 1)]
    layout = board_layout(engine.world)
    assert layout[0][:2] == ['c', 'h']
    assert layout[1][0] == 'd'
    assert all(cell is not None for row in layout for cell in row)


def test_predicted_swaps_leave_board_untouched():
    engine = make_engine([
        'c d e f',
        'e f g h',
        'g h c d',
        'a a b a',
    ], start=False)
    before = board_layout(engine.world)
    assert predict_swap_creates_match(engine.world, (3, 2), (3, 3))
    assert not predict_swap_creates_match(engine.world, (0, 0), (0, 1))
    assert board_layout(engine.world) == before
    swaps = find_valid_swaps(engine.world)
    assert ((3, 2), (3, 3)) in swaps
    for src, dst in swaps:
        assert is_adjacent(src, dst)
        assert predict_swap_creates_match(engine.world, src, dst)
    assert board_layout(engine.world) == before
    assert find_all_matches(engine.world) == []
