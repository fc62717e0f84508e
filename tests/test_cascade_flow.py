from gemcascade.events.bus import (
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_LEVEL_UP,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_SCORE_CHANGED,
)
from gemcascade.systems.board_ops import board_layout, find_all_matches
from tests.helpers import ScriptedRandom, make_engine, small_config

LAYOUT = [
    'c d e f',
    'e f g h',
    'g h c d',
    'a a b a',
]


def record(engine, *names):
    log = []
    for name in names:
        engine.subscribe(name, lambda sender, _name=name, **kw: log.append((_name, kw)))
    return log


def test_single_step_cascade_scores_and_refills():
    rng = ScriptedRandom()
    engine = make_engine(LAYOUT, rng=rng)
    rng.queue('a', 'b', 'c')
    assert engine.attempt_swap((3, 2), (3, 3)) is True
    assert board_layout(engine.world) == [
        ['a', 'b', 'c', 'f'],
        ['c', 'd', 'e', 'h'],
        ['e', 'f', 'g', 'd'],
        ['g', 'h', 'c', 'b'],
    ]
    state = engine.state
    assert state.score == 30
    assert state.gems == 3
    assert state.matches == 1
    assert state.combo == 0
    assert find_all_matches(engine.world) == []


def test_step_events_fire_in_pipeline_order():
    rng = ScriptedRandom()
    engine = make_engine(LAYOUT, rng=rng)
    log = record(
        engine,
        EVENT_MATCH_FOUND,
        EVENT_MATCH_CLEARED,
        EVENT_GRAVITY_APPLIED,
        EVENT_REFILL_COMPLETED,
        EVENT_CASCADE_STEP,
        EVENT_CASCADE_COMPLETE,
    )
    rng.queue('a', 'b', 'c')
    engine.attempt_swap((3, 2), (3, 3))
    assert [name for name, _ in log] == [
        EVENT_MATCH_FOUND,
        EVENT_MATCH_CLEARED,
        EVENT_GRAVITY_APPLIED,
        EVENT_REFILL_COMPLETED,
        EVENT_CASCADE_STEP,
        EVENT_CASCADE_COMPLETE,
    ]
    found = log[0][1]
    assert found['matches'] == [[(3, 0), (3, 1), (3, 2)]]
    cleared = log[1][1]
    assert cleared['types'] == [(3, 0, 'a'), (3, 1, 'a'), (3, 2, 'a')]
    gravity = log[2][1]
    assert gravity['cascades'] == 3
    assert log[3][1]['new_tiles'] == [(0, 0), (0, 1), (0, 2)]
    assert log[5][1] == {'depth': 1, 'score_delta': 30}


def test_chained_cascade_applies_combo_multiplier():
    rng = ScriptedRandom()
    engine = make_engine(LAYOUT, rng=rng)
    steps = record(engine, EVENT_CASCADE_STEP)
    completes = record(engine, EVENT_CASCADE_COMPLETE)
    # First refill lines up a second match on the top row; the second refill is clean.
    rng.queue('h', 'h', 'h', 'a', 'b', 'c')
    assert engine.attempt_swap((3, 2), (3, 3)) is True

    assert [kw['depth'] for _, kw in steps] == [1, 2]
    assert [kw['score_delta'] for _, kw in steps] == [30, 36]
    first = steps[0][1]['snapshot']
    assert first.board[0] == ('h', 'h', 'h', 'f')
    assert first.score == 30
    assert first.combo == 1
    second = steps[1][1]['snapshot']
    assert second.board[0] == ('a', 'b', 'c', 'f')
    assert second.score == 66
    assert second.combo == 2
    assert completes[0][1] == {'depth': 2, 'score_delta': 66}

    state = engine.state
    assert state.score == 66
    assert state.gems == 6
    assert state.matches == 2
    assert state.combo == 0


def test_score_changed_reports_each_step_delta():
    rng = ScriptedRandom()
    engine = make_engine(LAYOUT, rng=rng)
    changes = record(engine, EVENT_SCORE_CHANGED)
    rng.queue('h', 'h', 'h', 'a', 'b', 'c')
    engine.attempt_swap((3, 2), (3, 3))
    assert [(kw['delta'], kw['score'], kw['reason']) for _, kw in changes] == [
        (30, 30, 'cascade'),
        (36, 66, 'cascade'),
    ]


def test_level_ups_land_inside_the_step_that_crossed_the_threshold():
    rng = ScriptedRandom()
    config = small_config(level_thresholds=[0, 20, 50])
    engine = make_engine(LAYOUT, rng=rng, config=config)
    levels = record(engine, EVENT_LEVEL_UP)
    steps = record(engine, EVENT_CASCADE_STEP)
    rng.queue('h', 'h', 'h', 'a', 'b', 'c')
    engine.attempt_swap((3, 2), (3, 3))
    assert [kw['level'] for _, kw in levels] == [2, 3]
    assert [kw['snapshot'].level for _, kw in steps] == [2, 3]
    assert engine.state.level == 3


def test_score_can_cross_several_thresholds_at_once():
    rng = ScriptedRandom()
    engine = make_engine(LAYOUT, rng=rng, config=small_config(level_thresholds=[0, 10, 20, 30]))
    levels = record(engine, EVENT_LEVEL_UP)
    rng.queue('a', 'b', 'c')
    engine.attempt_swap((3, 2), (3, 3))
    assert engine.state.level == 4
    assert [(kw['previous_level'], kw['level']) for _, kw in levels] == [(1, 2), (2, 3), (3, 4)]


def test_overlapping_matches_clear_union_but_count_both():
    rng = ScriptedRandom()
    engine = make_engine([
        'a b c d',
        'a e f g',
        'h a a b',
        'a c d e',
    ], rng=rng)
    cleared = record(engine, EVENT_MATCH_CLEARED)
    # The swap completes a vertical and a horizontal run sharing (2,0).
    rng.queue('a', 'd', 'g', 'h', 'e')
    assert engine.attempt_swap((2, 0), (3, 0)) is True
    positions = cleared[0][1]['positions']
    assert len(positions) == 5
    assert (2, 0) in positions
    assert board_layout(engine.world) == [
        ['a', 'h', 'e', 'd'],
        ['d', 'b', 'c', 'g'],
        ['g', 'e', 'f', 'b'],
        ['h', 'c', 'd', 'e'],
    ]
    state = engine.state
    assert state.score == 60
    assert state.gems == 6
    assert state.matches == 2
