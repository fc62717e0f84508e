from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, /, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float
EVENT_TIME_CHANGED = "time_changed"                # payload: time_remaining=int
EVENT_TIME_EXPIRED = "time_expired"                # payload: None


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_BOARD_GENERATED = "board_generated"          # payload: size=int, kinds=list[str], iterations=int, clean=bool
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_TILE_SWAP_FINALIZE = "tile_swap_finalize"    # payload: src=(r,c), dst=(r,c)
EVENT_MATCH_FOUND = "match_found"                  # payload: matches=list[list[(r,c)]], positions=[(r,c),...], depth=int, reason=str
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], types=[(r,c,type_name),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove], cascades=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...], score_delta=int, snapshot=GameSnapshot
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, score_delta=int


# ============================================================================
# PROGRESSION
# ============================================================================
EVENT_RESOLUTION_STEP_SCORED = "resolution_step_scored"  # payload: depth=int, score_delta=int
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int, reason=str
EVENT_LEVEL_UP = "level_up"                        # payload: previous_level=int, level=int, score=int
EVENT_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"  # payload: achievement_id=str, name=str, reward=int


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_STARTED = "game_started"                # payload: difficulty=str, time_remaining=int
EVENT_GAME_PAUSED = "game_paused"                  # payload: None
EVENT_GAME_RESUMED = "game_resumed"                # payload: None
EVENT_GAME_ENDED = "game_ended"                    # payload: reason=str
EVENT_GAME_RESET = "game_reset"                    # payload: difficulty=str
EVENT_DIFFICULTY_CHANGED = "difficulty_changed"    # payload: previous=str, difficulty=str, time_remaining=int
