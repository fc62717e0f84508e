from esper import World

from gemcascade.events.bus import (
    EventBus,
    EVENT_DIFFICULTY_CHANGED,
    EVENT_GAME_RESET,
    EVENT_TICK,
    EVENT_TIME_CHANGED,
    EVENT_TIME_EXPIRED,
)
from gemcascade.utils.game_state import get_game_state


class TimerSystem:
    """Countdown driven by EVENT_TICK; one second of budget is spent per whole second of play."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self._elapsed = 0.0
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_budget_refilled)
        self.event_bus.subscribe(EVENT_DIFFICULTY_CHANGED, self.on_budget_refilled)

    def on_budget_refilled(self, sender, **kwargs):
        # A fresh budget starts on a whole second.
        self._elapsed = 0.0

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 0.0) or 0.0
        state = get_game_state(self.world)
        if not state.is_running:
            return
        if not state.is_paused and dt > 0:
            self._elapsed += dt
            while self._elapsed >= 1.0 and state.time_remaining > 0:
                self._elapsed -= 1.0
                state.time_remaining -= 1
                self.event_bus.emit(EVENT_TIME_CHANGED, time_remaining=state.time_remaining)
        # An exhausted budget ends the game even while paused.
        if state.time_remaining <= 0:
            self._elapsed = 0.0
            self.event_bus.emit(EVENT_TIME_EXPIRED)
