from __future__ import annotations

from esper import World

from gemcascade.components.cascade_state import CascadeState
from gemcascade.components.game_state import GameState


def get_game_state(world: World) -> GameState:
    """Return the shared GameState component."""
    for _, state in world.get_component(GameState):
        return state
    raise RuntimeError("GameState not found; create the world with create_world()")


def replace_game_state(world: World, state: GameState) -> GameState:
    """Swap in a fresh GameState on the existing state entity (or a new one)."""
    for entity, _ in world.get_component(GameState):
        world.remove_component(entity, GameState)
        world.add_component(entity, state)
        return state
    world.create_entity(state, CascadeState())
    return state


def get_or_create_cascade_state(world: World) -> CascadeState:
    """Return the shared CascadeState component, creating it if absent."""
    existing = list(world.get_component(CascadeState))
    if existing:
        return existing[0][1]
    for entity, _ in world.get_component(GameState):
        world.add_component(entity, CascadeState())
        return world.component_for_entity(entity, CascadeState)
    world.create_entity(CascadeState())
    return list(world.get_component(CascadeState))[0][1]
