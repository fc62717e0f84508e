import random
import time
from typing import Callable, Optional

from esper import World

from gemcascade.components.cascade_state import CascadeState
from gemcascade.components.tile_type_registry import TileTypeRegistry
from gemcascade.components.tile_types import TileTypes
from gemcascade.config import GameConfig, default_config
from gemcascade.events.bus import EventBus
from gemcascade.systems.game_flow_system import new_game_state


def create_world(
    event_bus: EventBus,
    config: Optional[GameConfig] = None,
    *,
    difficulty: Optional[str] = None,
    rng: random.Random | None = None,
    clock: Optional[Callable[[], float]] = None,
) -> World:
    """Build a world holding the game state and gem catalog; raises ConfigError for bad config.

    Board tiles are created separately by BoardSystem.
    """
    config = (config or default_config()).validate()
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "clock", clock or time.monotonic)
    setattr(world, "config", config)
    setattr(world, "event_bus", event_bus)

    # Register the global game state resource.
    state = new_game_state(config, difficulty)
    world.create_entity(state, CascadeState())

    # Create single registry entity with the configured catalog
    world.create_entity(
        TileTypeRegistry(),
        TileTypes(
            types={gem.name: gem.rarity for gem in config.gem_types},
            spawnable=config.kinds_for(state.difficulty),
        ),
    )
    return world
