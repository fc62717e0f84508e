from dataclasses import dataclass


@dataclass(slots=True)
class TileTypeRegistry:
    """Tag for the catalog entity; look up its TileTypes through get_tile_registry()."""
