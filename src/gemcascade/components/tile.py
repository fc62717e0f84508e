from dataclasses import dataclass


@dataclass(slots=True)
class TileType:
    """Gem kind held by one board cell.

    The name stays on the entity after the cell is cleared; ActiveSwitch says whether it counts.
    """
    type_name: str
