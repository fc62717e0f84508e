from dataclasses import dataclass, field
from typing import Dict, Iterable, List

@dataclass(slots=True)
class TileTypes:
    """Gem catalog stored on a single entity.

    ``types`` maps every catalog gem to its rarity tier in declaration order.
    ``spawnable`` is the subset the current difficulty draws from (the first K kinds).
    """
    types: Dict[str, str]
    spawnable: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.spawnable:
            self.set_spawnable(self.spawnable)
        else:
            self.spawnable = list(self.types.keys())

    def rarity_for(self, type_name: str) -> str:
        return self.types[type_name]

    def spawnable_types(self) -> List[str]:
        return list(self.spawnable)

    def set_spawnable(self, type_names: Iterable[str]) -> None:
        # Preserve order while filtering unknown types.
        seen: set[str] = set()
        filtered: List[str] = []
        for name in type_names:
            if name in self.types and name not in seen:
                filtered.append(name)
                seen.add(name)
        self.spawnable = filtered or list(self.types.keys())
