from dataclasses import dataclass


@dataclass(slots=True)
class CascadeState:
    """Single-flight guard for the resolution loop of one game."""

    cascade_active: bool = False
    cascade_depth: int = 0
