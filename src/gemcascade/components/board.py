from dataclasses import dataclass

@dataclass(slots=True)
class Board:
    """Square playfield dimensions and the run length that counts as a match."""
    size: int
    min_match_length: int = 3

    @property
    def rows(self) -> int:
        return self.size

    @property
    def cols(self) -> int:
        return self.size

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size
