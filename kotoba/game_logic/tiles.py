from __future__ import annotations
import random
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from ..errors import InsufficientPoolError
from ..kana import effective_points
from .constants import RACK_SIZE, TILE_DEFINITIONS


@dataclass(frozen=True)
class Tile:
    id: int
    char: str
    points: int
    is_blank: bool = False
    assigned_char: Optional[str] = None

    @property
    def face(self) -> str:
        return self.assigned_char or self.char

    @property
    def score_value(self) -> int:
        return effective_points(self.points, self.is_blank, self.assigned_char)

    def assign(self, char: Optional[str]) -> 'Tile':
        return replace(self, assigned_char=char)


class TilePool:
    """The shuffled bag of undrawn tiles."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._tiles: List[Tile] = []
        next_id = 0
        for char, points, count in TILE_DEFINITIONS:
            for _ in range(count):
                self._tiles.append(Tile(id=next_id, char=char, points=points, is_blank=char == ''))
                next_id += 1
        self._shuffle()

    def _shuffle(self):
        # random.shuffle is Fisher-Yates: every ordering equally likely
        self._rng.shuffle(self._tiles)

    def draw(self, count: int) -> List[Tile]:
        count = max(0, min(count, len(self._tiles)))
        drawn, self._tiles = self._tiles[:count], self._tiles[count:]
        return drawn

    def draw_to_fill(self, current_rack_size: int, rack_capacity: int = RACK_SIZE) -> List[Tile]:
        return self.draw(max(0, rack_capacity - current_rack_size))

    def exchange(self, tiles: Iterable[Tile]) -> List[Tile]:
        returned = list(tiles)
        if len(self._tiles) < len(returned):
            raise InsufficientPoolError(requested=len(returned), remaining=len(self._tiles))
        drawn = self.draw(len(returned))
        self._tiles.extend(t.assign(None) if t.is_blank else t for t in returned)
        self._shuffle()
        return drawn

    def remaining(self) -> int:
        return len(self._tiles)

    def is_empty(self) -> bool:
        return not self._tiles

    def __len__(self) -> int:
        return len(self._tiles)
