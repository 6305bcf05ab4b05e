from __future__ import annotations
from enum import Enum
from functools import lru_cache
from typing import Iterator, List, Optional, Tuple

from .constants import BOARD_SIZE
from .tiles import Tile


class BonusKind(str, Enum):
    NONE = 'NONE'
    DL = 'DL'
    TL = 'TL'
    DW = 'DW'
    TW = 'TW'
    START = 'START'

    @property
    def letter_multiplier(self) -> int:
        return {BonusKind.DL: 2, BonusKind.TL: 3}.get(self, 1)

    @property
    def word_multiplier(self) -> int:
        return {BonusKind.DW: 2, BonusKind.START: 2, BonusKind.TW: 3}.get(self, 1)


# one eighth of the board; reflections fill in the rest
BONUS_SEEDS: Tuple[Tuple[int, int, BonusKind], ...] = (
    (0, 0, BonusKind.TW),
    (0, 7, BonusKind.TW),
    (7, 0, BonusKind.TW),
    (1, 1, BonusKind.DW),
    (2, 2, BonusKind.DW),
    (3, 3, BonusKind.DW),
    (4, 4, BonusKind.DW),
    (1, 5, BonusKind.TL),
    (5, 1, BonusKind.TL),
    (5, 5, BonusKind.TL),
    (0, 3, BonusKind.DL),
    (3, 0, BonusKind.DL),
    (2, 6, BonusKind.DL),
    (6, 2, BonusKind.DL),
    (6, 6, BonusKind.DL),
    (3, 7, BonusKind.DL),
    (7, 3, BonusKind.DL),
    (7, 7, BonusKind.START),
)

BonusLayout = Tuple[Tuple[BonusKind, ...], ...]


def mirror_positions(row: int, col: int, size: int = BOARD_SIZE) -> List[Tuple[int, int]]:
    last = size - 1
    images = [
        (row, col), (row, last - col), (last - row, col), (last - row, last - col),
        (col, row), (col, last - row), (last - col, row), (last - col, last - row),
    ]
    seen: List[Tuple[int, int]] = []
    for pos in images:
        if pos not in seen:
            seen.append(pos)
    return seen


@lru_cache(maxsize=None)
def create_bonus_layout(size: int = BOARD_SIZE) -> BonusLayout:
    grid = [[BonusKind.NONE] * size for _ in range(size)]
    for row, col, kind in BONUS_SEEDS:
        for r, c in mirror_positions(row, col, size):
            if grid[r][c] is BonusKind.NONE or kind is BonusKind.START:
                grid[r][c] = kind
    return tuple(tuple(line) for line in grid)


class Board:
    """Square grid of placed tiles. Cells are only ever filled, never cleared."""

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self._cells: List[List[Optional[Tile]]] = [[None] * size for _ in range(size)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, row: int, col: int) -> Optional[Tile]:
        if not self.in_bounds(row, col):
            return None
        return self._cells[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.get(row, col) is None

    def place(self, row: int, col: int, tile: Tile) -> None:
        if self._cells[row][col] is not None:
            raise ValueError(f'cell ({row},{col}) is already occupied')
        self._cells[row][col] = tile

    def copy(self) -> 'Board':
        clone = Board(self.size)
        clone._cells = [list(line) for line in self._cells]
        return clone

    def has_neighbor(self, row: int, col: int) -> bool:
        return any(
            self.get(row + dr, col + dc) is not None
            for dr, dc in ((0, 1), (0, -1), (1, 0), (-1, 0))
        )

    def tiles(self) -> Iterator[Tuple[int, int, Tile]]:
        for r, line in enumerate(self._cells):
            for c, tile in enumerate(line):
                if tile is not None:
                    yield r, c, tile

    def rows(self) -> List[List[Optional[Tile]]]:
        return [list(line) for line in self._cells]

    def __len__(self) -> int:
        return sum(1 for _ in self.tiles())
