"""Placement legality and word extraction.

``PlacementValidator.validate`` is read-only with respect to the caller's board:
the candidate tiles are written onto a scratch copy, and the outcome is
reported as a ``ValidationResult`` rather than raised, so the session can
decide to commit or reject without unwinding anything.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .. import errors
from ..dictionary import WordOracle
from ..kana import is_valid_variant
from .board import Board
from .tiles import Tile

HORIZONTAL = 'H'
VERTICAL = 'V'
_STEP = {HORIZONTAL: (0, 1), VERTICAL: (1, 0)}


@dataclass(frozen=True)
class Placement:
    tile_id: int
    row: int
    col: int
    assigned_char: Optional[str] = None


@dataclass(frozen=True)
class WordCell:
    tile: Tile
    row: int
    col: int
    is_new: bool


@dataclass(frozen=True)
class FormedWord:
    axis: str
    cells: Tuple[WordCell, ...]

    @property
    def text(self) -> str:
        return ''.join(cell.tile.face for cell in self.cells)

    @property
    def start(self) -> Tuple[int, int]:
        return self.cells[0].row, self.cells[0].col


@dataclass(frozen=True)
class ValidationResult:
    words: Tuple[FormedWord, ...] = ()
    placed: Tuple[Tuple[Placement, Tile], ...] = ()
    error: Optional[errors.GameError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class PlacementValidator:
    def __init__(self, oracle: WordOracle):
        self.oracle = oracle

    def validate(
        self,
        board: Board,
        placements: Sequence[Placement],
        rack: Mapping[int, Tile],
        is_first_move: bool,
    ) -> ValidationResult:
        try:
            placed = self._check_preconditions(board, placements, rack)
            scratch, _ = self._check_geometry(board, placed)
            self._check_anchor(board, placed, is_first_move)
            words = self.extract_words(scratch, placed)
            if not words:
                if len(placed) == 1:
                    raise errors.SingleTileError()
                raise errors.NoWordFormedError()
            for word in words:
                if not self.oracle.is_valid(word.text):
                    raise errors.UnknownWordError(word.text)
        except errors.GameError as exc:
            return ValidationResult(error=exc)
        return ValidationResult(words=tuple(words), placed=tuple(placed))

    def _check_preconditions(
        self, board: Board, placements: Sequence[Placement], rack: Mapping[int, Tile]
    ) -> List[Tuple[Placement, Tile]]:
        if not placements:
            raise errors.EmptyPlacementError()

        for p in placements:
            if p.tile_id not in rack:
                raise errors.TileNotInRackError(tile_id=p.tile_id)
        tile_ids = [p.tile_id for p in placements]
        if len(set(tile_ids)) != len(tile_ids):
            raise errors.DuplicatePlacementError()

        for p in placements:
            if not board.in_bounds(p.row, p.col):
                raise errors.OutOfBoundsError(row=p.row, col=p.col)
        for p in placements:
            if not board.is_empty(p.row, p.col):
                raise errors.CellOccupiedError(row=p.row, col=p.col)
        cells = {(p.row, p.col) for p in placements}
        if len(cells) != len(placements):
            raise errors.DuplicatePlacementError()

        placed: List[Tuple[Placement, Tile]] = []
        for p in placements:
            tile = rack[p.tile_id]
            if tile.is_blank:
                if not p.assigned_char:
                    raise errors.BlankNotAssignedError(tile_id=tile.id)
                if len(p.assigned_char) != 1:
                    raise errors.InvalidVariantError(tile_id=tile.id, char=p.assigned_char)
            elif p.assigned_char and not is_valid_variant(tile.char, p.assigned_char):
                raise errors.InvalidVariantError(tile_id=tile.id, char=p.assigned_char)
            placed.append((p, tile.assign(p.assigned_char or None)))
        return placed

    def _check_geometry(self, board: Board, placed: List[Tuple[Placement, Tile]]) -> Tuple[Board, str]:
        rows = {p.row for p, _ in placed}
        cols = {p.col for p, _ in placed}
        if len(rows) == 1:
            axis = HORIZONTAL
        elif len(cols) == 1:
            axis = VERTICAL
        else:
            raise errors.NotCollinearError()

        scratch = board.copy()
        for p, tile in placed:
            scratch.place(p.row, p.col, tile)

        if axis == HORIZONTAL:
            row = next(iter(rows))
            gaps = [c for c in range(min(cols), max(cols) + 1) if scratch.is_empty(row, c)]
        else:
            col = next(iter(cols))
            gaps = [r for r in range(min(rows), max(rows) + 1) if scratch.is_empty(r, col)]
        if gaps:
            raise errors.GapInPlacementError()
        return scratch, axis

    def _check_anchor(self, board: Board, placed: List[Tuple[Placement, Tile]], is_first_move: bool) -> None:
        if is_first_move:
            center = board.size // 2
            if not any(p.row == center and p.col == center for p, _ in placed):
                raise errors.CenterNotCoveredError()
            if len(placed) < 2:
                raise errors.FirstMoveTooShortError()
        elif not any(board.has_neighbor(p.row, p.col) for p, _ in placed):
            raise errors.NotAdjacentError()

    @staticmethod
    def extract_words(board: Board, placed: Sequence[Tuple[Placement, Tile]]) -> List[FormedWord]:
        """Every run of two or more tiles through a newly placed tile, once each."""
        new_cells: Set[Tuple[int, int]] = {(p.row, p.col) for p, _ in placed}
        seen: Dict[Tuple[str, int, int], FormedWord] = {}
        for p, _ in placed:
            for axis in (HORIZONTAL, VERTICAL):
                word = _run_through(board, p.row, p.col, axis, new_cells)
                if word is None:
                    continue
                key = (axis,) + word.start
                if key not in seen:
                    seen[key] = word
        return list(seen.values())


def _run_through(board: Board, row: int, col: int, axis: str, new_cells: Set[Tuple[int, int]]) -> Optional[FormedWord]:
    dr, dc = _STEP[axis]
    r, c = row, col
    while board.get(r - dr, c - dc) is not None:
        r, c = r - dr, c - dc

    cells: List[WordCell] = []
    while board.get(r, c) is not None:
        cells.append(WordCell(tile=board.get(r, c), row=r, col=c, is_new=(r, c) in new_cells))
        r, c = r + dr, c + dc

    if len(cells) < 2:
        return None
    return FormedWord(axis=axis, cells=tuple(cells))
