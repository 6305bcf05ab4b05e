from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .board import BonusKind, BonusLayout, create_bonus_layout
from .constants import ALL_TILES_BONUS, RACK_SIZE
from .validator import FormedWord


@dataclass(frozen=True)
class WordScore:
    word: str
    score: int


@dataclass(frozen=True)
class TurnScore:
    words: Tuple[WordScore, ...]
    all_tiles_bonus: int
    total: int


def score_word(word: FormedWord, layout: BonusLayout) -> int:
    """Letter bonuses apply to new tiles first; word bonuses multiply the sum.

    Bonus cells under tiles from earlier turns are spent and count as plain cells.
    """
    subtotal = 0
    multiplier = 1
    for cell in word.cells:
        points = cell.tile.score_value
        if cell.is_new:
            bonus: BonusKind = layout[cell.row][cell.col]
            points *= bonus.letter_multiplier
            multiplier *= bonus.word_multiplier
        subtotal += points
    return subtotal * multiplier


def score_turn(
    words: Iterable[FormedWord],
    tiles_placed: int,
    layout: Optional[BonusLayout] = None,
    rack_capacity: int = RACK_SIZE,
) -> TurnScore:
    layout = layout or create_bonus_layout()
    scored = tuple(WordScore(word=w.text, score=score_word(w, layout)) for w in words)
    bonus = ALL_TILES_BONUS if tiles_placed == rack_capacity else 0
    return TurnScore(words=scored, all_tiles_bonus=bonus, total=sum(w.score for w in scored) + bonus)
