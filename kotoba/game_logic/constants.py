from __future__ import annotations
from typing import List, Tuple

# (character, points, count); '' is the blank
TILE_DEFINITIONS: List[Tuple[str, int, int]] = [
    # 1 point
    ('い', 1, 5), ('う', 1, 5),
    ('か', 1, 4), ('し', 1, 4), ('た', 1, 4), ('て', 1, 4), ('の', 1, 4), ('に', 1, 4),
    ('は', 1, 3), ('ん', 1, 3), ('く', 1, 3), ('こ', 1, 3),
    ('と', 1, 3), ('な', 1, 3), ('り', 1, 3), ('る', 1, 3),
    # 2 points
    ('き', 2, 3), ('あ', 2, 3), ('お', 2, 3),
    ('け', 2, 2), ('さ', 2, 2), ('す', 2, 2), ('せ', 2, 2), ('そ', 2, 2), ('ち', 2, 2),
    ('つ', 2, 2), ('ま', 2, 2), ('み', 2, 2), ('も', 2, 2), ('よ', 2, 2), ('え', 2, 2),
    ('れ', 2, 2),
    # 3 points
    ('わ', 3, 2), ('ふ', 3, 2), ('ら', 3, 2), ('む', 3, 1), ('め', 3, 1), ('ろ', 3, 1),
    ('ー', 3, 2),
    # 4 points
    ('ぬ', 4, 1), ('ね', 4, 1), ('ひ', 4, 1), ('ほ', 4, 1), ('や', 4, 1), ('ゆ', 4, 1),
    # blanks
    ('', 0, 2),
]

TOTAL_TILES = sum(count for _, _, count in TILE_DEFINITIONS)

BOARD_SIZE = 15
CENTER = BOARD_SIZE // 2
RACK_SIZE = 7
ALL_TILES_BONUS = 50

MIN_PLAYERS = 2
MAX_PLAYERS = 4
# game ends after this many passes per seat in a row
PASS_ROUNDS_TO_END = 2

TURN_TIME_SECONDS = 60.0
RECONNECT_GRACE_SECONDS = 60.0
