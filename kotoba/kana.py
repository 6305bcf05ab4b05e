from __future__ import annotations
from itertools import product
from typing import Dict, Iterator, List, Optional

# base kana -> [voiced] or [voiced, semi-voiced]
DAKUTEN_MAP: Dict[str, List[str]] = {
    'か': ['が'], 'き': ['ぎ'], 'く': ['ぐ'], 'け': ['げ'], 'こ': ['ご'],
    'さ': ['ざ'], 'し': ['じ'], 'す': ['ず'], 'せ': ['ぜ'], 'そ': ['ぞ'],
    'た': ['だ'], 'ち': ['ぢ'], 'つ': ['づ'], 'て': ['で'], 'と': ['ど'],
    'は': ['ば', 'ぱ'], 'ひ': ['び', 'ぴ'], 'ふ': ['ぶ', 'ぷ'],
    'へ': ['べ', 'ぺ'], 'ほ': ['ぼ', 'ぽ'],
}

LARGE_TO_SMALL: Dict[str, str] = {
    'つ': 'っ', 'や': 'ゃ', 'ゆ': 'ゅ', 'よ': 'ょ',
}

DAKUTEN_POINTS: Dict[str, int] = {
    'が': 3, 'ぎ': 3, 'ぐ': 3, 'げ': 3, 'ご': 3,
    'ざ': 4, 'じ': 4, 'ず': 4, 'ぜ': 4, 'ぞ': 4,
    'だ': 3, 'ぢ': 3, 'づ': 3, 'で': 3, 'ど': 3,
    'ば': 4, 'び': 4, 'ぶ': 4, 'べ': 4, 'ぼ': 4,
    'ぱ': 5, 'ぴ': 5, 'ぷ': 5, 'ぺ': 5, 'ぽ': 5,
}


def variants_of(base: str) -> List[str]:
    """Characters a non-blank tile showing ``base`` may be played as."""
    options = list(DAKUTEN_MAP.get(base, []))
    if base in LARGE_TO_SMALL:
        options.append(LARGE_TO_SMALL[base])
    return options


def is_valid_variant(base: str, assigned: str) -> bool:
    return assigned in variants_of(base)


def effective_points(points: int, is_blank: bool, assigned: Optional[str] = None) -> int:
    if is_blank:
        return 0
    if assigned and assigned in DAKUTEN_POINTS:
        return DAKUTEN_POINTS[assigned]
    return points


def small_kana_variants(word: str) -> Iterator[str]:
    """All spellings of ``word`` with any subset of eligible kana shrunk.

    >>> list(small_kana_variants('けつかく'))
    ['けつかく', 'けっかく']
    """
    choices = [(ch, LARGE_TO_SMALL[ch]) if ch in LARGE_TO_SMALL else (ch,) for ch in word]
    return (''.join(chars) for chars in product(*choices))
