from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol, Set, Union

from .game_logic.constants import BOARD_SIZE
from .kana import small_kana_variants

logger = logging.getLogger(__name__)

# Fallback word list for development when no dictionary file is configured.
# Production loads the full precomputed list via KOTOBA_DICTIONARY_PATH.
DEFAULT_WORDS = {
    'いう', 'いし', 'いと', 'いぬ', 'うし', 'うた', 'うみ', 'えき', 'おと', 'かい',
    'かお', 'かさ', 'かた', 'かに', 'かみ', 'かわ', 'きた', 'くに', 'くも', 'こえ',
    'この', 'さら', 'しお', 'しか', 'した', 'すな', 'そら', 'たこ', 'たに', 'ちか',
    'つき', 'つの', 'てら', 'とし', 'とり', 'なか', 'なつ', 'にく', 'ねこ', 'はし',
    'はな', 'はる', 'ひと', 'ふね', 'ほし', 'まち', 'みず', 'みち', 'むし', 'もり',
    'やま', 'ゆき', 'よる', 'りす', 'わに', 'いのち', 'うさぎ', 'かたな', 'からす', 'きのこ',
    'くるま', 'こころ', 'さかな', 'しかく', 'たぬき', 'つくえ', 'とけい', 'はなし', 'ひかり', 'ふたり',
    'みかん', 'むすめ', 'やさい', 'よなか', 'がっこう', 'きっぷ', 'ざっし',
}


class WordOracle(Protocol):
    def is_valid(self, word: str) -> bool:
        ...


class DictionaryService:
    def __init__(self, words: Optional[Iterable[str]] = None):
        source = DEFAULT_WORDS if words is None else words
        self._words: Set[str] = {w.strip() for w in source if w and w.strip()}

    @classmethod
    def from_file(cls, path: Union[str, Path, None]) -> 'DictionaryService':
        if path is None:
            logger.warning('No dictionary path configured; using the built-in word list')
            return cls()
        path = Path(path)
        if not path.exists():
            logger.warning('Dictionary file not found: %s; using the built-in word list', path)
            return cls()
        with path.open(encoding='utf-8') as fh:
            service = cls(line for line in fh)
        logger.info('Loaded %d words from %s', service.size, path)
        return service

    def is_valid(self, word: str) -> bool:
        # no placement spans more than one board line
        if not word or len(word) > BOARD_SIZE:
            return False
        # a large つ, や, ゆ or よ may stand in for its small form
        return any(v in self._words for v in small_kana_variants(word))

    @property
    def size(self) -> int:
        return len(self._words)

    def __contains__(self, word: str) -> bool:
        return self.is_valid(word)
