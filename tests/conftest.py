"""
Kotoba - Test Configuration and Fixtures

Shared tiles, word lists and a recording Socket.IO stand-in.
"""

from typing import Any

import pytest

from kotoba.dictionary import DictionaryService
from kotoba.game_logic.tiles import Tile


TEST_WORDS = {
    'ねこ', 'いぬ', 'いぬこ', 'こい', 'この', 'のこ', 'かい', 'かいこ', 'はな',
    'はなし', 'がい', 'がっこ', 'かき', 'きかい', 'あいうえおかき', 'うし', 'しか',
}


def make_tile(tile_id: int, char: str, points: int = 1, blank: bool = False) -> Tile:
    return Tile(id=tile_id, char=char, points=0 if blank else points, is_blank=blank)


def make_rack(*tiles: Tile) -> dict[int, Tile]:
    return {t.id: t for t in tiles}


class FakeSio:
    """Records every emit instead of sending it."""

    def __init__(self):
        self.emitted: list[tuple[str, Any, Any]] = []
        self.sessions: dict[str, dict] = {}

    async def emit(self, event, data=None, to=None, room=None, **kwargs):
        self.emitted.append((event, data, to or room))

    async def save_session(self, sid, session):
        self.sessions[sid] = session

    async def get_session(self, sid):
        return self.sessions.get(sid)

    def events(self, to=None) -> list[str]:
        return [e for e, _, target in self.emitted if to is None or target == to]

    def last(self, event: str, to=None):
        for e, data, target in reversed(self.emitted):
            if e == event and (to is None or target == to):
                return data
        return None

    def clear(self):
        self.emitted.clear()


@pytest.fixture
def oracle() -> DictionaryService:
    return DictionaryService(TEST_WORDS)


@pytest.fixture
def fake_sio() -> FakeSio:
    return FakeSio()
