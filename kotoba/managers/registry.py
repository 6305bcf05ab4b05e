from __future__ import annotations
import asyncio
import logging
import random
from typing import Callable, Dict, Optional

from .room import Room

logger = logging.getLogger(__name__)

CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
CODE_LENGTH = 4


class RoomRegistry:
    """Live rooms by code. The lock guards the map only, never gameplay."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()
        self._rng = rng or random.Random()

    def _new_code(self) -> str:
        while True:
            code = ''.join(self._rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if code not in self._rooms:
                return code

    async def create(self, factory: Callable[[str], Room]) -> Room:
        async with self._lock:
            code = self._new_code()
            room = factory(code)
            self._rooms[code] = room
        logger.info('Room %s created (%d live)', code, len(self._rooms))
        return room

    async def get(self, code: str) -> Optional[Room]:
        async with self._lock:
            return self._rooms.get((code or '').strip().upper())

    async def remove(self, code: str) -> Optional[Room]:
        async with self._lock:
            room = self._rooms.pop(code, None)
        if room is not None:
            room.close()
            logger.info('Room %s removed (%d live)', code, len(self._rooms))
        return room

    def __len__(self) -> int:
        return len(self._rooms)
