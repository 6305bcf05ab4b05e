from __future__ import annotations
import logging
import uuid
from typing import List, Optional

from .. import errors
from ..dictionary import WordOracle
from ..game_logic.constants import RECONNECT_GRACE_SECONDS, TURN_TIME_SECONDS
from ..game_logic.session import WAITING
from ..game_logic.validator import Placement
from ..schemas import ActionResult, RoomCreated, RoomJoined, RoomSummary, WordScore
from .registry import RoomRegistry
from .room import Room

logger = logging.getLogger(__name__)


class GameManager:
    """Routes participant intents to their room and fans the results out.

    Each intent runs under the room's lock, so deadline expiry, reconnects and
    player actions on one room are applied one at a time.
    """

    def __init__(
        self,
        sio,
        oracle: WordOracle,
        turn_seconds: float = TURN_TIME_SECONDS,
        grace_seconds: float = RECONNECT_GRACE_SECONDS,
    ):
        self.sio = sio
        self.oracle = oracle
        self.turn_seconds = turn_seconds
        self.grace_seconds = grace_seconds
        self.rooms = RoomRegistry()

    def _new_room(self, code: str) -> Room:
        return Room(
            code, self.sio, self.oracle,
            turn_seconds=self.turn_seconds,
            grace_seconds=self.grace_seconds,
            on_member_removed=self._on_member_removed,
        )

    async def _require_room(self, room_code: Optional[str]) -> Room:
        room = await self.rooms.get(room_code) if room_code else None
        if room is None:
            raise errors.RoomNotFoundError(roomCode=room_code)
        return room

    async def _on_member_removed(self, room: Room, member_id: str) -> None:
        if room.is_empty:
            await self.rooms.remove(room.code)

    # lobby

    async def create_room(self, sid: str, name: str) -> RoomCreated:
        room = await self.rooms.create(self._new_room)
        player_id = str(uuid.uuid4())
        async with room.lock:
            room.add_member(player_id, name, sid)
        return RoomCreated(roomCode=room.code, playerId=player_id)

    async def join_room(self, sid: str, room_code: str, name: str) -> RoomJoined:
        room = await self._require_room(room_code)
        player_id = str(uuid.uuid4())
        async with room.lock:
            if room.phase != WAITING:
                raise errors.RoomAlreadyStartedError()
            room.add_member(player_id, name, sid)
            joined = room.session.player_state(room.session.get(player_id))
            await room.broadcast('player:joined', {'player': joined.model_dump()}, exclude=player_id)
            return RoomJoined(roomCode=room.code, playerId=player_id, players=room.session.players_info())

    async def start_game(self, room_code: str, player_id: str) -> None:
        room = await self._require_room(room_code)
        async with room.lock:
            if not room.is_host(player_id):
                raise errors.NotHostError()
            room.session.start()
            logger.info('[room %s] game started', room.code)
            await room.broadcast_state('game:started')

    # turns

    async def play(self, room_code: str, player_id: str, placements: List[Placement]) -> ActionResult:
        room = await self._require_room(room_code)
        async with room.lock:
            turn = room.session.play(player_id, placements)
            words = [WordScore(word=w.word, score=w.score).model_dump() for w in turn.words]
            await room.broadcast_state('game:playResult', success=True, words=words, totalScore=turn.total)
            return ActionResult(success=True, words=words, totalScore=turn.total)

    async def exchange(self, room_code: str, player_id: str, tile_ids: List[int]) -> ActionResult:
        room = await self._require_room(room_code)
        async with room.lock:
            room.session.exchange(player_id, tile_ids)
            await room.broadcast_state('game:exchangeResult', success=True)
            return ActionResult(success=True)

    async def pass_turn(self, room_code: str, player_id: str) -> None:
        room = await self._require_room(room_code)
        async with room.lock:
            room.session.pass_turn(player_id)
            await room.broadcast_state()

    # connections

    async def reconnect(self, sid: str, room_code: str, player_id: str) -> Room:
        room = await self._require_room(room_code)
        async with room.lock:
            room.reconnect(player_id, sid)
            await room.send_to(player_id, 'game:state', {'gameState': room.session.state_for(player_id).model_dump()})
            await room.broadcast('player:reconnected', {'playerId': player_id}, exclude=player_id)
        return room

    async def disconnect(self, room_code: Optional[str], player_id: Optional[str], sid: Optional[str] = None) -> None:
        if not room_code or not player_id:
            return
        room = await self.rooms.get(room_code)
        if room is None:
            return
        async with room.lock:
            removed = room.handle_disconnect(player_id, sid)
            if removed:
                await room.broadcast('player:left', {'playerId': player_id})
        if removed and room.is_empty:
            await self.rooms.remove(room.code)

    async def summary(self, room_code: str) -> RoomSummary:
        room = await self._require_room(room_code)
        return RoomSummary(roomCode=room.code, phase=room.phase, players=room.session.players_info())
