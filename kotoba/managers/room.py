from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from .. import errors
from ..dictionary import WordOracle
from ..game_logic.constants import RECONNECT_GRACE_SECONDS, TURN_TIME_SECONDS
from ..game_logic.session import FINISHED, PLAYING, WAITING, GameSession
from ..game_logic.tiles import TilePool
from ..schemas import GameOver
from .timer import TimerManager, TurnClock

logger = logging.getLogger(__name__)

TURN_KEY = 'turn'


@dataclass
class Member:
    id: str
    name: str
    sid: Optional[str]
    connected: bool = True


class Room:
    """A game session plus the live connections of the people seated in it.

    Every mutating call must be made while holding ``room.lock``; the
    timer callbacks take the lock themselves.
    """

    def __init__(
        self,
        code: str,
        sio,
        oracle: WordOracle,
        turn_seconds: float = TURN_TIME_SECONDS,
        grace_seconds: float = RECONNECT_GRACE_SECONDS,
        pool: Optional[TilePool] = None,
        on_member_removed: Optional[Callable[['Room', str], Awaitable[None]]] = None,
    ):
        self.code = code
        self.sio = sio
        self.lock = asyncio.Lock()
        self.timers = TimerManager()
        self.grace_seconds = grace_seconds
        self.on_member_removed = on_member_removed
        self.members: Dict[str, Member] = {}
        self.host_id: Optional[str] = None
        self.session = GameSession(
            oracle,
            pool=pool,
            deadline=TurnClock(self.timers, TURN_KEY, self._turn_expired),
            turn_seconds=turn_seconds,
        )

    @property
    def phase(self) -> str:
        return self.session.phase

    @property
    def is_empty(self) -> bool:
        return not self.members

    def is_host(self, member_id: str) -> bool:
        return member_id == self.host_id

    def member_ids(self) -> List[str]:
        return list(self.members)

    # membership

    def add_member(self, member_id: str, name: str, sid: Optional[str]) -> Member:
        self.session.add_participant(member_id, name)
        member = Member(id=member_id, name=name, sid=sid)
        self.members[member_id] = member
        if self.host_id is None:
            self.host_id = member_id
        logger.info('[room %s] %s joined (%d seated)', self.code, name, len(self.members))
        return member

    def remove_member(self, member_id: str) -> bool:
        self.timers.cancel(('grace', member_id))
        member = self.members.pop(member_id, None)
        if member is None:
            return False
        if self.session.phase == WAITING:
            self.session.remove_participant(member_id)
        else:
            self.session.set_connected(member_id, False)
        if self.host_id == member_id:
            self.host_id = next(iter(self.members), None)
        logger.info('[room %s] %s left', self.code, member.name)
        return True

    def handle_disconnect(self, member_id: str, sid: Optional[str] = None) -> bool:
        """Returns True when the member was removed right away.

        A disconnect from a socket the member has already replaced is ignored.
        """
        member = self.members.get(member_id)
        if member is None:
            return False
        if sid is not None and member.sid != sid:
            logger.info('[room %s] ignoring disconnect of stale socket for %s', self.code, member.name)
            return False
        member.connected = False
        member.sid = None
        self.session.set_connected(member_id, False)
        if self.session.phase == PLAYING:
            self.timers.schedule(('grace', member_id), self.grace_seconds, self._grace_expired, member_id)
            logger.info('[room %s] %s disconnected; holding seat for %.0fs',
                        self.code, member.name, self.grace_seconds)
            return False
        self.remove_member(member_id)
        return True

    def reconnect(self, member_id: str, sid: str) -> Member:
        member = self.members.get(member_id)
        if member is None:
            raise errors.UnknownParticipantError()
        self.timers.cancel(('grace', member_id))
        member.sid = sid
        member.connected = True
        self.session.set_connected(member_id, True)
        logger.info('[room %s] %s reconnected', self.code, member.name)
        return member

    async def _grace_expired(self, member_id: str):
        async with self.lock:
            member = self.members.get(member_id)
            if member is None or member.connected:
                return
            self.remove_member(member_id)
            logger.info('[room %s] grace period over for %s', self.code, member.name)
            await self.broadcast('player:left', {'playerId': member_id})
            if self.on_member_removed is not None:
                await self.on_member_removed(self, member_id)

    async def _turn_expired(self, turn_serial: int):
        async with self.lock:
            if not self.session.expire_turn(turn_serial):
                return
            logger.info('[room %s] turn timed out', self.code)
            await self.broadcast_state()

    def close(self) -> None:
        self.timers.cancel_all()

    # fan-out

    async def send_to(self, member_id: str, event: str, data) -> None:
        member = self.members.get(member_id)
        if member is None or not member.connected or member.sid is None:
            return
        await self.sio.emit(event, data, to=member.sid)

    async def broadcast(self, event: str, data, exclude: Optional[str] = None) -> None:
        for member_id in list(self.members):
            if member_id != exclude:
                await self.send_to(member_id, event, data)

    async def broadcast_state(self, event: str = 'game:state', **extra) -> None:
        """Each member gets the shared state plus their own rack.

        Once the game is over everyone gets ``game:over`` instead.
        """
        session = self.session
        for member_id in list(self.members):
            state = session.state_for(member_id)
            if session.phase == FINISHED:
                winners = [session.player_state(p) for p in session.winners()]
                payload = GameOver(gameState=state, winner=winners[0] if winners else None, winners=winners)
                await self.send_to(member_id, 'game:over', payload.model_dump())
            else:
                await self.send_to(member_id, event, {'gameState': state.model_dump(), **extra})
