"""One game from seating to final scores.

The session is synchronous and performs no locking of its own: callers
(``Room``) serialize every mutating call. Rejected intents raise a
``GameError`` before anything is written, so a failed call leaves board,
racks, pool and scores exactly as they were.
"""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .. import errors
from .. import schemas
from ..dictionary import WordOracle
from .board import Board, BonusLayout, create_bonus_layout
from .constants import MAX_PLAYERS, MIN_PLAYERS, PASS_ROUNDS_TO_END, TURN_TIME_SECONDS
from .scoring import TurnScore, score_turn
from .tiles import Tile, TilePool
from .validator import Placement, PlacementValidator

logger = logging.getLogger(__name__)

WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'


@dataclass
class Participant:
    id: str
    name: str
    score: int = 0
    rack: Dict[int, Tile] = field(default_factory=dict)
    connected: bool = True

    def rack_points(self) -> int:
        return sum(t.points for t in self.rack.values())


@dataclass(frozen=True)
class TurnRecord:
    player_id: str
    player_name: str
    action: str
    words: tuple = ()
    total_score: int = 0
    forced: bool = False


class GameSession:
    def __init__(
        self,
        oracle: WordOracle,
        pool: Optional[TilePool] = None,
        deadline=None,
        turn_seconds: float = TURN_TIME_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.board = Board()
        self.bonus_layout: BonusLayout = create_bonus_layout()
        self.pool = pool or TilePool()
        self.validator = PlacementValidator(oracle)
        # anything with arm(seconds, turn_serial) and cancel()
        self.deadline = deadline
        self.turn_seconds = turn_seconds
        self._clock = clock

        self.phase = WAITING
        self.participants: List[Participant] = []
        self.current_idx = 0
        self.consecutive_passes = 0
        self.is_first_move = True
        self.turn_deadline = 0.0
        self.turn_serial = 0
        self.history: List[TurnRecord] = []

    # seating

    def add_participant(self, participant_id: str, name: str) -> Participant:
        if self.phase != WAITING:
            raise errors.RoomAlreadyStartedError()
        if len(self.participants) >= MAX_PLAYERS:
            raise errors.RoomFullError()
        if self.get(participant_id) is not None:
            raise errors.AlreadySeatedError()
        participant = Participant(id=participant_id, name=name)
        self.participants.append(participant)
        return participant

    def remove_participant(self, participant_id: str) -> bool:
        """Free the seat while waiting. Seats are kept once play has begun."""
        if self.phase != WAITING:
            return False
        before = len(self.participants)
        self.participants = [p for p in self.participants if p.id != participant_id]
        return len(self.participants) != before

    def set_connected(self, participant_id: str, connected: bool) -> None:
        participant = self.get(participant_id)
        if participant is not None:
            participant.connected = connected

    def get(self, participant_id: str) -> Optional[Participant]:
        return next((p for p in self.participants if p.id == participant_id), None)

    @property
    def current_player(self) -> Optional[Participant]:
        if self.phase != PLAYING or not self.participants:
            return None
        return self.participants[self.current_idx % len(self.participants)]

    @property
    def current_player_id(self) -> Optional[str]:
        player = self.current_player
        return player.id if player else None

    # lifecycle

    def start(self) -> None:
        if self.phase != WAITING:
            raise errors.WrongPhaseError()
        if len(self.participants) < MIN_PLAYERS:
            raise errors.NotEnoughPlayersError()
        for participant in self.participants:
            participant.rack = {t.id: t for t in self.pool.draw_to_fill(len(participant.rack))}
        self.phase = PLAYING
        self.current_idx = 0
        self._arm_deadline()
        logger.info('Game started with %d players', len(self.participants))

    def _assert_turn(self, participant_id: str) -> Participant:
        if self.phase != PLAYING:
            raise errors.WrongPhaseError()
        player = self.current_player
        if player is None or player.id != participant_id:
            raise errors.NotYourTurnError()
        return player

    # actions

    def play(self, participant_id: str, placements: Sequence[Placement]) -> TurnScore:
        player = self._assert_turn(participant_id)
        result = self.validator.validate(self.board, placements, player.rack, self.is_first_move)
        result.raise_for_error()
        turn = score_turn(result.words, len(result.placed), self.bonus_layout)

        for placement, tile in result.placed:
            self.board.place(placement.row, placement.col, tile)
            del player.rack[placement.tile_id]
        for tile in self.pool.draw_to_fill(len(player.rack)):
            player.rack[tile.id] = tile
        player.score += turn.total
        self.is_first_move = False
        self.consecutive_passes = 0
        self.history.append(TurnRecord(
            player_id=player.id, player_name=player.name, action='play',
            words=turn.words, total_score=turn.total,
        ))
        logger.info('%s played %s for %d', player.name, [w.word for w in turn.words], turn.total)
        self._advance()
        self._check_end()
        return turn

    def exchange(self, participant_id: str, tile_ids: Sequence[int]) -> List[Tile]:
        player = self._assert_turn(participant_id)
        if not tile_ids:
            raise errors.EmptyExchangeError()
        if len(set(tile_ids)) != len(tile_ids):
            raise errors.DuplicatePlacementError()
        for tile_id in tile_ids:
            if tile_id not in player.rack:
                raise errors.TileNotInRackError(tile_id=tile_id)

        # raises before anything moves when the pool is too small
        drawn = self.pool.exchange(player.rack[tile_id] for tile_id in tile_ids)
        for tile_id in tile_ids:
            del player.rack[tile_id]
        for tile in drawn:
            player.rack[tile.id] = tile
        self.history.append(TurnRecord(player_id=player.id, player_name=player.name, action='exchange'))
        logger.info('%s exchanged %d tiles', player.name, len(drawn))
        self._advance()
        return drawn

    def pass_turn(self, participant_id: str) -> None:
        player = self._assert_turn(participant_id)
        self._record_pass(player, forced=False)

    def expire_turn(self, turn_serial: int) -> bool:
        """Forced pass for a deadline armed at ``turn_serial``.

        Returns False without touching anything when the turn it was armed for
        is already over.
        """
        if self.phase != PLAYING or turn_serial != self.turn_serial:
            return False
        self._record_pass(self.current_player, forced=True)
        return True

    def _record_pass(self, player: Participant, forced: bool) -> None:
        self.consecutive_passes += 1
        self.history.append(TurnRecord(
            player_id=player.id, player_name=player.name, action='pass', forced=forced,
        ))
        logger.info('%s passed%s', player.name, ' (time out)' if forced else '')
        self._advance()
        self._check_end()

    # turn sequencing

    def _advance(self) -> None:
        if self.phase != PLAYING:
            return
        self.current_idx = (self.current_idx + 1) % len(self.participants)
        self.turn_serial += 1
        self._arm_deadline()

    def _arm_deadline(self) -> None:
        if self.phase != PLAYING:
            return
        self.turn_deadline = self._clock() + self.turn_seconds
        if self.deadline is not None:
            self.deadline.arm(self.turn_seconds, self.turn_serial)

    def _check_end(self) -> None:
        if self.phase != PLAYING:
            return
        if self.consecutive_passes >= PASS_ROUNDS_TO_END * len(self.participants):
            self._finish('passes')
        elif self.pool.is_empty() and any(not p.rack for p in self.participants):
            self._finish('out_of_tiles')

    def _finish(self, reason: str) -> None:
        self.phase = FINISHED
        self.turn_deadline = 0.0
        if self.deadline is not None:
            self.deadline.cancel()
        for participant in self.participants:
            participant.score -= participant.rack_points()
        logger.info('Game finished (%s): %s', reason,
                    ', '.join(f'{p.name}={p.score}' for p in self.participants))

    def winners(self) -> List[Participant]:
        if self.phase != FINISHED or not self.participants:
            return []
        top = max(p.score for p in self.participants)
        return [p for p in self.participants if p.score == top]

    def winner(self) -> Optional[Participant]:
        top = self.winners()
        return top[0] if top else None

    # snapshots

    def player_state(self, participant: Participant) -> schemas.PlayerState:
        return schemas.PlayerState(
            id=participant.id, name=participant.name, score=participant.score,
            tileCount=len(participant.rack), isConnected=participant.connected,
        )

    def players_info(self) -> List[schemas.PlayerState]:
        return [self.player_state(p) for p in self.participants]

    def state_for(self, participant_id: str) -> schemas.GameState:
        participant = self.get(participant_id)
        rack = list(participant.rack.values()) if participant else []
        return schemas.GameState(
            board=[[schemas.Tile.from_value(t) if t else None for t in row] for row in self.board.rows()],
            bonusLayout=[[kind.value for kind in row] for row in self.bonus_layout],
            players=self.players_info(),
            currentPlayerId=self.current_player_id,
            rack=[schemas.Tile.from_value(t) for t in rack],
            tilesRemaining=self.pool.remaining(),
            turnHistory=[_record_model(r) for r in self.history],
            phase=self.phase,
            consecutivePasses=self.consecutive_passes,
            turnDeadline=int(self.turn_deadline * 1000),
        )

    def tile_count(self) -> int:
        """Tiles in circulation: pool, racks and board."""
        return self.pool.remaining() + sum(len(p.rack) for p in self.participants) + len(self.board)


def _record_model(record: TurnRecord) -> schemas.TurnRecord:
    return schemas.TurnRecord(
        playerId=record.player_id,
        playerName=record.player_name,
        action=record.action,
        words=[schemas.WordScore(word=w.word, score=w.score) for w in record.words],
        totalScore=record.total_score,
        forced=record.forced,
    )


