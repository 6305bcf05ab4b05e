from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from .game_logic.tiles import Tile as TileValue
from .game_logic.validator import Placement

GamePhase = Literal['waiting', 'playing', 'finished']
TurnAction = Literal['play', 'exchange', 'pass']

class Tile(BaseModel):
    id: int
    char: str
    points: int = 0
    isBlank: bool = False
    assignedChar: Optional[str] = None

    @classmethod
    def from_value(cls, tile: TileValue) -> 'Tile':
        return cls(id=tile.id, char=tile.char, points=tile.points,
                   isBlank=tile.is_blank, assignedChar=tile.assigned_char)

class PlacedTile(BaseModel):
    tileId: int
    row: int
    col: int
    assignedChar: Optional[str] = Field(default=None, max_length=1)

    def to_placement(self) -> Placement:
        return Placement(tile_id=self.tileId, row=self.row, col=self.col,
                         assigned_char=self.assignedChar or None)

class PlayerState(BaseModel):
    id: str
    name: str
    score: int = 0
    tileCount: int = 0
    isConnected: bool = True

class WordScore(BaseModel):
    word: str
    score: int

class TurnRecord(BaseModel):
    playerId: str
    playerName: str
    action: TurnAction
    words: List[WordScore] = []
    totalScore: int = 0
    forced: bool = False

class GameState(BaseModel):
    board: List[List[Optional[Tile]]]
    bonusLayout: List[List[str]]
    players: List[PlayerState]
    currentPlayerId: Optional[str] = None
    rack: List[Tile] = []
    tilesRemaining: int = 0
    turnHistory: List[TurnRecord] = []
    phase: GamePhase = 'waiting'
    consecutivePasses: int = 0
    # epoch milliseconds; 0 when no deadline is armed
    turnDeadline: int = 0

# client -> server intents

class CreateRoom(BaseModel):
    name: str = Field(..., min_length=1, max_length=24)

class JoinRoom(BaseModel):
    roomCode: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=24)

class PlayTiles(BaseModel):
    placements: List[PlacedTile]

class ExchangeTiles(BaseModel):
    tileIds: List[int]

class Reconnect(BaseModel):
    roomCode: str
    playerId: str

# server -> client messages

class RoomCreated(BaseModel):
    roomCode: str
    playerId: str

class RoomJoined(BaseModel):
    roomCode: str
    playerId: str
    players: List[PlayerState]

class ActionResult(BaseModel):
    success: bool
    error: Optional[str] = None
    code: Optional[str] = None
    gameState: Optional[GameState] = None
    words: List[WordScore] = []
    totalScore: int = 0

class GameOver(BaseModel):
    gameState: GameState
    winner: Optional[PlayerState] = None
    winners: List[PlayerState] = []

class RoomSummary(BaseModel):
    roomCode: str
    phase: GamePhase
    players: List[PlayerState]
