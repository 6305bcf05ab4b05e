from __future__ import annotations
from typing import Any, Dict, Optional


class GameError(Exception):
    """Rejected intent. Reported to the acting participant only; state is untouched."""

    code = 'game_error'
    default_message = 'Action rejected'

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {'code': self.code, 'message': self.message, **self.context}


class PlacementError(GameError):
    code = 'invalid_placement'


class EmptyPlacementError(PlacementError):
    code = 'empty_placement'
    default_message = 'Place at least one tile'


class DuplicatePlacementError(PlacementError):
    code = 'duplicate_placement'
    default_message = 'A tile or cell appears more than once'


class OutOfBoundsError(PlacementError):
    code = 'out_of_bounds'
    default_message = 'Placement is outside the board'


class CellOccupiedError(PlacementError):
    code = 'cell_occupied'
    default_message = 'That cell already holds a tile'


class NotCollinearError(PlacementError):
    code = 'not_collinear'
    default_message = 'Tiles must be placed in a single row or column'


class SingleTileError(PlacementError):
    code = 'single_tile'
    default_message = 'A single tile does not form a word on its own'


class GapInPlacementError(PlacementError):
    code = 'gap_in_placement'
    default_message = 'There is a gap between the placed tiles'


class CenterNotCoveredError(PlacementError):
    code = 'center_not_covered'
    default_message = 'The first move must cover the center cell'


class FirstMoveTooShortError(PlacementError):
    code = 'first_move_too_short'
    default_message = 'The first move needs at least two tiles'


class NotAdjacentError(PlacementError):
    code = 'not_adjacent'
    default_message = 'Tiles must touch a tile already on the board'


class NoWordFormedError(PlacementError):
    code = 'no_word_formed'
    default_message = 'No word was formed'


class TileNotInRackError(GameError):
    code = 'tile_not_in_rack'
    default_message = 'That tile is not in your rack'


class BlankNotAssignedError(GameError):
    code = 'blank_not_assigned'
    default_message = 'Choose a character for the blank tile'


class InvalidVariantError(GameError):
    code = 'invalid_variant'
    default_message = 'That character is not a variant of the tile'


class UnknownWordError(GameError):
    code = 'unknown_word'

    def __init__(self, word: str):
        super().__init__(f'"{word}" is not in the dictionary', word=word)
        self.word = word


class NotYourTurnError(GameError):
    code = 'not_your_turn'
    default_message = 'It is not your turn'


class WrongPhaseError(GameError):
    code = 'wrong_phase'
    default_message = 'The game is not accepting that action now'


class NotEnoughPlayersError(GameError):
    code = 'not_enough_players'
    default_message = 'At least two players are needed'


class NotHostError(GameError):
    code = 'not_host'
    default_message = 'Only the host can start the game'


class AlreadySeatedError(GameError):
    code = 'already_seated'
    default_message = 'Already in this game'


class EmptyExchangeError(GameError):
    code = 'empty_exchange'
    default_message = 'Choose tiles to exchange'


class InsufficientPoolError(GameError):
    code = 'insufficient_pool'
    default_message = 'Not enough tiles left in the bag'


class RoomNotFoundError(GameError):
    code = 'room_not_found'
    default_message = 'Room not found'


class RoomFullError(GameError):
    code = 'room_full'
    default_message = 'Room is full'


class RoomAlreadyStartedError(GameError):
    code = 'room_started'
    default_message = 'The game has already started'


class UnknownParticipantError(GameError):
    code = 'unknown_participant'
    default_message = 'Reconnection failed'


class InvalidPayloadError(GameError):
    code = 'invalid_payload'
    default_message = 'Malformed message'
