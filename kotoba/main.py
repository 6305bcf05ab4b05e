from __future__ import annotations
import logging
from typing import Any, Dict, Type, TypeVar

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from . import errors
from .config import get_settings
from .dictionary import DictionaryService
from .managers.game import GameManager
from .schemas import ActionResult, CreateRoom, ExchangeTiles, JoinRoom, PlayTiles, Reconnect, RoomSummary

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper(),
                    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
logger = logging.getLogger(__name__)

dict_service = DictionaryService.from_file(settings.dictionary_path)

cors_origins = '*' if '*' in settings.cors_origins else settings.cors_origins

# Socket.IO server (ASGI)
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=cors_origins)
app = FastAPI(title="Kotoba Server", version="0.1.0")

# Mount Socket.IO ASGI application
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# CORS for REST
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

games = GameManager(
    sio,
    dict_service,
    turn_seconds=settings.turn_time_seconds,
    grace_seconds=settings.reconnect_grace_seconds,
)

M = TypeVar('M', bound=BaseModel)

# REST Endpoints
@app.get('/health')
async def health() -> Dict[str, Any]:
    return { 'ok': True, 'rooms': len(games.rooms), 'words': dict_service.size }

@app.get('/dict/validate')
async def validate_word(word: str):
    return { 'word': word, 'valid': dict_service.is_valid(word) }

@app.get('/rooms/{code}', response_model=RoomSummary)
async def room_summary(code: str):
    try:
        return await games.summary(code)
    except errors.RoomNotFoundError:
        raise HTTPException(status_code=404, detail='Room not found')

def _parse(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload or {})
    except ValidationError as exc:
        raise errors.InvalidPayloadError(details=exc.errors(include_url=False, include_context=False))

async def _reject(sid: str, exc: errors.GameError, event: str = 'error'):
    logger.warning('Rejected intent from %s: %s (%s)', sid, exc.code, exc.message)
    if event == 'error':
        await sio.emit('error', exc.to_payload(), to=sid)
    else:
        result = ActionResult(success=False, error=exc.message, code=exc.code)
        await sio.emit(event, result.model_dump(), to=sid)

async def _seat(sid: str):
    sess = await sio.get_session(sid) or {}
    return sess.get('room_code'), sess.get('player_id')

async def _take_seat(sid: str, room_code: str, player_id: str):
    # one seat per socket: leave whatever this sid held before
    previous = await _seat(sid)
    if previous[1] and previous != (room_code, player_id):
        await games.disconnect(previous[0], previous[1], sid)
    await sio.save_session(sid, { 'room_code': room_code, 'player_id': player_id })

# Socket.IO Events
@sio.event
async def connect(sid, environ, auth=None):
    await sio.save_session(sid, {})

@sio.event
async def disconnect(sid, *args):
    room_code, player_id = await _seat(sid)
    await games.disconnect(room_code, player_id, sid)

@sio.on('ping')
async def on_ping(sid):
    await sio.emit('pong', to=sid)

@sio.on('room:create')
async def room_create(sid, payload):
    try:
        intent = _parse(CreateRoom, payload)
        created = await games.create_room(sid, intent.name)
    except errors.GameError as exc:
        await _reject(sid, exc)
        return
    await _take_seat(sid, created.roomCode, created.playerId)
    await sio.emit('room:created', created.model_dump(), to=sid)

@sio.on('room:join')
async def room_join(sid, payload):
    try:
        intent = _parse(JoinRoom, payload)
        joined = await games.join_room(sid, intent.roomCode, intent.name)
    except errors.GameError as exc:
        await _reject(sid, exc)
        return
    await _take_seat(sid, joined.roomCode, joined.playerId)
    await sio.emit('room:joined', joined.model_dump(), to=sid)

@sio.on('room:reconnect')
async def room_reconnect(sid, payload):
    try:
        intent = _parse(Reconnect, payload)
        room = await games.reconnect(sid, intent.roomCode, intent.playerId)
    except errors.GameError as exc:
        await _reject(sid, exc)
        return
    await _take_seat(sid, room.code, intent.playerId)

@sio.on('game:start')
async def game_start(sid, *args):
    room_code, player_id = await _seat(sid)
    try:
        await games.start_game(room_code, player_id)
    except errors.GameError as exc:
        await _reject(sid, exc)

@sio.on('game:play')
async def game_play(sid, payload):
    room_code, player_id = await _seat(sid)
    try:
        intent = _parse(PlayTiles, payload)
        await games.play(room_code, player_id, [p.to_placement() for p in intent.placements])
    except errors.GameError as exc:
        await _reject(sid, exc, 'game:playResult')

@sio.on('game:exchange')
async def game_exchange(sid, payload):
    room_code, player_id = await _seat(sid)
    try:
        intent = _parse(ExchangeTiles, payload)
        await games.exchange(room_code, player_id, intent.tileIds)
    except errors.GameError as exc:
        await _reject(sid, exc, 'game:exchangeResult')

@sio.on('game:pass')
async def game_pass(sid, *args):
    room_code, player_id = await _seat(sid)
    try:
        await games.pass_turn(room_code, player_id)
    except errors.GameError as exc:
        await _reject(sid, exc)

# Export ASGI app for uvicorn
application = asgi_app

# For local running: uvicorn kotoba.main:application --reload --host 0.0.0.0 --port 8000
