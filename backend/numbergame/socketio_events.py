from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from numbergame import get_engine, socketio
from numbergame.errors import NumberGameError, PlayerNotFound
from numbergame.services.games import ROOM_DELETED
from typing import Any, Dict

NAMESPACE = '/ws'


def _room_name(room_code: str) -> str:
    return f"room:{room_code}"


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _engine():
    return get_engine(current_app)


def _room_code(data: Dict[str, Any]) -> str:
    return str(data.get('room_code') or '').strip()


def _reject(event: str, exc: NumberGameError) -> None:
    """Report a rejected command to the sender only."""
    current_app.logger.info(f"[rejected] event={event} sid={_get_sid()} error={exc.error}")
    emit('command_error', exc.to_dict())


def _seat_payload(room, player) -> Dict[str, Any]:
    return {'room': room.to_dict(), 'player': player.to_dict(private=True)}


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    # Keep the seat for the grace period so a page refresh can rejoin
    sid = _get_sid()
    engine = _engine()
    if engine.find_room_by_connection(sid) is None:
        return
    engine.schedule_removal(sid)


def handle_create_room(data):
    if not isinstance(data, dict):
        data = {}
    try:
        room, player = _engine().create_room(data.get('player_name'), _get_sid(), data.get('range'))
    except NumberGameError as exc:
        _reject('create_room', exc)
        return
    join_room(_room_name(room.room_code))
    emit('room_created', _seat_payload(room, player))
    emit('players_changed', {'players': room.players_to_dict()}, to=_room_name(room.room_code))


def handle_join_room(data):
    if not isinstance(data, dict):
        data = {}
    room_code = _room_code(data)
    try:
        room, player = _engine().join_room(room_code, data.get('player_name'), _get_sid())
    except NumberGameError as exc:
        _reject('join_room', exc)
        return
    join_room(_room_name(room_code))
    emit('room_joined', _seat_payload(room, player))
    emit('players_changed', {'players': room.players_to_dict()}, to=_room_name(room_code))


def handle_rejoin_room(data):
    if not isinstance(data, dict):
        data = {}
    room_code = _room_code(data)
    try:
        room, player = _engine().rejoin_room(
            room_code, data.get('player_name'), _get_sid(), data.get('reconnect_token')
        )
    except NumberGameError as exc:
        _reject('rejoin_room', exc)
        return
    join_room(_room_name(room_code))
    emit('room_rejoined', _seat_payload(room, player))
    emit('players_changed', {'players': room.players_to_dict()}, to=_room_name(room_code))


def handle_player_ready(data):
    if not isinstance(data, dict):
        data = {}
    room_code = _room_code(data)
    try:
        room = _engine().set_ready(room_code, _get_sid(), data.get('secret_number'))
    except NumberGameError as exc:
        _reject('player_ready', exc)
        return
    if room is None:
        return
    emit('ready_changed', {'players': room.players_to_dict()}, to=_room_name(room_code))


def handle_start_game(data):
    if not isinstance(data, dict):
        data = {}
    room_code = _room_code(data)
    try:
        room = _engine().start_game(room_code, _get_sid())
    except NumberGameError as exc:
        _reject('start_game', exc)
        return
    emit('game_started', room.to_dict(), to=_room_name(room_code))


def handle_eliminate(data):
    if not isinstance(data, dict):
        data = {}
    room_code = _room_code(data)
    try:
        outcome = _engine().eliminate_called_value(room_code, data.get('number'), _get_sid())
    except NumberGameError as exc:
        _reject('eliminate', exc)
        return
    if outcome is None:
        return
    emit('elimination_result', outcome.to_dict(), to=_room_name(room_code))
    if outcome.is_game_over:
        winner = outcome.room.winner
        emit('game_over', {'winner': winner.to_dict(reveal_secret=True) if winner else None},
             to=_room_name(room_code))


def handle_leave_room(data=None):
    sid = _get_sid()
    outcome = _engine().leave_room(sid)
    if outcome is None:
        _reject('leave_room', PlayerNotFound('You are not in a room'))
        return
    leave_room(_room_name(outcome.room_code))
    emit('left', {'room_code': outcome.room_code})
    broadcast_removal(outcome)


def broadcast_removal(outcome) -> None:
    """Tell a room that someone left; safe to call from a background task."""
    room = _room_name(outcome.room_code)
    if outcome.action == ROOM_DELETED:
        socketio.emit('room_deleted', {'room_code': outcome.room_code}, to=room, namespace=NAMESPACE)
        return
    socketio.emit(
        'player_left',
        {'players': outcome.room.players_to_dict(), 'player': outcome.player.to_dict()},
        to=room,
        namespace=NAMESPACE,
    )
    if outcome.game_over:
        winner = outcome.winner
        socketio.emit(
            'game_over',
            {'winner': winner.to_dict(reveal_secret=True) if winner else None},
            to=room,
            namespace=NAMESPACE,
        )


def register_socketio_handlers(engine) -> None:
    """Register Socket.IO event handlers on the '/ws' namespace and route
    timer-driven removals from the engine back out to the rooms."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('create_room', handle_create_room, namespace=NAMESPACE)
    socketio.on_event('join_room', handle_join_room, namespace=NAMESPACE)
    socketio.on_event('rejoin_room', handle_rejoin_room, namespace=NAMESPACE)
    socketio.on_event('player_ready', handle_player_ready, namespace=NAMESPACE)
    socketio.on_event('start_game', handle_start_game, namespace=NAMESPACE)
    socketio.on_event('eliminate', handle_eliminate, namespace=NAMESPACE)
    socketio.on_event('leave_room', handle_leave_room, namespace=NAMESPACE)

    engine.subscribe(broadcast_removal)
