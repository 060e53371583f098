from flask_socketio import join_room, leave_room, emit
from flask import request, current_app
from coinflip import get_coordinator
from coinflip.services.games import NotFound
from coinflip.services.games.events import LOBBY_TOPIC, game_topic, player_topic
from typing import Dict


def _sid_to_player() -> Dict[str, str]:
    # socket id -> player id, for sockets that identified themselves in the lobby
    return current_app.extensions['coinflip_sockets']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    player_id = _sid_to_player().pop(_get_sid(), None)
    if not player_id:
        return
    # Another socket for the same player keeps it connected
    if player_id in _sid_to_player().values():
        return
    try:
        get_coordinator().disconnect(player_id)
    except NotFound:
        pass


def handle_join_lobby(data):
    player_id = (data or {}).get('playerId')
    join_room(LOBBY_TOPIC)
    if player_id:
        player_id = str(player_id)
        join_room(player_topic(player_id))
        _sid_to_player()[_get_sid()] = player_id
    emit('joined', {'room': LOBBY_TOPIC})


def handle_join_game(data):
    game_id = (data or {}).get('gameId')
    if not game_id:
        emit('error', {'message': 'gameId is required'})
        return
    try:
        get_coordinator().get_session(game_id)
    except NotFound as err:
        emit('error', err.to_dict())
        return
    room = game_topic(game_id)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_game(data):
    game_id = (data or {}).get('gameId')
    if not game_id:
        emit('error', {'message': 'gameId is required'})
        return
    room = game_topic(game_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from coinflip import socketio

    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('join_lobby', handle_join_lobby, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
