from flask import current_app, request
from flask_socketio import join_room, leave_room, emit
from dicegame import games_store, socketio
from typing import Dict, Any
import time


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    # On disconnect, if this socket owned a game and no other owner
    # remains, end that game
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx or not ctx.get('is_session_owner'):
        return
    game_code = ctx['game_code']
    if _release_owner(game_code) > 0:
        return
    # In tests, end immediately for determinism; in prod, allow a grace period
    if current_app.config.get('TESTING'):
        _end_session(game_code)
        return
    _schedule_end_if_no_owner(game_code, float(current_app.config.get('SESSION_END_GRACE_SEC', 2.0)))


def handle_join_game(data):
    game_code = (data or {}).get('game_code')
    is_session_owner = bool((data or {}).get('is_session_owner'))
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    code = game_code.upper()
    room = f"game:{code}"
    join_room(room)
    _sid_to_ctx[_get_sid()] = {'game_code': code, 'is_session_owner': is_session_owner}
    if is_session_owner:
        _owner_count[code] = _owner_count.get(code, 0) + 1
        _cancel_scheduled_end(code)
    emit('joined', {'room': room})
    # Send the current snapshot so a late joiner can render immediately
    game = games_store.get(code)
    if game is not None:
        payload = game.to_dict()
        payload['game_code'] = code
        emit('state', payload)


def handle_leave_game(data):
    game_code = (data or {}).get('game_code')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    code = game_code.upper()
    room = f"game:{code}"
    leave_room(room)
    emit('left', {'room': room})
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    # An owner quitting explicitly ends the game once no owner is left
    if ctx and ctx.get('is_session_owner') and ctx.get('game_code') == code:
        if _release_owner(code) == 0:
            _end_session(code)


def handle_ping(data):
    emit('pong', data or {})

# ---- Session owner lifecycle helpers ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_owner_count: Dict[str, int] = {}
_end_deadline: Dict[str, float] = {}


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _release_owner(game_code: str) -> int:
    remaining = max(0, _owner_count.get(game_code, 0) - 1)
    _owner_count[game_code] = remaining
    return remaining


def _end_session(game_code: str) -> None:
    """Remove the game from the store and notify the room."""
    from dicegame.api.games import end_game
    try:
        end_game(game_code)
    finally:
        _owner_count.pop(game_code, None)
        _end_deadline.pop(game_code, None)


def _schedule_end_if_no_owner(game_code: str, delay_sec: float) -> None:
    if _owner_count.get(game_code, 0) > 0:
        return
    _end_deadline[game_code] = time.time() + delay_sec

    def _runner(code: str, deadline: float):
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        if _owner_count.get(code, 0) == 0 and _end_deadline.get(code) == deadline:
            _end_session(code)

    socketio.start_background_task(_runner, game_code, _end_deadline[game_code])


def _cancel_scheduled_end(game_code: str) -> None:
    _end_deadline.pop(game_code, None)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('disconnect', handle_disconnect, namespace='/ws')
    socketio.on_event('join_game', handle_join_game, namespace='/ws')
    socketio.on_event('leave_game', handle_leave_game, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('disconnect', handle_disconnect, namespace='/')
        socketio.on_event('join_game', handle_join_game, namespace='/')
        socketio.on_event('leave_game', handle_leave_game, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
