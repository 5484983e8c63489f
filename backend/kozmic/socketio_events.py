from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from kozmic import socketio
from kozmic.services.casino import Casino, CasinoError
from kozmic.services.casino.store import Departure


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _casino() -> Casino:
    return current_app.extensions['kozmic']


def _broadcast_leaderboard(room_code: str) -> None:
    emit('updateLeaderboard', _casino().store.leaderboard(room_code), to=room_code)


def _announce_departure(departure: Departure) -> None:
    leave_room(departure.room_code)
    current_app.logger.info(f"[leave] player={departure.player.name} room={departure.room_code}")
    emit('playerLeft', departure.player.id, to=departure.room_code)
    if departure.room_removed:
        current_app.logger.info(f"[cleanup] removed empty room={departure.room_code}")
    else:
        _broadcast_leaderboard(departure.room_code)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    departure = _casino().store.leave(sid)
    if departure:
        _announce_departure(departure)


def handle_create_room(*_args):
    room = _casino().store.create_room()
    current_app.logger.info(f"[create] room={room.code}")
    return {'success': True, 'roomCode': room.code}


def handle_join_room(data=None, *_args):
    data = data if isinstance(data, dict) else {}
    player_name = data.get('playerName')
    if not isinstance(player_name, str):
        player_name = None
    sid = _get_sid()
    store = _casino().store
    try:
        seating = store.join_room(data.get('roomCode'), sid, player_name)
    except CasinoError as exc:
        return {'success': False, 'message': exc.message}
    room, player = seating.room, seating.player
    if seating.rejoined:
        return {'success': True, 'roomCode': room.code, 'players': store.roster(room.code)}
    if seating.departure:
        _announce_departure(seating.departure)
    join_room(room.code)
    current_app.logger.info(f"[join] player={player.name} room={room.code}")
    emit('playerJoined', player.to_dict(), to=room.code)
    _broadcast_leaderboard(room.code)
    return {'success': True, 'roomCode': room.code, 'players': store.roster(room.code)}


def handle_leave_room(room_code=None, *_args):
    sid = _get_sid()
    store = _casino().store
    try:
        departure = store.leave_room(room_code, sid)
    except CasinoError as exc:
        return {'success': False, 'message': exc.message}
    _announce_departure(departure)
    return {'success': True}


def handle_request_spin(room_code=None, *_args):
    sid = _get_sid()
    casino = _casino()
    try:
        outcome = casino.store.spin(room_code, sid, casino.symbols)
    except CasinoError as exc:
        return {'success': False, 'message': exc.message}
    current_app.logger.info(
        f"[spin] room={outcome.room_code} player={outcome.player.name} "
        f"results={''.join(outcome.results)} reward={outcome.reward}"
    )
    emit('spinStarted', {'playerId': sid, 'results': outcome.results}, to=outcome.room_code)
    casino.reveals.schedule(
        current_app._get_current_object(),
        outcome,
        current_app.config.get('SPIN_REVEAL_DELAY_SEC', 1.0),
    )
    return {'success': True, 'results': outcome.results, 'reward': outcome.reward, 'message': outcome.message}


def handle_take_shot(room_code=None, *_args):
    sid = _get_sid()
    try:
        room, player = _casino().store.take_shot(room_code, sid)
    except CasinoError as exc:
        current_app.logger.debug(f"[shot-ignored] sid={sid} reason={exc.message}")
        return
    current_app.logger.info(f"[shot] player={player.name} room={room.code} total={player.shots}")
    emit('playerShot', sid, to=room.code)
    _broadcast_leaderboard(room.code)


def handle_trigger_event(room_code=None, event_type=None, *_args):
    try:
        room = _casino().store.trigger_event(room_code, event_type)
    except CasinoError as exc:
        current_app.logger.debug(f"[event-ignored] sid={_get_sid()} reason={exc.message}")
        return
    current_app.logger.info(f"[cosmic-event] room={room.code} event={event_type}")
    emit('cosmicEvent', event_type, to=room.code)


def handle_send_emoji(room_code=None, emoji=None, *_args):
    sid = _get_sid()
    try:
        room = _casino().store.get_room(room_code)
    except CasinoError as exc:
        current_app.logger.debug(f"[emoji-ignored] sid={sid} reason={exc.message}")
        return
    emit('receiveEmoji', {'playerId': sid, 'emoji': emoji}, to=room.code)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the casino's Socket.IO event handlers on `namespace`."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_event('requestSpin', handle_request_spin, namespace=namespace)
    socketio.on_event('takeShot', handle_take_shot, namespace=namespace)
    socketio.on_event('triggerEvent', handle_trigger_event, namespace=namespace)
    socketio.on_event('sendEmoji', handle_send_emoji, namespace=namespace)
