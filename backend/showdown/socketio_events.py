from flask import current_app, request
from flask_socketio import emit
from typing import Iterable

from showdown import socketio
from showdown.services.games.session import EVENT_STATE, Event, TriviaSession


def get_session() -> TriviaSession:
    return current_app.extensions['trivia_session']


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/ws')


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    # Clients may send anything; non-dict payloads count as empty
    return data if isinstance(data, dict) else {}


def deliver(events: Iterable[Event], namespace: str) -> None:
    """Push session events to clients.

    Uses socketio.emit since this may be called from a background task
    (the round clock) outside of any request context.
    """
    for event in events:
        socketio.emit(event.name, event.payload, to=event.to, namespace=namespace)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'message': f'Connected to {_namespace()}'})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    result = get_session().leave(sid)
    deliver(result.events, _namespace())


def handle_player_join(data=None):
    data = _payload(data)
    session = get_session()
    result = session.join(_get_sid(), data.get('name'), bool(data.get('isMaster')))
    deliver(result.events, _namespace())
    # The requester always gets a fresh snapshot, even when rejected
    emit(EVENT_STATE, session.state())
    return result.reply


def handle_game_start(data=None):
    result = get_session().start_round(_get_sid())
    deliver(result.events, _namespace())
    return result.reply


def handle_question_create(data=None):
    data = _payload(data)
    result = get_session().set_question(_get_sid(), data.get('question'), data.get('answer'))
    deliver(result.events, _namespace())
    return result.reply


def handle_answer_submit(data=None):
    data = _payload(data)
    result = get_session().submit_answer(_get_sid(), data.get('answer'))
    deliver(result.events, _namespace())


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the session namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('player:join', handle_player_join, namespace=namespace)
    socketio.on_event('game:start', handle_game_start, namespace=namespace)
    socketio.on_event('question:create', handle_question_create, namespace=namespace)
    socketio.on_event('answer:submit', handle_answer_submit, namespace=namespace)
