import threading
from typing import Set

from flask import request
from flask_socketio import emit
from mission_timer import socketio
from mission_timer.services.interrupts import NAMESPACE


class ConnectionRegistry:
    """Sids of the clients currently connected to the interrupt channel."""

    def __init__(self):
        self._sids: Set[str] = set()
        self._lock = threading.Lock()

    def add(self, sid: str) -> int:
        with self._lock:
            self._sids.add(sid)
            return len(self._sids)

    def remove(self, sid: str) -> int:
        with self._lock:
            self._sids.discard(sid)
            return len(self._sids)

    def __contains__(self, sid) -> bool:
        with self._lock:
            return sid in self._sids

    def __len__(self) -> int:
        with self._lock:
            return len(self._sids)


connections = ConnectionRegistry()


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    count = connections.add(_get_sid())
    emit('connected', {'message': 'Connected to mission timer', 'clients': count})


def handle_disconnect(reason=None):
    connections.remove(_get_sid())


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the interrupt namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
