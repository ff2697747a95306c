import time
from typing import Optional

from flask import current_app

from mission_timer import socketio

INTERRUPT_EVENT = 'interrupt'
NAMESPACE = '/'


def broadcast_interrupt(source: Optional[str] = None) -> dict:
    """Push one interrupt notification to every connected client.

    Fire-and-forget: there is no acknowledgment and nothing is queued for
    clients that are not connected right now.
    """
    payload = {'at': int(time.time() * 1000)}
    if source:
        payload['source'] = source
    socketio.emit(INTERRUPT_EVENT, payload, namespace=NAMESPACE)
    current_app.logger.info(f"[interrupt] penalty +5s broadcast source={source or 'sensor'} at={payload['at']}")
    return payload
