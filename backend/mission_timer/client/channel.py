from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from mission_timer.exceptions import ChannelUnavailable

logger = logging.getLogger(__name__)

INTERRUPT_EVENT = "interrupt"


class InterruptChannel:
    """Subscribes to the server's interrupt broadcast.

    Every ``interrupt`` event is handed to ``on_interrupt`` in arrival order.
    Reconnection is automatic; anything broadcast while disconnected is lost.
    """

    def __init__(self, url: str, on_interrupt: Callable[[Optional[dict]], Any],
                 on_warning: Optional[Callable[[str], Any]] = None,
                 client: Optional[socketio.Client] = None) -> None:
        self.url = url
        self.on_interrupt = on_interrupt
        self.on_warning = on_warning
        self.sio = client or socketio.Client(reconnection=True)
        self.sio.on("connect", self._handle_connect)
        self.sio.on("disconnect", self._handle_disconnect)
        self.sio.on(INTERRUPT_EVENT, self._handle_interrupt)

    @property
    def connected(self) -> bool:
        return bool(self.sio.connected)

    def connect(self, wait_timeout: float = 5.0) -> None:
        try:
            self.sio.connect(self.url, wait_timeout=wait_timeout)
        except SocketConnectionError as exc:
            raise ChannelUnavailable(
                f"Real-time channel unavailable at {self.url}; penalties will not be counted automatically ({exc})"
            ) from exc

    def close(self) -> None:
        if self.sio.connected:
            self.sio.disconnect()

    def _handle_connect(self) -> None:
        logger.info("Connected to %s", self.url)

    def _handle_disconnect(self, reason: Any = None) -> None:
        logger.warning("Real-time channel disconnected (%s)", reason)
        if self.on_warning:
            self.on_warning("Real-time channel disconnected; reconnecting...")

    def _handle_interrupt(self, data: Any = None) -> None:
        self.on_interrupt(data if isinstance(data, dict) else None)
