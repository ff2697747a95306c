"""Bridge from a line-oriented serial sensor to the interrupt channel.

The sensor writes one message per line. ``INT`` or ``INTERRUPT`` (any case)
means a beam was broken; ``STATE:<value>`` lines are status reports that
are only logged. Everything else is ignored.
"""

from dataclasses import dataclass
from typing import Optional

import serial

from mission_timer import socketio
from mission_timer.services.interrupts import broadcast_interrupt

INTERRUPT_TOKENS = frozenset({'INT', 'INTERRUPT'})
STATE_PREFIX = 'STATE:'


@dataclass(frozen=True)
class SensorSignal:
    kind: str  # 'interrupt', 'state' or 'noise'
    value: Optional[str] = None


def classify_line(line) -> SensorSignal:
    msg = str(line).strip()
    upper = msg.upper()
    if upper in INTERRUPT_TOKENS:
        return SensorSignal('interrupt')
    if upper.startswith(STATE_PREFIX):
        state = msg.split(':', 1)[1].strip()
        return SensorSignal('state', state or None)
    return SensorSignal('noise', msg or None)


class SerialBridge:
    def __init__(self, app, port: str, baud_rate: int = 9600, read_timeout: float = 1.0):
        self.app = app
        self.port = port
        self.baud_rate = int(baud_rate)
        self.read_timeout = read_timeout
        self._running = False

    def start(self) -> None:
        self._running = True
        socketio.start_background_task(self.run)

    def stop(self) -> None:
        self._running = False

    def handle_line(self, line) -> SensorSignal:
        signal = classify_line(line)
        with self.app.app_context():
            self.app.logger.info(f"[serial] {str(line).strip()}")
            if signal.kind == 'interrupt':
                broadcast_interrupt()
            elif signal.kind == 'state' and signal.value:
                self.app.logger.info(f"[sensor] state={signal.value}")
        return signal

    def run(self) -> None:
        try:
            conn = serial.Serial(self.port, self.baud_rate, timeout=self.read_timeout)
        except serial.SerialException as exc:
            self.app.logger.warning(f"[serial] could not open {self.port}: {exc}")
            self._running = False
            return
        self.app.logger.info(f"[serial] listening on {self.port} @ {self.baud_rate}")
        self._running = True
        try:
            with conn:
                while self._running:
                    raw = conn.readline()
                    if not raw:
                        # Read timeout; yield to other green threads if any
                        socketio.sleep(0)
                        continue
                    self.handle_line(raw.decode('utf-8', errors='replace'))
        except serial.SerialException as exc:
            self.app.logger.error(f"[serial] error on {self.port}: {exc}")
        finally:
            self._running = False
