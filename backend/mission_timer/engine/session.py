"""Mission session state machine.

A session moves Idle -> Running -> Finished -> Idle. Finished only lasts
while the result is being submitted; ``complete()`` ends it. ``reset()``
returns to Idle from anywhere.

The session never reads the wall clock on its own: every timestamp comes
from the injected ``clock`` (milliseconds), which keeps it deterministic
under test.
"""

import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional

from mission_timer.exceptions import InvalidTransition
from mission_timer.validation import clean_name

PENALTY_UNIT_MS = 5000
MAX_DURATION_MS = 2 * 60 * 1000
TICK_INTERVAL_MS = 50


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def format_ms(ms: int) -> str:
    """Render milliseconds as MM:SS.mmm."""
    ms = max(0, int(ms))
    minutes, rest = divmod(ms, 60000)
    seconds, millis = divmod(rest, 1000)
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"


class SessionState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    FINISHED = 'finished'


@dataclass(frozen=True)
class TimerReading:
    state: SessionState
    elapsed_ms: int
    penalty_count: int
    total_ms: int


@dataclass(frozen=True)
class MissionResult:
    name: str
    elapsed_ms: int
    penalty_count: int
    time_ms: int


class Session:
    def __init__(
        self,
        clock: Callable[[], int] = monotonic_ms,
        penalty_unit_ms: int = PENALTY_UNIT_MS,
        max_duration_ms: int = MAX_DURATION_MS,
    ):
        self.clock = clock
        self.penalty_unit_ms = penalty_unit_ms
        self.max_duration_ms = max_duration_ms
        self.state = SessionState.IDLE
        self.player_name: Optional[str] = None
        self.started_at: Optional[int] = None
        self.finished_at: Optional[int] = None
        self.penalty_count = 0

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    def start(self, name) -> None:
        player = clean_name(name)
        if self.state is not SessionState.IDLE:
            raise InvalidTransition(f"cannot start a mission while {self.state.value}")
        self.player_name = player
        self.started_at = self.clock()
        self.finished_at = None
        self.penalty_count = 0
        self.state = SessionState.RUNNING

    def interrupt(self) -> bool:
        """Count one penalty. Returns False, changing nothing, unless running."""
        if self.state is not SessionState.RUNNING:
            return False
        self.penalty_count += 1
        return True

    def elapsed_ms(self, now: Optional[int] = None) -> int:
        if self.started_at is None:
            return 0
        if self.finished_at is not None:
            return self.finished_at - self.started_at
        if now is None:
            now = self.clock()
        return max(0, now - self.started_at)

    def total_ms(self, now: Optional[int] = None) -> int:
        return self.elapsed_ms(now) + self.penalty_count * self.penalty_unit_ms

    def read(self, now: Optional[int] = None) -> TimerReading:
        if now is None:
            now = self.clock()
        elapsed = self.elapsed_ms(now)
        return TimerReading(
            state=self.state,
            elapsed_ms=elapsed,
            penalty_count=self.penalty_count,
            total_ms=elapsed + self.penalty_count * self.penalty_unit_ms,
        )

    def is_expired(self, now: Optional[int] = None) -> bool:
        return self.is_running and self.elapsed_ms(now) >= self.max_duration_ms

    def finish(self) -> MissionResult:
        """Freeze the clock and penalties and compute the final time."""
        if self.state is not SessionState.RUNNING:
            raise InvalidTransition(f"cannot finish a mission while {self.state.value}")
        self.finished_at = self.clock()
        self.state = SessionState.FINISHED
        elapsed = self.elapsed_ms()
        return MissionResult(
            name=self.player_name,
            elapsed_ms=elapsed,
            penalty_count=self.penalty_count,
            time_ms=elapsed + self.penalty_count * self.penalty_unit_ms,
        )

    def complete(self) -> None:
        """Leave Finished once the submission has settled."""
        if self.state is SessionState.FINISHED:
            self._clear()

    def reset(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.state = SessionState.IDLE
        self.player_name = None
        self.started_at = None
        self.finished_at = None
        self.penalty_count = 0
