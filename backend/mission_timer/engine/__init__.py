"""Timer & penalty engine: the mission session and the driver that ticks it."""

from mission_timer.engine.session import (  # noqa: F401
    MAX_DURATION_MS,
    PENALTY_UNIT_MS,
    TICK_INTERVAL_MS,
    MissionResult,
    Session,
    SessionState,
    TimerReading,
    format_ms,
)
from mission_timer.engine.timer import FinishOutcome, MissionTimer, Ticker  # noqa: F401
