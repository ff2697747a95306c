import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from mission_timer.engine.session import (
    TICK_INTERVAL_MS,
    MissionResult,
    Session,
    TimerReading,
    format_ms,
    monotonic_ms,
)
from mission_timer.exceptions import MissionTimerError

logger = logging.getLogger(__name__)

STATUS_READY = 'System ready. Waiting for a new mission...'
STATUS_RUNNING = 'Mission in progress... Avoid the laser beams!'
STATUS_SAVING = 'Mission finished! Saving result...'
STATUS_SAVE_FAILED = 'System error. Could not save the mission.'


class Ticker:
    """Calls a callback every ``interval_ms`` on a daemon thread until stopped."""

    def __init__(self, interval_ms: int = TICK_INTERVAL_MS):
        self.interval = interval_ms / 1000.0
        self._stop_event: Optional[threading.Event] = None

    def start(self, callback: Callable[[], Any]) -> None:
        self.stop()
        stop_event = threading.Event()
        self._stop_event = stop_event
        thread = threading.Thread(
            target=self._run, args=(callback, stop_event), name='mission-ticker', daemon=True
        )
        thread.start()

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
            self._stop_event = None

    @property
    def running(self) -> bool:
        return self._stop_event is not None

    def _run(self, callback, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                callback()
            except Exception:
                logger.exception('timer tick failed')


@dataclass(frozen=True)
class FinishOutcome:
    result: MissionResult
    entry: Any = None
    error: Optional[MissionTimerError] = None

    @property
    def saved(self) -> bool:
        return self.error is None


class MissionTimer:
    """Drives one Session: ticking, interrupts, auto-finish and submission.

    The ticker thread and whatever thread delivers interrupts both go
    through ``_lock``, so a tick-triggered auto-finish and an interrupt can
    never interleave on the session. The leaderboard submission runs outside
    the lock while the session sits in Finished: new starts are rejected and
    interrupts are ignored until it settles.

    ``leaderboard`` is anything with ``insert(name, time_ms)``; failures
    must surface as ``MissionTimerError`` subclasses.
    """

    def __init__(
        self,
        leaderboard,
        clock: Callable[[], int] = monotonic_ms,
        ticker: Optional[Ticker] = None,
        on_tick: Optional[Callable[[TimerReading], Any]] = None,
        on_alert: Optional[Callable[[int, Optional[dict]], Any]] = None,
        on_status: Optional[Callable[[str, str], Any]] = None,
        on_finished: Optional[Callable[[FinishOutcome], Any]] = None,
    ):
        self.leaderboard = leaderboard
        self.session = Session(clock=clock)
        self.ticker = ticker or Ticker()
        self.on_tick = on_tick
        self.on_alert = on_alert
        self.on_status = on_status
        self.on_finished = on_finished
        self.status = STATUS_READY
        self._lock = threading.RLock()
        # Bumped by start and reset; lets a pending submission tell it was superseded
        self._generation = 0

    def read(self) -> TimerReading:
        with self._lock:
            return self.session.read()

    def start(self, name) -> TimerReading:
        with self._lock:
            self.session.start(name)
            self._generation += 1
            self.ticker.start(self.tick)
            reading = self.session.read()
            player = self.session.player_name
        logger.info('mission started for %s', player)
        self._set_status(STATUS_RUNNING)
        self._publish(reading)
        return reading

    def tick(self) -> Optional[TimerReading]:
        with self._lock:
            if not self.session.is_running:
                return None
            now = self.session.clock()
            reading = self.session.read(now)
            expired = self.session.is_expired(now)
        self._publish(reading)
        if expired:
            logger.info('maximum mission duration reached, finishing')
            self.finish()
        return reading

    def handle_interrupt(self, payload: Optional[dict] = None) -> bool:
        """Apply one penalty if a mission is running. Each call alerts on its own."""
        with self._lock:
            counted = self.session.interrupt()
            reading = self.session.read()
        if not counted:
            logger.debug('interrupt ignored, no mission running: %s', payload)
            return False
        count = reading.penalty_count
        logger.info('penalty +%ds (total %d)', self.session.penalty_unit_ms // 1000, count)
        if self.on_alert:
            self.on_alert(count, payload)
        self._set_status(f'ALERT! Laser beam touched (+5s)! Total alerts: {count}', 'alert')
        self._publish(reading)
        return True

    def finish(self) -> Optional[FinishOutcome]:
        with self._lock:
            if not self.session.is_running:
                return None
            result = self.session.finish()
            self.ticker.stop()
            generation = self._generation
        self._set_status(STATUS_SAVING)
        entry = None
        error = None
        try:
            entry = self.leaderboard.insert(result.name, result.time_ms)
        except MissionTimerError as exc:
            # The timed result is dropped; there is no local retry queue.
            logger.error('could not save mission for %s (%s): %s', result.name, result.time_ms, exc)
            error = exc
        finally:
            with self._lock:
                superseded = generation != self._generation
                if not superseded:
                    self.session.complete()
        outcome = FinishOutcome(result=result, entry=entry, error=error)
        if superseded:
            logger.info('mission was reset while saving; leaving status untouched')
            return outcome
        if outcome.saved:
            self._set_status(f'Mission recorded: {format_ms(result.time_ms)} - check the Hall of Fame!', 'success')
        else:
            self._set_status(STATUS_SAVE_FAILED, 'error')
        if self.on_finished:
            self.on_finished(outcome)
        return outcome

    def reset(self) -> None:
        with self._lock:
            self.ticker.stop()
            self.session.reset()
            self._generation += 1
            reading = self.session.read()
        self._set_status(STATUS_READY)
        self._publish(reading)

    def _publish(self, reading: TimerReading) -> None:
        if self.on_tick:
            self.on_tick(reading)

    def _set_status(self, message: str, level: str = 'info') -> None:
        self.status = message
        if self.on_status:
            self.on_status(message, level)
