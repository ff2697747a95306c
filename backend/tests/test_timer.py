import threading

import pytest

from mission_timer.engine import MAX_DURATION_MS, TICK_INTERVAL_MS, MissionTimer, SessionState, Ticker
from mission_timer.engine.timer import STATUS_READY, STATUS_SAVE_FAILED
from mission_timer.exceptions import InvalidTransition, TransportError, ValidationError

from conftest import FakeLeaderboard


def make_timer(store, clock, ticker, **callbacks):
    return MissionTimer(store, clock=clock, ticker=ticker, **callbacks)


def test_start_runs_ticker_and_publishes(store, clock, ticker):
    readings = []
    timer = make_timer(store, clock, ticker, on_tick=readings.append)
    timer.start('AGENT1')
    assert timer.session.state is SessionState.RUNNING
    assert ticker.starts == 1
    clock.advance(TICK_INTERVAL_MS)
    ticker.callback()
    assert readings[-1].elapsed_ms == TICK_INTERVAL_MS


def test_start_with_blank_name_stays_idle(store, clock, ticker):
    timer = make_timer(store, clock, ticker)
    with pytest.raises(ValidationError):
        timer.start('   ')
    assert timer.session.state is SessionState.IDLE
    assert ticker.starts == 0


def test_second_start_does_not_spawn_second_ticker(store, clock, ticker):
    timer = make_timer(store, clock, ticker)
    timer.start('AGENT1')
    with pytest.raises(InvalidTransition):
        timer.start('AGENT1')
    assert ticker.starts == 1


def test_scenario_submits_total_with_penalties(store, clock, ticker):
    finished = []
    timer = make_timer(store, clock, ticker, on_finished=finished.append)
    timer.start('AGENT1')
    clock.advance(1000)
    timer.handle_interrupt({'at': 1000})
    clock.advance(500)
    timer.handle_interrupt({'at': 1500})
    clock.advance(1500)
    outcome = timer.finish()

    assert outcome.saved
    assert outcome.result.penalty_count == 2
    assert outcome.result.elapsed_ms == 3000
    assert outcome.result.time_ms == 13000
    assert store.inserted == [('AGENT1', 13000)]
    assert finished == [outcome]
    assert timer.session.state is SessionState.IDLE
    assert not ticker.running
    assert timer.status.startswith('Mission recorded: 00:13.000')


def test_each_interrupt_alerts_independently(store, clock, ticker):
    alerts = []
    timer = make_timer(store, clock, ticker, on_alert=lambda count, payload: alerts.append(count))
    timer.start('AGENT1')
    for _ in range(3):
        assert timer.handle_interrupt()
    assert alerts == [1, 2, 3]
    assert timer.session.penalty_count == 3


def test_interrupt_ignored_when_idle(store, clock, ticker):
    alerts = []
    timer = make_timer(store, clock, ticker, on_alert=lambda *a: alerts.append(a))
    assert not timer.handle_interrupt({'at': 1})
    assert alerts == []
    assert timer.session.penalty_count == 0


def test_auto_finish_fires_exactly_once(store, clock, ticker):
    timer = make_timer(store, clock, ticker)
    timer.start('AGENT1')
    callback = ticker.callback
    clock.advance(MAX_DURATION_MS - TICK_INTERVAL_MS)
    callback()
    assert store.inserted == []

    clock.advance(TICK_INTERVAL_MS)
    callback()
    assert store.inserted == [('AGENT1', MAX_DURATION_MS)]

    clock.advance(TICK_INTERVAL_MS)
    assert callback() is None
    assert timer.finish() is None
    assert len(store.inserted) == 1


def test_auto_finish_includes_penalties(store, clock, ticker):
    timer = make_timer(store, clock, ticker)
    timer.start('AGENT1')
    timer.handle_interrupt()
    clock.advance(MAX_DURATION_MS + 20)
    timer.tick()
    assert store.inserted == [('AGENT1', MAX_DURATION_MS + 20 + 5000)]


def test_submission_failure_returns_to_idle_with_error(clock, ticker):
    store = FakeLeaderboard(error=TransportError('connection refused'))
    finished = []
    timer = make_timer(store, clock, ticker, on_finished=finished.append)
    timer.start('AGENT1')
    clock.advance(4000)
    outcome = timer.finish()
    assert not outcome.saved
    assert isinstance(outcome.error, TransportError)
    assert outcome.result.time_ms == 4000
    assert timer.session.state is SessionState.IDLE
    assert timer.status == STATUS_SAVE_FAILED
    assert finished == [outcome]


def test_pending_submission_rejects_start_and_ignores_interrupts(clock, ticker):
    seen = {}

    class SlowLeaderboard:
        def insert(self, name, time_ms):
            seen['state'] = timer.session.state
            seen['interrupt'] = timer.handle_interrupt()
            with pytest.raises(InvalidTransition):
                timer.start('AGENT2')
            return {'id': 'x', 'name': name, 'timeMs': time_ms}

    timer = make_timer(SlowLeaderboard(), clock, ticker)
    timer.start('AGENT1')
    clock.advance(1000)
    outcome = timer.finish()
    assert seen == {'state': SessionState.FINISHED, 'interrupt': False}
    assert outcome.result.penalty_count == 0
    assert timer.session.state is SessionState.IDLE


def test_reset_clears_mission(store, clock, ticker):
    statuses = []
    timer = make_timer(store, clock, ticker, on_status=lambda msg, level: statuses.append(msg))
    timer.start('AGENT1')
    timer.handle_interrupt()
    timer.reset()
    assert timer.session.state is SessionState.IDLE
    assert timer.session.started_at is None
    assert timer.session.penalty_count == 0
    assert not ticker.running
    assert statuses[-1] == STATUS_READY
    assert store.inserted == []


def test_finish_when_idle_is_noop(store, clock, ticker):
    timer = make_timer(store, clock, ticker)
    assert timer.finish() is None
    assert store.inserted == []


def test_ticker_thread_calls_back_until_stopped():
    calls = []
    fired = threading.Event()

    def callback():
        calls.append(1)
        if len(calls) >= 2:
            fired.set()

    ticker = Ticker(interval_ms=5)
    ticker.start(callback)
    assert fired.wait(2.0)
    ticker.stop()
    assert not ticker.running


def test_reset_while_saving_keeps_ready_status(clock, ticker):
    finished = []
    statuses = []

    class ResettingLeaderboard:
        def insert(self, name, time_ms):
            timer.reset()
            return {'id': 'x', 'name': name, 'timeMs': time_ms}

    timer = make_timer(ResettingLeaderboard(), clock, ticker, on_finished=finished.append,
                       on_status=lambda msg, level: statuses.append(msg))
    timer.start('AGENT1')
    clock.advance(1000)
    outcome = timer.finish()
    assert outcome.saved
    assert finished == []
    assert timer.status == STATUS_READY
    assert statuses[-1] == STATUS_READY
    assert timer.session.state is SessionState.IDLE


def test_new_mission_started_while_saving_is_left_running(clock, ticker):
    class RestartingLeaderboard:
        def insert(self, name, time_ms):
            timer.reset()
            timer.start('AGENT2')
            return {'id': 'x', 'name': name, 'timeMs': time_ms}

    timer = make_timer(RestartingLeaderboard(), clock, ticker)
    timer.start('AGENT1')
    timer.finish()
    assert timer.session.state is SessionState.RUNNING
    assert timer.session.player_name == 'AGENT2'


def test_interrupts_racing_auto_finish_are_counted_once(clock, ticker):
    """Interrupt threads hammer the timer while tick threads cross the limit."""
    store = FakeLeaderboard()
    store_lock = threading.Lock()
    original_insert = store.insert

    def insert(name, time_ms):
        with store_lock:
            return original_insert(name, time_ms)

    store.insert = insert
    timer = make_timer(store, clock, ticker)
    timer.start('AGENT1')
    clock.advance(MAX_DURATION_MS)

    accepted = []
    barrier = threading.Barrier(6)

    def interrupter():
        barrier.wait()
        hits = 0
        for _ in range(200):
            if timer.handle_interrupt():
                hits += 1
        accepted.append(hits)

    def ticking():
        barrier.wait()
        for _ in range(50):
            timer.tick()

    threads = [threading.Thread(target=interrupter) for _ in range(4)]
    threads += [threading.Thread(target=ticking) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)

    assert len(store.inserted) == 1
    _, time_ms = store.inserted[0]
    counted = sum(accepted)
    assert time_ms == MAX_DURATION_MS + counted * 5000
    assert timer.session.state is SessionState.IDLE
    assert timer.session.penalty_count == 0
