import os
import sys
import pytest

# Ensure the backend root (containing the `mission_timer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from mission_timer import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEADERBOARD_LIMIT = 100
    SERIAL_PORT = None
    SERIAL_BAUD_RATE = 9600
    CORS_ORIGINS = '*'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class ManualTicker:
    """Ticker stand-in: records start/stop, never spawns a thread."""

    def __init__(self):
        self.callback = None
        self.starts = 0
        self.stops = 0

    def start(self, callback):
        self.callback = callback
        self.starts += 1

    def stop(self):
        self.stops += 1
        self.callback = None

    @property
    def running(self):
        return self.callback is not None


class FakeLeaderboard:
    def __init__(self, error=None):
        self.error = error
        self.inserted = []

    def insert(self, name, time_ms):
        if self.error is not None:
            raise self.error
        self.inserted.append((name, time_ms))
        return {'id': f'id{len(self.inserted)}', 'name': name, 'timeMs': time_ms}


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def ticker():
    return ManualTicker()


@pytest.fixture()
def store():
    return FakeLeaderboard()
