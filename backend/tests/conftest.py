import os
import sys
import pytest

# Ensure the backend root (containing the `coinflip` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from coinflip import create_app, db, socketio
from coinflip.services.games import SessionCoordinator


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RECORD_HISTORY = True
    INITIAL_COINS = 5
    HEARTBEAT_INTERVAL_MS = 10000
    DISCONNECT_TIMEOUT_MS = 30000
    FLIP_COOLDOWN_MS = 2000


class RecordingNotifier:
    """Keeps every published event; optionally fails on chosen event names."""

    def __init__(self, fail_on=()):
        self.published = []
        self.fail_on = set(fail_on)

    def publish(self, topic, event, payload):
        if event in self.fail_on:
            raise RuntimeError(f'push for {event} failed')
        self.published.append((topic, event, payload))

    def events(self, name=None):
        return [p for p in self.published if name is None or p[1] == name]

    def names(self):
        return [p[1] for p in self.published]


class FakeClock:
    def __init__(self, start=1_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


class ScriptedRandom:
    """Stands in for random.Random; values below 0.5 are heads."""

    def __init__(self, *values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


HEADS_DRAW = 0.1
TAILS_DRAW = 0.9


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def coordinator(notifier, clock):
    return SessionCoordinator(notifier, clock=clock, rng=ScriptedRandom())


@pytest.fixture()
def paired(coordinator):
    """Alice and Bob in a fresh session; Alice asked second so she moves first."""
    coordinator.login('alice')
    coordinator.login('bob')
    coordinator.request_match('bob')
    session = coordinator.request_match('alice')
    return session


@pytest.fixture()
def flask_app(notifier):
    application = create_app(TestConfig, notifier=notifier)
    with application.app_context():
        # Ensure models are imported so tables are created
        import coinflip.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def socket_app():
    # Real Socket.IO notifier so pushed events reach connected test clients
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(socket_app):
    test_client = socketio.test_client(
        socket_app,
        flask_test_client=socket_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
