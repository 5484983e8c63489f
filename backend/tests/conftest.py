import os
import sys
import pytest

# Ensure the backend root (containing the `kozmic` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from kozmic import create_app, socketio
from kozmic.services.casino import SequenceSymbolSource


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGIN = '*'
    STATIC_DIR = None
    MAX_PLAYERS = 8
    SPIN_COST = 50
    STARTING_CTOK = 1000
    ROOM_CODE_LENGTH = 6
    SPIN_REVEAL_DELAY_SEC = 0
    ROOM_MAX_AGE_SEC = 2 * 60 * 60
    JANITOR_INTERVAL_SEC = 60 * 60


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def draws():
    """Scripted spins; tests append the draws they want served next."""
    return []


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def flask_app(draws, clock):
    application = create_app(TestConfig, symbol_source=SequenceSymbolSource(_drain(draws)), clock=clock)
    with application.app_context():
        yield application


def _drain(draws):
    # Reads lazily so draws appended after app creation are still served
    while True:
        yield draws.pop(0)


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['kozmic'].store


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
