import os
import sys
import pytest

# Ensure the backend root (containing the `numbergame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from numbergame import create_app, get_engine, socketio
from numbergame.services.games import GameEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    DISCONNECT_GRACE_SEC = 0.2
    MAX_PLAYERS = 20
    MIN_PLAYERS = 2
    DEFAULT_MIN_NUMBER = 1
    DEFAULT_MAX_NUMBER = 100
    ROOM_CODE_LENGTH = 4
    CORS_ORIGINS = ['http://localhost:5173']


class ManualTasks:
    """Stands in for background tasks: collects them until run() is called."""

    def __init__(self):
        self.tasks = []

    def start(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        pass

    def run(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)


def sequential_codes(*codes):
    remaining = list(codes)

    def _next():
        return remaining.pop(0)
    return _next


@pytest.fixture()
def tasks():
    return ManualTasks()


@pytest.fixture()
def make_engine(tasks):
    def _make(*codes, **kwargs):
        codes = codes or ('1234', '5678', '9012', '3456')
        return GameEngine(
            code_generator=sequential_codes(*codes),
            start_background_task=tasks.start,
            sleep=tasks.sleep,
            **kwargs
        )
    return _make


@pytest.fixture()
def engine(make_engine):
    return make_engine()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        # Timers left by disconnecting clients must not fire into later tests
        get_engine(application).scheduler.cancel_all()


@pytest.fixture()
def app_engine(flask_app):
    return get_engine(flask_app)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
