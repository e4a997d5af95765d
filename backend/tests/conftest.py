import os
import sys
import pytest

# Ensure the backend root (containing the `showdown` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from showdown import create_app, socketio
from showdown.services.games import RoundClock, TriviaSession

NAMESPACE = '/ws'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = NAMESPACE
    ROUND_DURATION_SEC = 30
    ROTATE_MASTER_ON_ROUND_END = False


class ManualScheduler:
    """Collects clock workers instead of running them on a thread.

    Paired with a no-op sleep, run_all() plays every pending countdown to
    the end synchronously.
    """

    def __init__(self):
        self.tasks = []

    def spawn(self, fn, *args):
        self.tasks.append((fn, args))

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def clock(scheduler):
    return RoundClock(default_duration=60, spawn=scheduler.spawn, sleep=lambda seconds: None)


@pytest.fixture()
def published():
    return []


@pytest.fixture()
def session(clock, published):
    trivia = TriviaSession(clock=clock, publish=published.extend)
    yield trivia
    trivia.close()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['trivia_session'].close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
