import os
import sys
import pytest

# Ensure the backend root (containing the `dicegame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from dicegame import create_app, games_store, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    STARTING_BALANCE = 100
    DEFAULT_BET = 10
    HISTORY_LIMIT = 5
    DICE_SEED = None
    CONTROLLER_DEBOUNCE_MS = 0


class ScriptedDice:
    """Stands in for random.Random and returns dice faces in order."""

    def __init__(self, *faces):
        self._faces = list(faces)

    def push(self, *faces):
        self._faces.extend(faces)

    def randint(self, a, b):
        face = self._faces.pop(0)
        assert a <= face <= b
        return face


@pytest.fixture()
def scripted_dice():
    return ScriptedDice


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    games_store.clear()


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
