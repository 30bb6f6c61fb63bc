import os
import random
import sys
import pytest

# Ensure the backend root (containing the `onomatoparty` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from onomatoparty import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DECK_ASSET_ROOT = os.path.join(CURRENT_DIR, 'decks-that-do-not-exist')
    CARD_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')
    AUDIT_ENABLED = True
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'


class FirstPick(random.Random):
    """Deterministic RNG: every random index is 0."""

    def randrange(self, *args, **kwargs):
        return 0


@pytest.fixture()
def deck_root(tmp_path):
    animals = tmp_path / 'animals'
    animals.mkdir()
    for name in ('cat.png', 'dog.JPG', 'frog.gif'):
        (animals / name).write_bytes(b'')
    (animals / 'notes.txt').write_text('not a card')
    single = tmp_path / 'single'
    single.mkdir()
    (single / 'card1.png').write_bytes(b'')
    (tmp_path / 'empty').mkdir()
    return tmp_path


@pytest.fixture()
def flask_app(deck_root):
    class DeckConfig(TestConfig):
        DECK_ASSET_ROOT = str(deck_root)

    application = create_app(DeckConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import onomatoparty.models  # noqa: F401
        db.create_all()
        application.extensions['onomatoparty'].registry.rng = FirstPick()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['onomatoparty'].registry


@pytest.fixture()
def make_client(flask_app):
    """Factory for Socket.IO test clients, one per simulated player."""
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


def payloads(test_client, event):
    """Drain the client's queue and return the first argument of each ``event``."""
    return [pkt['args'][0] for pkt in test_client.get_received() if pkt['name'] == event]
