from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
socketio = SocketIO(async_mode=None)


def _parse_origins(value):
    if not value or value == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _parse_origins(flask_app.config.get('CORS_ORIGINS'))
    db.init_app(flask_app)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app; handlers look it up through current_app
    from onomatoparty.services.game import DeckAssets, RoomRegistry
    from onomatoparty.services.game.audit import AuditSink
    from onomatoparty.socketio_events import SessionCoordinator, register_socketio_handlers

    assets = DeckAssets(
        flask_app.config['DECK_ASSET_ROOT'],
        flask_app.config.get('CARD_EXTENSIONS', ('.jpg', '.jpeg', '.png', '.gif')),
    )
    coordinator = SessionCoordinator(
        registry=RoomRegistry(assets),
        audit=AuditSink(flask_app),
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'),
    )
    flask_app.extensions['onomatoparty'] = coordinator
    register_socketio_handlers(namespace=coordinator.namespace)

    from onomatoparty.main import main
    flask_app.register_blueprint(main)

    @click.command('init-db')
    def init_db_command():
        """Creates the audit log tables."""
        import onomatoparty.models  # noqa: F401
        with flask_app.app_context():
            db.create_all()
            print('Audit log tables are ready!')

    flask_app.cli.add_command(init_db_command)

    flask_app.logger.info(
        f"[startup] decks={assets.root} namespace={coordinator.namespace} audit={'on' if coordinator.audit.enabled else 'off'}"
    )
    return flask_app
