import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # The audit log is the only persisted state; its URL doubles as the sink credential.
    SQLALCHEMY_DATABASE_URI = (
        os.environ.get('AUDIT_DATABASE_URL')
        or os.environ.get('DATABASE_URL')
        or 'sqlite:///' + os.path.join(basedir, 'onomatoparty.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '5001'))
    # Each deck is a sub-directory of image files
    DECK_ASSET_ROOT = os.environ.get('DECK_ASSET_ROOT') or os.path.join(basedir, '..', 'public', 'images')
    CARD_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')
    AUDIT_ENABLED = os.environ.get('AUDIT_ENABLED', '1') not in ('0', 'false', 'False')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
