from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _coordinator():
    return current_app.extensions['onomatoparty']


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Onomatoparty game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'healthy', 'rooms': len(_coordinator().registry)})


@main.route('/api/rooms')
def list_rooms():
    return jsonify({'rooms': _coordinator().registry.room_ids()})


@main.route('/api/decks')
def list_decks():
    """
    Lists the deck names a room can be created with.
    """
    return jsonify({'decks': _coordinator().registry.assets.list_decks()})
