from typing import Set

from flask import current_app, request
from flask_socketio import join_room as join_channel

from onomatoparty import socketio
from onomatoparty.exceptions import AssetLookupFailed, NameTaken, NotYourTurn, RoomExists, RoomNotFound
from onomatoparty.services.game.room import Audience, Outcome


def _channel(room_id) -> str:
    return f"room:{room_id}"


class SessionCoordinator:
    """Turns Socket.IO events into registry/room operations.

    Each room-addressed operation runs under that room's lock. The resulting
    notifications are emitted here; audit records go to the audit sink.
    """

    def __init__(self, registry, audit, namespace='/'):
        self.registry = registry
        self.audit = audit
        self.namespace = namespace
        self.connected: Set[str] = set()

    # ---- connection lifecycle ----

    def connect(self, sid):
        self.connected.add(sid)
        current_app.logger.info(f"[connect] sid={sid}")

    def disconnect(self, sid):
        self.connected.discard(sid)
        for room in self.registry.rooms_with_player(sid):
            try:
                removal = self.registry.remove_player(room.id, sid)
            except RoomNotFound:
                continue
            if removal.room_deleted:
                current_app.logger.info(f"[room-delete] room={room.id} reason=empty")
                self._broadcast_rooms()
            else:
                self._emit_room(room.id, 'updatePlayers', [p.to_dict() for p in removal.remaining_players])
        current_app.logger.info(f"[disconnect] sid={sid}")

    # ---- lobby ----

    def create_room(self, sid, room_id, player_name, deck_name):
        try:
            room = self.registry.create_room(room_id, sid, player_name, deck_name)
        except RoomExists as exc:
            self._emit_error(sid, exc)
            return
        except AssetLookupFailed as exc:
            current_app.logger.error(f"[room-create-fail] room={room_id} deck={deck_name} error={exc}")
            self._emit_error(sid, exc)
            return
        current_app.logger.info(f"[room-create] room={room.id} deck={deck_name} cards={len(room.deck)} by={player_name}")
        join_channel(_channel(room.id), sid=sid, namespace=self.namespace)
        self._broadcast_rooms()
        self._emit_room(room.id, 'updatePlayers', room.players_payload())

    def join_room(self, sid, room_id, player_name):
        room = self.registry.get(room_id)
        try:
            if room is None:
                raise RoomNotFound(room_id)
            # Snapshot the seats under the same lock as the join
            with room.lock:
                self.registry.join_room(room_id, player_name, sid)
                players = room.players_payload()
        except (RoomNotFound, NameTaken) as exc:
            self._emit_error(sid, exc)
            return
        current_app.logger.info(f"[room-join] room={room_id} player={player_name} players={len(players)}")
        join_channel(_channel(room_id), sid=sid, namespace=self.namespace)
        self._emit_room(room_id, 'updatePlayers', players)

    def send_rooms(self, sid):
        socketio.emit('roomsList', self.registry.room_ids(), to=sid, namespace=self.namespace)

    # ---- turn flow ----

    def start_game(self, sid, room_id):
        self._run(room_id, lambda room: room.start_game(self.registry.rng))

    def draw_card(self, sid, room_id):
        self._run(room_id, lambda room: room.draw_card(sid))

    def submit_answer(self, sid, room_id, text, player_name):
        self._run(room_id, lambda room: room.submit_answer(sid, text, player_name))

    def choose_answer(self, sid, room_id, text):
        self._run(room_id, lambda room: room.choose_answer(text))

    def next_turn(self, sid, room_id):
        self._run(room_id, lambda room: room.force_next_turn())

    # ---- helpers ----

    def _run(self, room_id, operation):
        room = self.registry.get(room_id)
        if room is None:
            current_app.logger.debug(f"[room-missing] room={room_id}")
            return
        with room.lock:
            try:
                outcome = operation(room)
            except NotYourTurn as exc:
                current_app.logger.debug(f"[out-of-turn] room={room_id} sid={exc.player_id}")
                return
            self._dispatch(room, outcome)

    def _dispatch(self, room, outcome: Outcome):
        for record in outcome.audit_records:
            self.audit.record(record)
        for note in outcome.notifications:
            if note.audience == Audience.ROOM:
                self._emit_room(room.id, note.event, note.payload)
            elif note.audience == Audience.PLAYER:
                if note.require_connected and note.sid not in self.connected:
                    current_app.logger.info(f"[skip-emit] room={room.id} event={note.event} sid={note.sid} offline")
                    continue
                socketio.emit(note.event, note.payload, to=note.sid, namespace=self.namespace)
            else:
                socketio.emit(note.event, note.payload, namespace=self.namespace)
        if outcome.finished:
            self.registry.delete(room.id)
            socketio.close_room(_channel(room.id), namespace=self.namespace)
            current_app.logger.info(f"[game-over] room={room.id} rounds={room.round_count}")
            self._broadcast_rooms()

    def _emit_room(self, room_id, event, payload):
        socketio.emit(event, payload, to=_channel(room_id), namespace=self.namespace)

    def _broadcast_rooms(self):
        socketio.emit('roomsList', self.registry.room_ids(), namespace=self.namespace)

    def _emit_error(self, sid, exc):
        current_app.logger.info(f"[error] sid={sid} reason={exc.reason} detail={exc}")
        socketio.emit('error', exc.reason, to=sid, namespace=self.namespace)


def _coordinator() -> SessionCoordinator:
    return current_app.extensions['onomatoparty']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(args, *keys):
    """Accept either one dict of named fields or positional arguments."""
    if len(args) == 1 and isinstance(args[0], dict):
        return tuple(args[0].get(key) for key in keys)
    values = list(args[:len(keys)])
    return tuple(values + [None] * (len(keys) - len(values)))


def handle_connect(auth=None):
    _coordinator().connect(_get_sid())


def handle_disconnect(reason=None):
    _coordinator().disconnect(_get_sid())


def handle_create_room(*args):
    room_id, player_name, deck_name = _payload(args, 'roomId', 'playerName', 'deckName')
    _coordinator().create_room(_get_sid(), room_id, player_name, deck_name)


def handle_join_room(*args):
    room_id, player_name = _payload(args, 'roomId', 'playerName')
    _coordinator().join_room(_get_sid(), room_id, player_name)


def handle_start_game(*args):
    room_id, = _payload(args, 'roomId')
    _coordinator().start_game(_get_sid(), room_id)


def handle_draw_card(*args):
    room_id, = _payload(args, 'roomId')
    _coordinator().draw_card(_get_sid(), room_id)


def handle_submit_onomatopoeia(*args):
    room_id, text, player_name = _payload(args, 'roomId', 'text', 'playerName')
    _coordinator().submit_answer(_get_sid(), room_id, text, player_name)


def handle_choose_onomatopoeia(*args):
    room_id, text = _payload(args, 'roomId', 'text')
    _coordinator().choose_answer(_get_sid(), room_id, text)


def handle_next_turn(*args):
    room_id, = _payload(args, 'roomId')
    _coordinator().next_turn(_get_sid(), room_id)


def handle_get_rooms(*args):
    _coordinator().send_rooms(_get_sid())


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
    socketio.on_event('drawCard', handle_draw_card, namespace=namespace)
    socketio.on_event('submitOnomatopoeia', handle_submit_onomatopoeia, namespace=namespace)
    socketio.on_event('chooseOnomatopoeia', handle_choose_onomatopoeia, namespace=namespace)
    socketio.on_event('nextTurn', handle_next_turn, namespace=namespace)
    socketio.on_event('getRooms', handle_get_rooms, namespace=namespace)
