"""Domain errors raised by the room registry and state machine.

The Socket.IO layer decides what each one means for the client: creation and
join failures become an ``error`` event, turn violations are dropped, audit
failures are only logged.
"""


class OnomatopartyError(Exception):
    """Base class for all game errors."""
    reason = 'Unexpected game error'

    def __init__(self, message=None):
        super().__init__(message or self.reason)


class RoomExists(OnomatopartyError):
    reason = 'Room already exists'

    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} already exists")


class RoomNotFound(OnomatopartyError):
    reason = 'Room does not exist'

    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class NameTaken(OnomatopartyError):
    reason = 'Name already taken in this room'

    def __init__(self, room_id, name):
        self.room_id = room_id
        self.name = name
        super().__init__(f"Name {name!r} already taken in room {room_id}")


class NotYourTurn(OnomatopartyError):
    reason = 'Not your turn'

    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} is not the current parent")


class AssetLookupFailed(OnomatopartyError):
    reason = 'Failed to load deck images'

    def __init__(self, deck_name, detail=None):
        self.deck_name = deck_name
        message = f"Could not list cards for deck {deck_name!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class AuditSinkFailed(OnomatopartyError):
    reason = 'Failed to record audit event'
