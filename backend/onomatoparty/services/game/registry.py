import random
import threading
from collections import namedtuple
from typing import Dict, List, Optional

from onomatoparty.exceptions import RoomExists, RoomNotFound
from .deck import shuffle_deck
from .room import Player, Room

Removal = namedtuple('Removal', ['room_deleted', 'remaining_players'])


class RoomRegistry:
    """Owns every live room, keyed by room id in creation order.

    The mapping is guarded by one registry lock. Work on a single room is
    serialized by that room's own lock (``room.lock``), so unrelated rooms
    never wait on each other. When both are needed the room lock is taken
    first.
    """

    def __init__(self, assets, rng: Optional[random.Random] = None):
        self.assets = assets
        self.rng = rng or random.Random()
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id):
        with self._lock:
            return room_id in self._rooms

    def get(self, room_id) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def create_room(self, room_id, creator_id, creator_name, deck_name) -> Room:
        with self._lock:
            if room_id in self._rooms:
                raise RoomExists(room_id)
            cards = self.assets.list_cards(deck_name)
            deck = shuffle_deck(cards, self.rng)
            room = Room(room_id, Player(id=creator_id, name=creator_name), deck, deck_name)
            self._rooms[room_id] = room
            return room

    def join_room(self, room_id, name, player_id) -> Player:
        room = self.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        with room.lock:
            return room.add_player(player_id, name)

    def remove_player(self, room_id, player_id) -> Removal:
        room = self.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        # Room lock first, registry lock second, same as the coordinator.
        with room.lock:
            room.remove_player(player_id)
            if not room.players:
                self.delete(room_id)
                return Removal(True, [])
            return Removal(False, list(room.players))

    def rooms_with_player(self, player_id) -> List[Room]:
        with self._lock:
            return [room for room in self._rooms.values() if room.has_player(player_id)]

    def delete(self, room_id) -> bool:
        with self._lock:
            return self._rooms.pop(room_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()
