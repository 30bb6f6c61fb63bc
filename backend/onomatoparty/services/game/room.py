"""Per-room turn, submission and scoring logic.

A ``Room`` knows nothing about sockets. Every operation mutates the room and
returns an ``Outcome`` describing what should be sent where, which audit
records to write, and whether the game is over. The Socket.IO layer does the
actual fan-out.
"""
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from onomatoparty.exceptions import NameTaken, NotYourTurn
from .scoring import award_group, final_standings


class Phase(str, Enum):
    LOBBY = 'lobby'
    TURN_START = 'turn_start'
    AWAITING_SUBMISSIONS = 'awaiting_submissions'
    AWAITING_CHOICE = 'awaiting_choice'
    GAME_OVER = 'game_over'


class Audience(str, Enum):
    ROOM = 'room'
    PLAYER = 'player'
    ALL = 'all'


@dataclass
class Player:
    id: str
    name: str
    points: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'points': self.points,
        }


@dataclass
class SubmissionGroup:
    text: str
    submitter_ids: List[str] = field(default_factory=list)

    def add(self, player_id: str) -> bool:
        if player_id in self.submitter_ids:
            return False
        self.submitter_ids.append(player_id)
        return True

    def to_dict(self):
        return {
            'onomatopoeia': self.text,
            'playerIds': list(self.submitter_ids),
        }


@dataclass
class Notification:
    event: str
    payload: Any
    audience: Audience = Audience.ROOM
    sid: Optional[str] = None
    # Only deliver if the target connection is still open.
    require_connected: bool = False


@dataclass
class Outcome:
    notifications: List[Notification] = field(default_factory=list)
    audit_records: List[Dict[str, Any]] = field(default_factory=list)
    finished: bool = False

    def to_room(self, event, payload):
        self.notifications.append(Notification(event, payload))

    def to_player(self, sid, event, payload, require_connected=False):
        self.notifications.append(
            Notification(event, payload, Audience.PLAYER, sid, require_connected)
        )

    def extend(self, other: 'Outcome') -> 'Outcome':
        self.notifications.extend(other.notifications)
        self.audit_records.extend(other.audit_records)
        self.finished = self.finished or other.finished
        return self


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class Room:
    def __init__(self, room_id: str, creator: Player, deck: List[str], deck_name: str):
        self.id = room_id
        self.players: List[Player] = [creator]
        self.deck = deck
        self.deck_name = deck_name
        self.current_turn_index = 0
        self.current_card: Optional[str] = None
        self.round_count = 1
        self.submission_groups: List[SubmissionGroup] = []
        self.usage_stats: Dict[str, Dict[str, int]] = {}
        self.phase = Phase.LOBBY
        self.lock = threading.RLock()

    def __repr__(self):
        return f"<Room {self.id} players={len(self.players)} deck={len(self.deck)} round={self.round_count}>"

    # ---- membership ----

    @property
    def parent(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_turn_index]

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def add_player(self, player_id: str, name: str) -> Player:
        if any(p.name == name for p in self.players):
            raise NameTaken(self.id, name)
        player = Player(id=player_id, name=name)
        self.players.append(player)
        return player

    def remove_player(self, player_id: str) -> bool:
        remaining = [p for p in self.players if p.id != player_id]
        if len(remaining) == len(self.players):
            return False
        self.players = remaining
        # Keep the parent index pointing at a seat; the round itself is left
        # as is, even if the parent or a pending submitter just left.
        if self.players and self.current_turn_index >= len(self.players):
            self.current_turn_index %= len(self.players)
        return True

    def players_payload(self):
        return [p.to_dict() for p in self.players]

    def groups_payload(self):
        return [g.to_dict() for g in self.submission_groups]

    # ---- turn flow ----

    def start_game(self, rng=None) -> Outcome:
        rng = rng or random
        self.current_turn_index = rng.randrange(len(self.players))
        self.phase = Phase.TURN_START
        outcome = Outcome()
        outcome.to_room('updateRoomInfo', {'deckName': self.deck_name})
        outcome.to_room('gameStarted', self.parent.to_dict())
        return outcome

    def draw_card(self, requester_id: str) -> Outcome:
        parent = self.parent
        if parent is None or requester_id != parent.id:
            raise NotYourTurn(requester_id)
        if not self.deck:
            return self.end_game()
        self.current_card = self.deck.pop()
        self.phase = Phase.AWAITING_SUBMISSIONS
        outcome = Outcome()
        outcome.to_room('cardDrawn', self.current_card)
        return outcome

    def submit_answer(self, submitter_id: str, text: str, player_name: Optional[str] = None) -> Outcome:
        usage = self.usage_stats.setdefault(submitter_id, {})
        usage[text] = usage.get(text, 0) + 1

        group = self._find_group(text)
        if group is None:
            group = SubmissionGroup(text=text)
            self.submission_groups.append(group)
        group.add(submitter_id)

        outcome = Outcome()
        outcome.audit_records.append({
            'event_type': 'answer',
            'room_id': self.id,
            'round': self.round_count,
            'card_name': self.current_card,
            'onomatopoeia': text,
            'player_id': submitter_id,
            'player_name': player_name,
            'timestamp': _timestamp(),
        })

        # Checked on every submission, so a room that shrank after a disconnect
        # can complete on a repeat; the phase keeps it to one delivery.
        if self.phase != Phase.AWAITING_CHOICE and self.submission_count() == len(self.players) - 1:
            self.phase = Phase.AWAITING_CHOICE
            parent = self.parent
            outcome.to_player(parent.id, 'onomatopoeiaList', self.groups_payload(), require_connected=True)
        return outcome

    def choose_answer(self, chosen_text: str) -> Outcome:
        group = self._find_group(chosen_text)
        chosen_names = award_group(self.players, group.submitter_ids) if group else []

        parent = self.parent
        outcome = Outcome()
        outcome.audit_records.append({
            'event_type': 'choice',
            'room_id': self.id,
            'round': self.round_count,
            'card_name': self.current_card,
            'onomatopoeia': chosen_text,
            'parent_id': parent.id,
            'parent_name': parent.name,
            'chosen_players': chosen_names,
            'timestamp': _timestamp(),
        })
        outcome.to_room('onomatopoeiaChosen', {
            'chosenPlayers': chosen_names,
            'updatedPlayers': self.players_payload(),
        })
        self.submission_groups = []

        if not self.deck:
            return outcome.extend(self.end_game())
        return outcome.extend(self._advance_turn())

    def force_next_turn(self) -> Outcome:
        self.submission_groups = []
        return self._advance_turn()

    def end_game(self) -> Outcome:
        self.phase = Phase.GAME_OVER
        outcome = Outcome(finished=True)
        outcome.to_room('gameOver', final_standings(self.players, self.usage_stats))
        return outcome

    # ---- helpers ----

    def submission_count(self) -> int:
        return sum(len(g.submitter_ids) for g in self.submission_groups)

    def _find_group(self, text: str) -> Optional[SubmissionGroup]:
        return next((g for g in self.submission_groups if g.text == text), None)

    def _advance_turn(self) -> Outcome:
        self.current_turn_index = (self.current_turn_index + 1) % len(self.players)
        self.round_count += 1
        self.phase = Phase.TURN_START
        outcome = Outcome()
        outcome.to_room('newTurn', self.parent.to_dict())
        return outcome

