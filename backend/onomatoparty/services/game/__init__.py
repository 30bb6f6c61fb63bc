"""Game domain services: deck, rooms, scoring and audit logging.

This package contains the room state machine and its collaborators. It is
imported by the Socket.IO handlers and HTTP routes, keeping transport
concerns separated from core game mechanics.
"""
from .deck import DeckAssets, shuffle_deck
from .registry import Removal, RoomRegistry
from .room import Audience, Notification, Outcome, Phase, Player, Room, SubmissionGroup

__all__ = [
    'Audience',
    'DeckAssets',
    'Notification',
    'Outcome',
    'Phase',
    'Player',
    'Removal',
    'Room',
    'RoomRegistry',
    'SubmissionGroup',
    'shuffle_deck',
]
