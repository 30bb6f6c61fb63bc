from datetime import datetime, timezone
import json

from onomatoparty import db


def _utcnow():
    return datetime.now(timezone.utc)


class AnswerLog(db.Model):
    """Append-only record of submissions and parent choices."""
    __tablename__ = 'answer_log'
    id = db.Column(db.Integer, primary_key=True)
    event_type = db.Column(db.String(16), nullable=False, index=True)  # answer, choice
    room_id = db.Column(db.String(128), nullable=False, index=True)
    round = db.Column(db.Integer, nullable=False)
    card_name = db.Column(db.String(256), nullable=True)
    onomatopoeia = db.Column(db.Text, nullable=True)
    player_id = db.Column(db.String(64), nullable=True)
    player_name = db.Column(db.String(128), nullable=True)
    parent_id = db.Column(db.String(64), nullable=True)
    parent_name = db.Column(db.String(128), nullable=True)
    chosen_players = db.Column(db.Text, nullable=True)  # JSON list of names
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    @classmethod
    def from_record(cls, record):
        chosen = record.get('chosen_players')
        created_at = record.get('timestamp')
        return cls(
            event_type=record['event_type'],
            room_id=record['room_id'],
            round=record['round'],
            card_name=record.get('card_name'),
            onomatopoeia=record.get('onomatopoeia'),
            player_id=record.get('player_id'),
            player_name=record.get('player_name'),
            parent_id=record.get('parent_id'),
            parent_name=record.get('parent_name'),
            chosen_players=json.dumps(chosen) if chosen is not None else None,
            created_at=datetime.fromisoformat(created_at) if created_at else _utcnow(),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'event_type': self.event_type,
            'room_id': self.room_id,
            'round': self.round,
            'card_name': self.card_name,
            'onomatopoeia': self.onomatopoeia,
            'player_id': self.player_id,
            'player_name': self.player_name,
            'parent_id': self.parent_id,
            'parent_name': self.parent_name,
            'chosen_players': json.loads(self.chosen_players) if self.chosen_players else [],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
