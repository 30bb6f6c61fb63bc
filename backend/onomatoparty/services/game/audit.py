from sqlalchemy.exc import SQLAlchemyError

from onomatoparty import db, socketio
from onomatoparty.exceptions import AuditSinkFailed
from onomatoparty.models import AnswerLog


class AuditSink:
    """Best-effort writer of ``AnswerLog`` rows.

    - ``record`` never raises and never waits on the database
    - Writes run as Socket.IO background tasks; inline in TESTING mode
    - A failed write is logged once and dropped (no retry)
    """

    def __init__(self, app):
        self.app = app

    @property
    def enabled(self) -> bool:
        return bool(self.app.config.get('AUDIT_ENABLED', True))

    def record(self, record: dict) -> None:
        if not self.enabled:
            return
        if self.app.config.get('TESTING'):
            self._worker(record)
        else:
            socketio.start_background_task(self._worker, record)

    def _worker(self, record: dict) -> None:
        try:
            self._persist(record)
            self.app.logger.info(
                f"[audit-ok] event={record.get('event_type')} room={record.get('room_id')} round={record.get('round')}"
            )
        except AuditSinkFailed as exc:
            self.app.logger.error(
                f"[audit-fail] event={record.get('event_type')} room={record.get('room_id')} error={exc}"
            )

    def _persist(self, record: dict) -> None:
        with self.app.app_context():
            try:
                db.session.add(AnswerLog.from_record(record))
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise AuditSinkFailed(str(exc)) from exc
