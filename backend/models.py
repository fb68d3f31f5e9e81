from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

db = SQLAlchemy()

STATUS_ONGOING = "ongoing"
STATUS_DONE = "done"


def enable_sqlite_savepoints(engine):
    """
    Let SQLAlchemy own BEGIN on pysqlite so SAVEPOINTs nest inside the
    session transaction instead of committing on RELEASE.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def utcnow():
    # Stored naive, always UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class JournalEntry(db.Model):
    __tablename__ = "journal_entries"
    __table_args__ = (
        # One unsaved entry per chat; backs the atomic get-or-create in store.py
        db.Index(
            "uq_journal_entries_ongoing_chat",
            "chat_id",
            unique=True,
            sqlite_where=db.text("status = 'ongoing'"),
            postgresql_where=db.text("status = 'ongoing'"),
        ),
        db.Index("ix_journal_entries_chat_created", "chat_id", "created_at"),
    )

    id = db.Column(db.Integer, primary_key=True)
    chat_id = db.Column(db.String(64), nullable=False)
    content = db.Column(db.Text, nullable=False, default="")
    status = db.Column(db.String(16), nullable=False, default=STATUS_ONGOING)

    # Filled in only when the entry is finished with /done
    mood = db.Column(db.String(50))             # e.g., "grateful"
    mood_score = db.Column(db.Float)            # e.g., 0.56
    summary = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def is_ongoing(self) -> bool:
        return self.status == STATUS_ONGOING

    def to_dict(self):
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "content": self.content,
            "status": self.status,
            "mood": self.mood,
            "mood_score": float(self.mood_score) if self.mood_score is not None else None,
            "summary": self.summary,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
        }

    def __repr__(self):
        return f"<JournalEntry id={self.id} chat={self.chat_id} status={self.status}>"
