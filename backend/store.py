# store.py
"""Query helpers around JournalEntry. All reads are scoped to one chat id."""
import logging

from sqlalchemy.exc import IntegrityError

from models import STATUS_DONE, STATUS_ONGOING, JournalEntry, db

log = logging.getLogger(__name__)


def find_ongoing(chat_id: str):
    return JournalEntry.query.filter_by(chat_id=chat_id, status=STATUS_ONGOING).first()


def get_or_create_ongoing(chat_id: str):
    """
    Return (entry, created) for the chat's unsaved entry, creating an empty one
    if there is none. Two concurrent callers for the same chat end up with the
    same row: the loser of the insert race hits the partial unique index,
    rolls back only its savepoint and reads the winner's row instead.
    Nothing is committed here; the caller commits together with its own changes.
    """
    entry = find_ongoing(chat_id)
    if entry is not None:
        return entry, False

    entry = JournalEntry(chat_id=chat_id, content="", status=STATUS_ONGOING)
    try:
        with db.session.begin_nested():
            db.session.add(entry)
    except IntegrityError:
        log.info("ongoing entry for chat %s created concurrently, reusing it", chat_id)
        entry = find_ongoing(chat_id)
        if entry is None:
            raise
        return entry, False
    return entry, True


def recent_entries(chat_id: str, limit: int = 5):
    return (
        JournalEntry.query
        .filter_by(chat_id=chat_id)
        .filter(JournalEntry.content != "")  # skip drafts nothing was written to
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .limit(limit)
        .all()
    )


def entries_between(chat_id: str, period, status=None):
    """Entries created inside the period, oldest first."""
    lower, upper = period.bounds()
    query = JournalEntry.query.filter(
        JournalEntry.chat_id == chat_id,
        JournalEntry.created_at >= lower,
        JournalEntry.created_at < upper,
    )
    if status is not None:
        query = query.filter(JournalEntry.status == status)
    return query.order_by(JournalEntry.created_at.asc(), JournalEntry.id.asc()).all()


def finished_entries_between(chat_id: str, period):
    return entries_between(chat_id, period, status=STATUS_DONE)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_entries(chat_id: str, keyword: str, limit: int = 5):
    """Case-insensitive substring match on content (ILIKE on Postgres)."""
    pattern = f"%{_escape_like(keyword)}%"
    return (
        JournalEntry.query
        .filter(JournalEntry.chat_id == chat_id)
        .filter(JournalEntry.content.ilike(pattern, escape="\\"))
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .limit(limit)
        .all()
    )


def chat_ids_with_entries():
    rows = db.session.query(JournalEntry.chat_id).distinct().order_by(JournalEntry.chat_id).all()
    return [row[0] for row in rows]
