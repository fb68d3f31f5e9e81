# session.py
"""
Per-chat entry lifecycle.

A chat has either no unsaved entry or exactly one ``ongoing`` entry. Plain
messages are appended to it (creating it on first use), and ``/done`` turns it
into a ``done`` entry with a mood and summary. Done entries are never reopened.
"""
import logging

import store
from models import STATUS_DONE, db
from sentiment_service import sentiment_score

log = logging.getLogger(__name__)

# Content ending in one of these continues on the same line.
SOFT_CUT_MARKERS = ("...", "…")


class NothingToSave(Exception):
    """/done was sent with no ongoing entry or only whitespace in it."""


def join_content(existing: str, text: str) -> str:
    if not existing:
        return text
    separator = " " if existing.endswith(SOFT_CUT_MARKERS) else "\n"
    return existing + separator + text


class JournalSession:
    def __init__(self, completions, score=sentiment_score):
        self.completions = completions
        self.score = score

    def start(self, chat_id: str):
        """Return (entry, created); an existing ongoing entry is never duplicated."""
        entry, created = store.get_or_create_ongoing(chat_id)
        db.session.commit()
        return entry, created

    def append(self, chat_id: str, text: str):
        entry, created = store.get_or_create_ongoing(chat_id)
        if created:
            log.info("chat %s: started entry %s implicitly", chat_id, entry.id)
        # New row and its first text land in one commit.
        entry.content = join_content(entry.content, text)
        db.session.commit()
        return entry

    def finish(self, chat_id: str):
        entry = store.find_ongoing(chat_id)
        if entry is None or not (entry.content or "").strip():
            raise NothingToSave(chat_id)

        content = entry.content.strip()
        # Everything that can fail runs before the entry is touched.
        mood = self.completions.generate_mood(content)
        summary = self.completions.generate_summary(content)
        score = self.score(content)

        entry.mood = mood
        entry.summary = summary
        entry.mood_score = score
        entry.status = STATUS_DONE
        db.session.commit()
        log.info("chat %s: entry %s saved (mood=%s)", chat_id, entry.id, mood)
        return entry
