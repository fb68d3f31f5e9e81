from datetime import date, datetime

import pytest

from app import create_app
from commands import JournalBot
from models import STATUS_DONE, JournalEntry, db

TODAY = date(2024, 1, 20)


class FakeSender:
    """Records outgoing messages instead of calling Telegram."""

    def __init__(self):
        self.sent = []

    def send(self, chat_id, text, markdown=False):
        self.sent.append((str(chat_id), text, markdown))

    def texts(self, chat_id=None):
        return [t for c, t, _ in self.sent if chat_id is None or c == str(chat_id)]

    @property
    def last(self):
        return self.sent[-1][1]


class FakeCompletions:
    def __init__(self, mood="grateful", summary="You had a lovely day.", analysis=""):
        self.mood = mood
        self.summary = summary
        self.analysis = analysis
        self.calls = []

    def generate_mood(self, text):
        self.calls.append(("mood", text))
        return self.mood

    def generate_summary(self, text):
        self.calls.append(("summary", text))
        return self.summary

    def analyze_year(self, entries_block, year, question=""):
        self.calls.append(("analyze", entries_block, year, question))
        return self.analysis


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "TELEGRAM_BOT_TOKEN": "test-token",
        "TELEGRAM_WEBHOOK_SECRET": "",
        "OPENAI_API_KEY": "test-key",
        "API_TOKEN": "api-test-token",
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def sender():
    return FakeSender()


@pytest.fixture()
def completions():
    return FakeCompletions()


@pytest.fixture()
def bot(app, sender, completions):
    bot = JournalBot(sender, completions, today=lambda: TODAY)
    app.extensions["journal_bot"] = bot
    return bot


@pytest.fixture()
def make_entry(app):
    def _make(chat_id="42", content="", created_at=None, status=STATUS_DONE,
              mood=None, summary=None, mood_score=None):
        entry = JournalEntry(
            chat_id=chat_id,
            content=content,
            status=status,
            mood=mood,
            summary=summary,
            mood_score=mood_score,
            created_at=created_at or datetime(2024, 1, 10, 21, 15),
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    return _make
