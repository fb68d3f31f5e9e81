# commands.py
import logging
import re

import store
from formatting import (
    chunk_text,
    entries_block,
    format_entries,
    format_mood_line,
    format_summary,
    format_word_cloud,
    render_rich,
    split_sections,
)
from models import STATUS_DONE, utcnow
from periods import InvalidPeriod, parse_period_args, year_period
from session import JournalSession, NothingToSave
from wordfreq import top_words

log = logging.getLogger(__name__)

WORD_CLOUD_SIZE = 10
RECENT_LIMIT = 5

# "/done@my_journal_bot" -> "/done"
_BOT_SUFFIX_RE = re.compile(r"^(/\w+)@\w+", re.IGNORECASE)

WELCOME = (
    "Welcome to your journal bot! ✍️\n\n"
    "/add - start a new entry (or just start typing)\n"
    "/done - save the entry with its mood and summary\n"
    "/entries - your last 5 entries\n"
    "/recap [Month Year] - every entry from a month\n"
    "/moods [Month Year] - how you felt that month\n"
    "/summaries [Month Year] - the summaries for a month\n"
    "/wordcloud [Month Year] - your most used words\n"
    "/search <keyword> - find entries mentioning a word\n"
    "/analyze [question] - a look back over this year"
)


def _pattern(regex: str):
    return re.compile(regex, re.IGNORECASE | re.DOTALL)


class JournalBot:
    """
    Routes one inbound text message to a handler. Routes are tried in order
    and the first match wins; anything unmatched is journal text.
    """

    def __init__(self, sender, completions, session=None, today=None):
        self.sender = sender
        self.completions = completions
        self.session = session or JournalSession(completions)
        self.today = today or (lambda: utcnow().date())
        self.routes = [
            ("/start", self.cmd_start),
            ("/help", self.cmd_start),
            ("/add", self.cmd_add),
            ("/done", self.cmd_done),
            ("/entries", self.cmd_entries),
            (_pattern(r"^/moods(?:\s+(.*))?$"), self.cmd_moods),
            (_pattern(r"^/summaries(?:\s+(.*))?$"), self.cmd_summaries),
            (_pattern(r"^/search\s+(.+)$"), self.cmd_search),
            (_pattern(r"^/recap(?:\s+(.*))?$"), self.cmd_recap),
            (_pattern(r"^/wordcloud(?:\s+(.*))?$"), self.cmd_wordcloud),
            (_pattern(r"^/analyze(?:\s+(.*))?$"), self.cmd_analyze),
        ]

    # ---------- dispatch ----------

    def resolve(self, text: str):
        """Return (handler, args) for the trimmed message text."""
        command = _BOT_SUFFIX_RE.sub(r"\1", text)
        lowered = command.lower()
        for pattern, handler in self.routes:
            if isinstance(pattern, str):
                if lowered == pattern:
                    return handler, None
                continue
            m = pattern.match(command)
            if m:
                args = m.group(1)
                return handler, args.strip() if args else None
        return self.append_text, text

    def handle(self, chat_id, text: str):
        text = (text or "").strip()
        if not text:
            return
        chat_id = str(chat_id)
        handler, args = self.resolve(text)
        log.info("chat %s: %s", chat_id, handler.__name__)
        handler(chat_id, args)

    # ---------- replies ----------

    def reply(self, chat_id, text: str):
        for chunk in chunk_text(text):
            self.sender.send(chat_id, chunk)

    def reply_rich(self, chat_id, text: str):
        """For model output: send as Markdown when it is safe to."""
        for chunk in chunk_text(text):
            body, markdown = render_rich(chunk)
            self.sender.send(chat_id, body, markdown=markdown)

    def _period_or_complain(self, chat_id, args, command):
        try:
            return parse_period_args(args, today=self.today())
        except InvalidPeriod:
            self.reply(chat_id, f"❌ Invalid month! Example: /{command} January 2024")
            return None

    # ---------- session ----------

    def cmd_start(self, chat_id, _args):
        self.reply(chat_id, WELCOME)

    def cmd_add(self, chat_id, _args):
        _, created = self.session.start(chat_id)
        if created:
            self.reply(chat_id, "Send me your journal entry. You can use several messages; "
                                "send /done when you're finished.")
        else:
            self.reply(chat_id, "📝 You already have an entry in progress. "
                                "Keep writing, or send /done to save it.")

    def cmd_done(self, chat_id, _args):
        try:
            entry = self.session.finish(chat_id)
        except NothingToSave:
            self.reply(chat_id, "🤷 Nothing to save yet. Write something first, then send /done.")
            return
        self.reply(chat_id, f"✅ Saved your journal entry!\n😶 Mood: {entry.mood}")
        if entry.summary:
            self.reply_rich(chat_id, entry.summary)

    def append_text(self, chat_id, text):
        self.session.append(chat_id, text)
        self.reply(chat_id, "📝 Added to your entry. Keep writing, or send /done to save it.")

    # ---------- queries ----------

    def cmd_entries(self, chat_id, _args):
        entries = store.recent_entries(chat_id, limit=RECENT_LIMIT)
        if entries:
            self.reply(chat_id, format_entries(entries))
        else:
            self.reply(chat_id, "No journal entries found! Use /add to create one.")

    def cmd_search(self, chat_id, keyword):
        results = store.search_entries(chat_id, keyword, limit=RECENT_LIMIT)
        if results:
            self.reply(chat_id, format_entries(results))
        else:
            self.reply(chat_id, f"No entries found with '{keyword}'. Try another keyword!")

    def cmd_recap(self, chat_id, args):
        period = self._period_or_complain(chat_id, args, "recap")
        if period is None:
            return
        entries = [e for e in store.entries_between(chat_id, period) if e.content.strip()]
        if entries:
            self.reply(chat_id, format_entries(entries))
        else:
            self.reply(chat_id, f"📭 No journal entries found for {period.label}.")

    def cmd_moods(self, chat_id, args):
        period = self._period_or_complain(chat_id, args, "moods")
        if period is None:
            return
        entries = store.finished_entries_between(chat_id, period)
        if not entries:
            self.reply(chat_id, f"📭 No saved entries with a mood for {period.label}.")
            return
        lines = [f"😶 Moods for {period.label}:", ""]
        lines.extend(format_mood_line(e) for e in entries)
        self.reply(chat_id, "\n".join(lines))

    def cmd_summaries(self, chat_id, args):
        period = self._period_or_complain(chat_id, args, "summaries")
        if period is None:
            return
        entries = [e for e in store.finished_entries_between(chat_id, period) if e.summary]
        if not entries:
            self.reply(chat_id, f"📭 No summaries found for {period.label}.")
            return
        self.reply(chat_id, f"🧾 Summaries for {period.label}:")
        for entry in entries:
            self.reply_rich(chat_id, format_summary(entry))

    def cmd_wordcloud(self, chat_id, args):
        period = self._period_or_complain(chat_id, args, "wordcloud")
        if period is None:
            return
        texts = [e.content for e in store.entries_between(chat_id, period) if e.content]
        if not texts:
            self.reply(chat_id, f"📭 No journal entries found for {period.label} to generate a word cloud.")
            return
        pairs = top_words(texts, limit=WORD_CLOUD_SIZE)
        if not pairs:
            self.reply(chat_id, f"🤔 Not enough words in {period.label} yet for a word cloud.")
            return
        self.reply(chat_id, format_word_cloud(pairs, period.label, limit=WORD_CLOUD_SIZE))

    def cmd_analyze(self, chat_id, question):
        year = self.today().year
        entries = [
            e for e in store.entries_between(chat_id, year_period(year), status=STATUS_DONE)
            if e.content.strip()
        ]
        if not entries:
            self.reply(chat_id, f"📭 No saved journal entries found for {year} to analyze.")
            return
        self.reply(chat_id, f"🔎 Looking back over {len(entries)} entries from {year}, this can take a minute...")
        analysis = self.completions.analyze_year(entries_block(entries), year, question or "")
        sections = split_sections(analysis)
        if not sections:
            self.reply(chat_id, "🤷 The analysis came back empty. Try again in a bit.")
            return
        for section in sections:
            self.reply_rich(chat_id, section)
