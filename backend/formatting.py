# formatting.py
import re

from gpt_service import SECTION_SEPARATOR
from sentiment_service import score_label

TELEGRAM_MESSAGE_LIMIT = 4096

# Telegram's legacy "Markdown" parse mode only knows these four entities.
_MARKUP_PATTERNS = [
    re.compile(r"(?<![*\w])\*[^*\n]+\*(?![*\w])"),       # *bold*
    re.compile(r"(?<![_\w])_[^_\n]+_(?![_\w])"),         # _italic_
    re.compile(r"`[^`\n]+`"),                            # `code`
    re.compile(r"\[[^\]\n]+\]\([^)\s]+\)"),              # [links](url)
]
_LINK_RE = re.compile(r"\[[^\]\n]+\]\([^)\s]+\)")
_CODE_RE = re.compile(r"`[^`\n]*`")
_DOUBLE_BOLD_RE = re.compile(r"\*\*([^*\n]+)\*\*|__([^_\n]+)__")
_HEADER_RE = re.compile(r"^#{1,6}[ \t]+(.+?)[ \t#]*$", re.MULTILINE)


def to_telegram_markdown(text: str) -> str:
    """Rewrite common Markdown (# headers, **bold**) into the legacy syntax."""
    text = _DOUBLE_BOLD_RE.sub(lambda m: f"*{m.group(1) or m.group(2)}*", text)
    return _HEADER_RE.sub(lambda m: f"*{m.group(1).replace('*', '').strip()}*", text)


def has_markup(text: str) -> bool:
    """True when the text uses markup the legacy Markdown mode renders."""
    return any(p.search(text or "") for p in _MARKUP_PATTERNS)


def markdown_is_balanced(text: str) -> bool:
    """Telegram rejects the whole message on an unpaired *, _, ` or [."""
    rest = _CODE_RE.sub("", _LINK_RE.sub("", text))
    if "`" in rest or "[" in rest:
        return False
    return rest.count("*") % 2 == 0 and rest.count("_") % 2 == 0


def render_rich(text: str):
    """(text, markdown) for one message of model output; plain when unsafe."""
    converted = to_telegram_markdown(text)
    if has_markup(converted) and markdown_is_balanced(converted):
        return converted, True
    return text, False


def format_timestamp(dt) -> str:
    return dt.strftime("%Y-%m-%d %H:%M")


def format_entry(entry) -> str:
    text = f"📅 {format_timestamp(entry.created_at)}\n📝 {entry.content}"
    if entry.mood:
        text += f"\n😶 Mood: {entry.mood}"
    return text


def format_entries(entries) -> str:
    return "\n\n".join(format_entry(e) for e in entries)


def format_mood_line(entry) -> str:
    line = f"📅 {entry.created_at.strftime('%Y-%m-%d')}: {entry.mood or 'unknown'}"
    if entry.mood_score is not None:
        line += f" ({score_label(entry.mood_score)}, {entry.mood_score:+.2f})"
    return line


def format_summary(entry) -> str:
    return f"📅 {format_timestamp(entry.created_at)}\n🧾 {entry.summary}"


def format_word_cloud(pairs, label: str, limit: int = 10) -> str:
    lines = [f"Top {limit} most common words for {label}:", ""]
    lines.extend(f"{word.capitalize()}: {count}" for word, count in pairs)
    return "\n".join(lines)


def entries_block(entries) -> str:
    """Plain listing fed to the language model."""
    return "\n\n".join(
        f"[{e.created_at.strftime('%Y-%m-%d')}] {e.content}" for e in entries
    )


def split_sections(text: str):
    """Split model output on the section separator, dropping blank parts."""
    return [part.strip() for part in (text or "").split(SECTION_SEPARATOR) if part.strip()]


def chunk_text(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT):
    """Split text on line boundaries so every piece fits in one message."""
    chunks, current = [], ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return [c.strip("\n") for c in chunks if c.strip()]
