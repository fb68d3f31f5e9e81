# wordfreq.py
import re
from collections import Counter

from stopwords import is_stopword

MIN_WORD_LENGTH = 3
_SPLIT_RE = re.compile(r"\W+")


def tokenize(text: str):
    """Split on runs of non-word characters, keeping only countable words."""
    for token in _SPLIT_RE.split(text or ""):
        if len(token) < MIN_WORD_LENGTH or is_stopword(token):
            continue
        yield token.lower()


def top_words(texts, limit: int = 10):
    """
    Rank words across all given texts by frequency.
    Ties keep the order in which the words were first seen.
    """
    counts = Counter()
    for text in texts:
        counts.update(tokenize(text))
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda pair: -pair[1])
    return ranked[:limit]
