"""
Text normalization for plagiarism comparison.
Turns extracted document text into a token sequence: lowercase, letters and
digits only, without Russian stop words and very short tokens.
"""

import re
from typing import List

STOP_WORDS = frozenset({
    "и", "в", "не", "на", "с",
    "по", "к", "у", "о", "за",
    "из", "от", "до", "для", "это",
    "как", "так", "но", "а", "же",
    "что", "он", "она", "они", "мы",
    "вы", "его", "ее", "их", "все",
    "то", "бы", "во",
})

# Tokens are measured in UTF-8 bytes: single Cyrillic letters are dropped,
# two-letter Cyrillic words survive unless they are stop words.
MIN_TOKEN_BYTES = 3

_DISALLOWED_CHARS = re.compile(r"[^а-яёa-z0-9]")


def tokenize(text: str) -> List[str]:
    """Split raw text into comparison tokens."""
    if not text:
        return []

    cleaned = _DISALLOWED_CHARS.sub(" ", text.lower())
    return [
        word
        for word in cleaned.split()
        if word not in STOP_WORDS and len(word.encode("utf-8")) >= MIN_TOKEN_BYTES
    ]


def normalize_text(text: str) -> str:
    """Return the normalized form of text: surviving tokens joined by single spaces."""
    return " ".join(tokenize(text))
