"""Transcript normalization and tokenization."""

import re
import unicodedata

# Anything that is not a letter, apostrophe, hyphen or whitespace.
# \w also matches digits and underscore, which are dropped too.
_DISALLOWED = re.compile(r"[^\w\s'ʼ’-]|[\d_]")
_WHITESPACE = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """Decompose to NFD and drop combining marks ("días" -> "dias")."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> str:
    """Normalize text for comparison.

    Lowercases, strips diacritics, replaces punctuation, digits and symbols
    with spaces, and collapses whitespace. Idempotent.

    Args:
        text: Raw transcript or target sentence.

    Returns:
        Normalized string (possibly empty).
    """
    # Lowercase before decomposing: "İ".lower() yields a combining dot.
    s = strip_diacritics(text.lower())
    s = _DISALLOWED.sub(" ", s)
    return _WHITESPACE.sub(" ", s).strip()


def tokenize(text: str) -> list[str]:
    """Normalize and split into words."""
    return [w for w in normalize(text).split(" ") if w]
