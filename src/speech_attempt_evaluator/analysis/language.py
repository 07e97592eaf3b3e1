"""Per-language word lists and the language-likelihood heuristic."""

import re
from collections.abc import Sequence

from speech_attempt_evaluator.analysis.normalizer import normalize

_SPANISH_STOPWORDS = (
    "de", "la", "que", "el", "en", "y", "a", "los", "del", "se",
    "las", "por", "un", "para", "con", "no", "una", "su", "al", "lo",
    "como", "más", "pero", "sus", "le", "ya", "o", "este", "sí", "porque",
    "esta", "entre", "cuando", "muy", "sin", "sobre", "también", "me", "hasta", "hay",
    "donde", "quien", "desde", "todo", "nos", "durante", "todos", "uno", "les", "ni",
    "contra", "otros", "ese", "eso", "ante", "ellos", "e", "esto", "mí", "antes",
    "algunos", "qué", "unos", "yo", "otro", "otras", "otra", "él", "tanto", "esa",
    "estos", "mucho", "quienes", "nada", "muchos", "cual", "poco", "ella", "estar", "estas",
    "algunas", "algo",
)

_ENGLISH_STOPWORDS = (
    "the", "and", "for", "that", "with", "this", "from", "they", "have", "your",
    "you", "was", "are", "were", "their", "what", "when", "which", "there", "into",
    "about", "them", "then", "some", "would", "like", "just", "over", "more", "than",
    "been", "being", "such", "each", "very", "because", "these", "those", "could", "should",
    "where", "who", "while", "through", "does", "did", "had", "also", "every", "once",
    "here", "how", "why", "its", "our", "his", "her", "onto", "can", "will",
    "much", "many", "any", "all", "both", "few", "most", "other", "out", "up",
    "down", "in", "on", "at", "by", "of", "to", "is", "be", "whom",
    "as", "it", "my",
)

# Stored in normalized form so they compare against tokenized transcripts;
# this makes unaccented "si", "mi", "mas" and "tambien" Spanish stopwords too.
STOPWORDS: dict[str, frozenset[str]] = {
    "es": frozenset(normalize(w) for w in _SPANISH_STOPWORDS),
    "en": frozenset(normalize(w) for w in _ENGLISH_STOPWORDS),
    "nah": frozenset(),
    "yua": frozenset(),
    "tzo": frozenset(),
}

_LATIN_WITH_SPANISH_ACCENTS = re.compile(r"^[a-zñáéíóúü]+$", re.IGNORECASE)

LETTER_PATTERNS: dict[str, re.Pattern[str]] = {
    "es": _LATIN_WITH_SPANISH_ACCENTS,
    "en": re.compile(r"^[a-z]+$", re.IGNORECASE),
    "nah": re.compile(r"^[a-z]+$", re.IGNORECASE),
    # Yucatec Maya and Tzotzil write the glottal stop as an apostrophe
    "yua": re.compile(r"^[a-z'ʼ’]+$", re.IGNORECASE),
    "tzo": re.compile(r"^[a-z'ʼ’]+$", re.IGNORECASE),
}


def stopwords_for(lang: str) -> frozenset[str]:
    """Stopword set for a language; empty for languages without one."""
    return STOPWORDS.get(lang, frozenset())


def letter_pattern_for(lang: str) -> re.Pattern[str]:
    """Letter-only word pattern for a language (Spanish pattern by default)."""
    return LETTER_PATTERNS.get(lang, _LATIN_WITH_SPANISH_ACCENTS)


def language_likelihood(words: Sequence[str], lang: str) -> float:
    """Heuristic score in [0, 1] that ``words`` are in language ``lang``.

    80% weight on the share of words spelled with the language's letters,
    20% on stopword hits (denominator floored at 2 so a single stopword
    cannot dominate).

    In the adaptive evaluation mode this value only feeds the score; it is
    never a pass/fail gate there. Only the strict mode gates on it.

    Args:
        words: Tokenized words of the recognized transcript.
        lang: Target language code.

    Returns:
        Likelihood in [0, 1]; 0.0 for an empty word list.
    """
    if not words:
        return 0.0
    pattern = letter_pattern_for(lang)
    stopwords = stopwords_for(lang)
    letters_ok = sum(1 for w in words if pattern.match(w))
    stop_hits = sum(1 for w in words if w in stopwords)
    letter_ratio = letters_ok / len(words)
    stop_ratio = stop_hits / max(2, len(words))
    return 0.8 * letter_ratio + 0.2 * stop_ratio
