"""Surface text similarity between a transcript and its target sentence."""

from collections import Counter
from collections.abc import Sequence

from speech_attempt_evaluator.analysis.language import stopwords_for
from speech_attempt_evaluator.analysis.normalizer import normalize
from speech_attempt_evaluator.models.evaluation import WordOverlap


def levenshtein(a: str, b: str) -> int:
    """Unit-cost edit distance using a single rolling row."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    row = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        diag = row[0]
        row[0] = i
        for j in range(1, len(b) + 1):
            above = row[j]
            if a[i - 1] == b[j - 1]:
                row[j] = diag
            else:
                row[j] = 1 + min(diag, above, row[j - 1])
            diag = above
    return row[-1]


def char_similarity(a: str, b: str) -> float:
    """Character-level similarity of two normalized strings.

    Args:
        a: Recognized text.
        b: Target text.

    Returns:
        ``(max_len - distance) / max_len`` in [0, 1]; 1.0 when both are empty.
    """
    norm_a = normalize(a)
    norm_b = normalize(b)
    max_len = max(len(norm_a), len(norm_b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein(norm_a, norm_b)) / max_len


def word_prf(
    recognized_words: Sequence[str],
    target_words: Sequence[str],
    lang: str,
    drop_stopwords: bool = True,
) -> WordOverlap:
    """Bag-of-words precision, recall and F1.

    Word order is ignored: a reordered or disfluent attempt scores the same
    as an ordered one.

    Args:
        recognized_words: Tokens of the transcript.
        target_words: Tokens of the target sentence.
        lang: Language code selecting the stopword set.
        drop_stopwords: Remove the language's stopwords from both lists first.

    Returns:
        WordOverlap with precision, recall and f1.
    """
    if drop_stopwords:
        stopwords = stopwords_for(lang)
        recognized_words = [w for w in recognized_words if w not in stopwords]
        target_words = [w for w in target_words if w not in stopwords]

    recognized_counts = Counter(recognized_words)
    target_counts = Counter(target_words)
    hits = sum(min(count, recognized_counts[w]) for w, count in target_counts.items())

    precision = hits / len(recognized_words) if recognized_words else 0.0
    recall = hits / len(target_words) if target_words else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
    return WordOverlap(precision=precision, recall=recall, f1=f1)
