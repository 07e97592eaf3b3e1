"""Pass/fail grading of a spoken attempt against its target sentence."""

import math
from collections.abc import Mapping

import structlog

from speech_attempt_evaluator.analysis.language import language_likelihood
from speech_attempt_evaluator.analysis.normalizer import tokenize
from speech_attempt_evaluator.assessment.similarity import char_similarity, word_prf
from speech_attempt_evaluator.assessment.thresholds import (
    ThresholdConfig,
    get_thresholds,
    passes_speech_quality,
)
from speech_attempt_evaluator.models.evaluation import (
    EvaluationInput,
    EvaluationMode,
    EvaluationResult,
    ReasonCode,
)

logger = structlog.get_logger()

# Threshold relaxation for transcripts from a live speech API
SOFTENING_DELTA = 0.06

# Confidence floor used in the score; recognizers often report 0 for "unknown"
CONFIDENCE_FLOOR = 0.55

# Score weights: (char_sim, word_f1, lang_likelihood, confidence).
# They sum past 100, so a strong attempt hits the ceiling without being perfect.
ADAPTIVE_WEIGHTS = (65, 35, 10, 10)
STRICT_WEIGHTS = (60, 35, 20, 15)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_score(
    char_sim: float,
    word_f1: float,
    lang_likelihood: float,
    confidence: float,
    weights: tuple[float, float, float, float] = ADAPTIVE_WEIGHTS,
) -> int:
    """Blend similarity signals into a 0-100 score.

    Args:
        char_sim: Character similarity (0-1).
        word_f1: Content-word F1 (0-1).
        lang_likelihood: Language likelihood (0-1).
        confidence: Recognizer confidence; floored at ``CONFIDENCE_FLOOR``.
        weights: Per-signal weights.

    Returns:
        Integer score clamped to 0-100, rounded half up.
    """
    if math.isnan(confidence):
        confidence = 0.0
    w_char, w_f1, w_lang, w_conf = weights
    raw = (
        char_sim * w_char
        + word_f1 * w_f1
        + lang_likelihood * w_lang
        + max(confidence, CONFIDENCE_FLOOR) * w_conf
    )
    return _round_half_up(max(0.0, min(100.0, raw)))


def evaluate(
    attempt: EvaluationInput,
    thresholds: Mapping[str, ThresholdConfig] | None = None,
) -> EvaluationResult:
    """Grade an attempt in the adaptive mode.

    A failed speech-quality check short-circuits with score 0. Otherwise
    the attempt passes when both character similarity and content-word F1
    reach the language's floors, lowered by ``SOFTENING_DELTA`` when
    ``attempt.softening`` is set. Language likelihood only contributes to
    the score here; it is not a gate in this mode.

    Never raises on degenerate input: empty text simply scores low.

    Args:
        attempt: The attempt to grade.
        thresholds: Optional threshold table (defaults to the built-in one).

    Returns:
        EvaluationResult with ``passed`` true iff ``reasons`` is empty.
    """
    cfg = get_thresholds(attempt.language_code, thresholds)
    rec_words = tokenize(attempt.recognized_text)
    tgt_words = tokenize(attempt.target_sentence)

    if attempt.audio_metrics is not None and not passes_speech_quality(
        attempt.audio_metrics, len(attempt.target_sentence), cfg
    ):
        logger.debug(
            "attempt_speech_quality_failed",
            language_code=attempt.language_code,
            duration_sec=attempt.audio_metrics.duration_sec,
            rms=attempt.audio_metrics.rms,
        )
        return EvaluationResult(
            passed=False,
            score=0,
            reasons=frozenset({ReasonCode.SPEECH_QUALITY}),
            confidence=attempt.confidence,
            mode=EvaluationMode.ADAPTIVE,
        )

    char_sim = char_similarity(attempt.recognized_text, attempt.target_sentence)
    word_f1 = word_prf(rec_words, tgt_words, attempt.language_code, drop_stopwords=True).f1

    soften = SOFTENING_DELTA if attempt.softening else 0.0
    min_char = max(0.0, cfg.min_char_sim - soften)
    min_f1 = max(0.0, cfg.min_word_f1 - soften)

    reasons: set[ReasonCode] = set()
    if char_sim < min_char:
        reasons.add(ReasonCode.LOW_CHAR_SIMILARITY)
    if word_f1 < min_f1:
        reasons.add(ReasonCode.LOW_WORD_F1)

    lang_like = language_likelihood(rec_words, attempt.language_code)
    score = compute_score(char_sim, word_f1, lang_like, attempt.confidence, ADAPTIVE_WEIGHTS)

    result = EvaluationResult(
        passed=not reasons,
        score=score,
        reasons=frozenset(reasons),
        char_sim=char_sim,
        word_f1=word_f1,
        lang_likelihood=lang_like,
        confidence=attempt.confidence,
        mode=EvaluationMode.ADAPTIVE,
    )
    logger.debug(
        "attempt_evaluated",
        mode=result.mode,
        language_code=attempt.language_code,
        passed=result.passed,
        score=result.score,
    )
    return result


def evaluate_strict(
    attempt: EvaluationInput,
    thresholds: Mapping[str, ThresholdConfig] | None = None,
) -> EvaluationResult:
    """Grade an attempt in the strict mode.

    Differences from :func:`evaluate`:

    - ``attempt.softening`` is ignored.
    - A failed speech-quality check adds a reason but text is still scored.
    - Language likelihood below ``min_lang_likelihood`` fails the attempt.
    - A reported (non-zero) confidence below ``min_confidence`` fails it.
    """
    cfg = get_thresholds(attempt.language_code, thresholds)
    rec_words = tokenize(attempt.recognized_text)
    tgt_words = tokenize(attempt.target_sentence)

    reasons: set[ReasonCode] = set()
    if attempt.audio_metrics is not None and not passes_speech_quality(
        attempt.audio_metrics, len(attempt.target_sentence), cfg
    ):
        reasons.add(ReasonCode.SPEECH_QUALITY)

    lang_like = language_likelihood(rec_words, attempt.language_code)
    if lang_like < cfg.min_lang_likelihood:
        reasons.add(ReasonCode.NOT_TARGET_LANGUAGE)

    char_sim = char_similarity(attempt.recognized_text, attempt.target_sentence)
    word_f1 = word_prf(rec_words, tgt_words, attempt.language_code, drop_stopwords=True).f1
    if char_sim < cfg.min_char_sim:
        reasons.add(ReasonCode.LOW_CHAR_SIMILARITY)
    if word_f1 < cfg.min_word_f1:
        reasons.add(ReasonCode.LOW_WORD_F1)
    if attempt.confidence and attempt.confidence < cfg.min_confidence:
        reasons.add(ReasonCode.LOW_CONFIDENCE)

    score = compute_score(char_sim, word_f1, lang_like, attempt.confidence, STRICT_WEIGHTS)
    result = EvaluationResult(
        passed=not reasons,
        score=score,
        reasons=frozenset(reasons),
        char_sim=char_sim,
        word_f1=word_f1,
        lang_likelihood=lang_like,
        confidence=attempt.confidence,
        mode=EvaluationMode.STRICT,
    )
    logger.debug(
        "attempt_evaluated",
        mode=result.mode,
        language_code=attempt.language_code,
        passed=result.passed,
        score=result.score,
        reasons=sorted(result.reasons),
    )
    return result


def evaluate_attempt(
    attempt: EvaluationInput,
    mode: EvaluationMode = EvaluationMode.ADAPTIVE,
    thresholds: Mapping[str, ThresholdConfig] | None = None,
) -> EvaluationResult:
    """Grade an attempt with the given strictness mode."""
    if mode == EvaluationMode.STRICT:
        return evaluate_strict(attempt, thresholds)
    return evaluate(attempt, thresholds)
