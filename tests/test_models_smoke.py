"""Smoke tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from speech_attempt_evaluator.models.evaluation import (
    AudioMetrics,
    EvaluationInput,
    EvaluationMode,
    EvaluationResult,
    ReasonCode,
    WordOverlap,
)


class TestReasonCode:
    def test_enum_values(self):
        assert ReasonCode.SPEECH_QUALITY == "speech-quality"
        assert ReasonCode.LOW_CHAR_SIMILARITY == "low-char-sim"
        assert ReasonCode.LOW_WORD_F1 == "low-word-f1"
        assert ReasonCode.NOT_TARGET_LANGUAGE == "not-target-lang"
        assert ReasonCode.LOW_CONFIDENCE == "low-confidence"


class TestEvaluationMode:
    def test_enum_values(self):
        assert EvaluationMode.ADAPTIVE == "adaptive"
        assert EvaluationMode.STRICT == "strict"


class TestAudioMetrics:
    def test_instantiation(self):
        metrics = AudioMetrics(duration_sec=1.5, rms=0.1, zero_crossings=3000)
        assert metrics.zero_crossings == 3000

    def test_negative_zero_crossings_rejected(self):
        with pytest.raises(ValidationError):
            AudioMetrics(duration_sec=1.5, rms=0.1, zero_crossings=-1)

    def test_frozen(self):
        metrics = AudioMetrics(duration_sec=1.5, rms=0.1, zero_crossings=3000)
        with pytest.raises(ValidationError):
            metrics.rms = 0.2


class TestEvaluationInput:
    def test_defaults(self):
        attempt = EvaluationInput()
        assert attempt.recognized_text == ""
        assert attempt.confidence == 0.0
        assert attempt.audio_metrics is None
        assert attempt.softening is False

    def test_nested_metrics_from_dict(self):
        attempt = EvaluationInput.model_validate({
            "recognized_text": "hola",
            "target_sentence": "hola",
            "audio_metrics": {"duration_sec": 2.0, "rms": 0.05, "zero_crossings": 4000},
        })
        assert isinstance(attempt.audio_metrics, AudioMetrics)


class TestEvaluationResult:
    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            EvaluationResult(passed=True, score=101)
        with pytest.raises(ValidationError):
            EvaluationResult(passed=False, score=-1)

    def test_reasons_serialized_sorted(self):
        result = EvaluationResult(
            passed=False,
            score=10,
            reasons=frozenset({ReasonCode.LOW_WORD_F1, ReasonCode.LOW_CHAR_SIMILARITY}),
        )
        data = result.model_dump(mode="json")
        assert data["reasons"] == ["low-char-sim", "low-word-f1"]
        assert data["mode"] == "adaptive"

    def test_reasons_parsed_from_strings(self):
        result = EvaluationResult.model_validate(
            {"passed": False, "score": 0, "reasons": ["speech-quality"]}
        )
        assert result.reasons == frozenset({ReasonCode.SPEECH_QUALITY})


class TestWordOverlap:
    def test_defaults(self):
        overlap = WordOverlap()
        assert (overlap.precision, overlap.recall, overlap.f1) == (0.0, 0.0, 0.0)
