"""Tests for threshold tables and the speech-quality gate."""

import math

import pytest
from pydantic import ValidationError

from speech_attempt_evaluator.assessment.thresholds import (
    THRESHOLDS,
    get_thresholds,
    load_thresholds,
    passes_speech_quality,
)
from speech_attempt_evaluator.models.evaluation import AudioMetrics

ES = THRESHOLDS["es"]


def metrics(duration=2.0, rms=0.05, zero_crossings=4000) -> AudioMetrics:
    return AudioMetrics(duration_sec=duration, rms=rms, zero_crossings=zero_crossings)


class TestThresholdTable:
    def test_known_languages(self):
        assert set(THRESHOLDS) == {"default", "es", "en", "nah", "yua", "tzo"}

    def test_spanish_values(self):
        assert ES.min_speech_sec == 1.2
        assert ES.min_char_sim == 0.74
        assert ES.min_word_f1 == 0.65

    def test_english_values(self):
        en = get_thresholds("en")
        assert en.min_char_sim == 0.72
        assert en.duration_per_char_sec == 0.04

    def test_indigenous_languages_are_looser(self):
        for code in ("nah", "yua", "tzo"):
            cfg = get_thresholds(code)
            assert cfg.min_char_sim < THRESHOLDS["default"].min_char_sim
            assert cfg.duration_tolerance_range == (0.5, 3.0)

    def test_unknown_language_falls_back(self):
        assert get_thresholds("pt") is THRESHOLDS["default"]

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            THRESHOLDS["pt"] = ES  # type: ignore[index]

    def test_config_is_frozen(self):
        with pytest.raises(ValidationError):
            ES.min_rms = 0.0  # type: ignore[misc]


class TestSpeechQuality:
    def test_good_clip_passes(self):
        assert passes_speech_quality(metrics(), 20, ES)

    @pytest.mark.parametrize("duration", [0.0, -1.0, math.nan, math.inf, 0.5])
    def test_bad_duration_fails(self, duration):
        assert not passes_speech_quality(metrics(duration=duration), 20, ES)

    def test_zero_expected_duration_fails(self):
        cfg = ES.model_copy(update={"min_speech_sec": 0.0, "duration_per_char_sec": 0.0})
        assert not passes_speech_quality(metrics(), 20, cfg)

    def test_zero_duration_fails_even_with_zero_minimum(self):
        cfg = ES.model_copy(update={"min_speech_sec": 0.0, "min_zcr_per_sec": 0.0})
        assert not passes_speech_quality(metrics(duration=0.0, zero_crossings=0), 0, cfg)

    @pytest.mark.parametrize("rms", [0.001, math.nan, -math.inf])
    def test_quiet_or_invalid_rms_fails(self, rms):
        assert not passes_speech_quality(metrics(rms=rms), 20, ES)

    def test_zero_crossing_rate_too_low(self):
        # 400 per second, below 500
        assert not passes_speech_quality(metrics(zero_crossings=800), 20, ES)

    def test_zero_crossing_rate_too_high(self):
        # 9000 per second, above 8000
        assert not passes_speech_quality(metrics(zero_crossings=18000), 20, ES)

    def test_too_long_for_target(self):
        # expected 1.2s, ratio 10 > 2.8
        assert not passes_speech_quality(metrics(duration=12.0, zero_crossings=24000), 10, ES)

    def test_too_short_for_long_target(self):
        # expected 200 * 0.045 = 9s, ratio 0.22 < 0.5
        assert not passes_speech_quality(metrics(duration=2.0), 200, ES)

    def test_ratio_bounds_inclusive(self):
        cfg = ES.model_copy(update={"min_speech_sec": 1.0, "duration_tolerance_range": (0.5, 2.5)})
        # expected 1.0s, ratio exactly 2.5
        assert passes_speech_quality(metrics(duration=2.5, zero_crossings=5000), 10, cfg)
        assert not passes_speech_quality(metrics(duration=2.75, zero_crossings=5500), 10, cfg)

    def test_scenario_short_clip(self):
        clip = metrics(duration=0.2, rms=0.01, zero_crossings=100)
        assert not passes_speech_quality(clip, 40, ES)


class TestLoadThresholds:
    def test_overrides_and_new_language(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text(
            "es:\n"
            "  min_char_sim: 0.7\n"
            "pt:\n"
            "  min_speech_sec: 1.0\n"
            "  duration_tolerance_range: [0.4, 3.2]\n",
            encoding="utf-8",
        )
        table = load_thresholds(path)
        assert table["es"].min_char_sim == 0.7
        assert table["es"].min_speech_sec == 1.2
        assert table["pt"].min_speech_sec == 1.0
        assert table["pt"].duration_tolerance_range == (0.4, 3.2)
        assert table["pt"].min_char_sim == THRESHOLDS["default"].min_char_sim
        # Built-ins untouched
        assert THRESHOLDS["es"].min_char_sim == 0.74
        assert "pt" not in THRESHOLDS

    def test_default_override_applies_to_new_languages(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("default:\n  min_rms: 0.02\npt: {}\n", encoding="utf-8")
        table = load_thresholds(path)
        assert table["default"].min_rms == 0.02
        assert table["pt"].min_rms == 0.02
        assert table["es"].min_rms == 0.008

    def test_empty_file(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("", encoding="utf-8")
        assert dict(load_thresholds(path)) == dict(THRESHOLDS)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_thresholds(tmp_path / "missing.yaml")

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("es:\n  min_char_sim: high\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_thresholds(path)
