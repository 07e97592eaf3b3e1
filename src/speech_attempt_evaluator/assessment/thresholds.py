"""Per-language grading thresholds and the speech-quality gate."""

import math
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

import structlog
import yaml
from pydantic import BaseModel, ConfigDict

from speech_attempt_evaluator.models.evaluation import AudioMetrics

logger = structlog.get_logger()

DEFAULT_LANGUAGE_KEY = "default"


class ThresholdConfig(BaseModel):
    """Grading thresholds for one language."""

    model_config = ConfigDict(frozen=True)

    min_speech_sec: float
    min_rms: float
    min_zcr_per_sec: float
    max_zcr_per_sec: float
    min_confidence: float
    min_char_sim: float
    min_word_f1: float
    min_lang_likelihood: float
    duration_per_char_sec: float
    duration_tolerance_range: tuple[float, float]


_DEFAULT = ThresholdConfig(
    min_speech_sec=1.1,
    min_rms=0.008,
    min_zcr_per_sec=500,
    max_zcr_per_sec=8000,
    min_confidence=0.55,
    min_char_sim=0.7,
    min_word_f1=0.6,
    min_lang_likelihood=0.55,
    duration_per_char_sec=0.045,
    duration_tolerance_range=(0.5, 2.8),
)

# Shared by nah, yua and tzo: every gate is looser.
_INDIGENOUS = _DEFAULT.model_copy(update={
    "min_speech_sec": 1.0,
    "min_zcr_per_sec": 400,
    "max_zcr_per_sec": 9000,
    "min_confidence": 0.5,
    "min_char_sim": 0.6,
    "min_word_f1": 0.5,
    "min_lang_likelihood": 0.45,
    "duration_tolerance_range": (0.5, 3.0),
})

THRESHOLDS: Mapping[str, ThresholdConfig] = MappingProxyType({
    DEFAULT_LANGUAGE_KEY: _DEFAULT,
    "es": _DEFAULT.model_copy(update={
        "min_speech_sec": 1.2,
        "min_char_sim": 0.74,
        "min_word_f1": 0.65,
    }),
    "en": _DEFAULT.model_copy(update={
        "min_char_sim": 0.72,
        "min_word_f1": 0.62,
        "duration_per_char_sec": 0.04,
    }),
    "nah": _INDIGENOUS,
    "yua": _INDIGENOUS,
    "tzo": _INDIGENOUS,
})


def get_thresholds(
    language_code: str, table: Mapping[str, ThresholdConfig] | None = None
) -> ThresholdConfig:
    """Look up thresholds by exact language code, falling back to ``default``."""
    table = THRESHOLDS if table is None else table
    cfg = table.get(language_code)
    if cfg is None:
        logger.debug("thresholds_default_fallback", language_code=language_code)
        return table[DEFAULT_LANGUAGE_KEY]
    return cfg


def load_thresholds(path: Path) -> Mapping[str, ThresholdConfig]:
    """Build a threshold table from built-ins plus YAML overrides.

    The file maps language codes to partial ``ThresholdConfig`` fields::

        es:
          min_char_sim: 0.7
        pt:
          min_speech_sec: 1.0

    Known codes are overridden field by field; new codes start from
    ``default`` (after its own overrides, if any).

    Args:
        path: YAML file location.

    Returns:
        A new read-only table; ``THRESHOLDS`` itself is never modified.
    """
    if not path.exists():
        raise FileNotFoundError(f"Thresholds file not found: {path}")
    with open(path, encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}

    table = dict(THRESHOLDS)
    default_override = overrides.pop(DEFAULT_LANGUAGE_KEY, None)
    if default_override:
        table[DEFAULT_LANGUAGE_KEY] = _merge(table[DEFAULT_LANGUAGE_KEY], default_override)
    for code, fields in overrides.items():
        base = table.get(str(code), table[DEFAULT_LANGUAGE_KEY])
        table[str(code)] = _merge(base, fields or {})

    logger.info("thresholds_loaded", path=str(path), languages=sorted(table))
    return MappingProxyType(table)


def _merge(base: ThresholdConfig, fields: dict) -> ThresholdConfig:
    # Re-validate so bad YAML values fail at load time
    return ThresholdConfig.model_validate({**base.model_dump(), **fields})


def passes_speech_quality(
    metrics: AudioMetrics, target_len_chars: int, cfg: ThresholdConfig
) -> bool:
    """Check that a recording plausibly contains an attempt at the target.

    Rejects silence (low RMS), noise or hum (zero-crossing rate out of
    range), and clips far too short or long for the target sentence.

    Args:
        metrics: Signal statistics for the clip.
        target_len_chars: Character length of the target sentence.
        cfg: Thresholds for the target language.

    Returns:
        True if every check passes.
    """
    duration = metrics.duration_sec
    if not math.isfinite(duration) or duration <= 0 or duration < cfg.min_speech_sec:
        return False
    if not math.isfinite(metrics.rms) or metrics.rms < cfg.min_rms:
        return False

    zps = metrics.zero_crossings / duration
    if zps < cfg.min_zcr_per_sec or zps > cfg.max_zcr_per_sec:
        return False

    expected = max(cfg.min_speech_sec, target_len_chars * cfg.duration_per_char_sec)
    if expected <= 0:
        return False
    ratio = duration / expected
    low, high = cfg.duration_tolerance_range
    return low <= ratio <= high
