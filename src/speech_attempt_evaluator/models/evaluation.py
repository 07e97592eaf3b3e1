"""Speech attempt evaluation models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class ReasonCode(StrEnum):
    """Why an attempt did not pass."""

    SPEECH_QUALITY = "speech-quality"
    LOW_CHAR_SIMILARITY = "low-char-sim"
    LOW_WORD_F1 = "low-word-f1"
    # Only emitted by the strict mode
    NOT_TARGET_LANGUAGE = "not-target-lang"
    LOW_CONFIDENCE = "low-confidence"


class EvaluationMode(StrEnum):
    """Grading strictness."""

    ADAPTIVE = "adaptive"
    STRICT = "strict"


class AudioMetrics(BaseModel):
    """Coarse signal statistics for one recorded clip (channel 0)."""

    model_config = ConfigDict(frozen=True)

    duration_sec: float
    rms: float
    zero_crossings: int = Field(ge=0)


class EvaluationInput(BaseModel):
    """A single spoken attempt against a target sentence.

    ``softening`` is set when the transcript came from a live speech API,
    which is noisier than offline recognition, so text thresholds relax.
    """

    model_config = ConfigDict(frozen=True)

    recognized_text: str = ""
    confidence: float = 0.0
    audio_metrics: AudioMetrics | None = None
    target_sentence: str = ""
    language_code: str = "es"
    softening: bool = False


class WordOverlap(BaseModel):
    """Bag-of-words precision/recall/F1."""

    model_config = ConfigDict(frozen=True)

    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0


class EvaluationResult(BaseModel):
    """Outcome of grading one attempt."""

    model_config = ConfigDict(frozen=True)

    passed: bool
    score: int = Field(ge=0, le=100)
    reasons: frozenset[ReasonCode] = frozenset()
    char_sim: float = 0.0
    word_f1: float = 0.0
    lang_likelihood: float = 0.0
    confidence: float = 0.0
    mode: EvaluationMode = EvaluationMode.ADAPTIVE

    @field_serializer("reasons")
    def _serialize_reasons(self, reasons: frozenset[ReasonCode]) -> list[str]:
        return sorted(str(r) for r in reasons)
