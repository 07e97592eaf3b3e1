"""REST API routes for grading spoken attempts."""

import asyncio
from collections.abc import Mapping
from typing import Annotated, Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from speech_attempt_evaluator.assessment.evaluator import evaluate_attempt
from speech_attempt_evaluator.assessment.thresholds import ThresholdConfig
from speech_attempt_evaluator.audio.encoder import decode_base64_audio
from speech_attempt_evaluator.audio.metrics import (
    extract_audio_metrics_async,
    extract_pcm16_metrics,
)
from speech_attempt_evaluator.config import Settings
from speech_attempt_evaluator.models.evaluation import (
    AudioMetrics,
    EvaluationInput,
    EvaluationMode,
    EvaluationResult,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


def app_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def app_thresholds(request: Request) -> Mapping[str, ThresholdConfig]:
    """Threshold table resolved when the application was built."""
    return request.app.state.thresholds


SettingsDep = Annotated[Settings, Depends(app_settings)]
ThresholdsDep = Annotated[Mapping[str, ThresholdConfig], Depends(app_thresholds)]


class AudioPayload(BaseModel):
    """Recorded audio sent inline as base64."""

    audio_base64: str | None = None
    audio_format: Literal["container", "pcm16"] = "container"
    sample_rate: int | None = Field(default=None, gt=0)


class EvaluateRequest(AudioPayload):
    """Attempt to grade, optionally with audio to measure server-side."""

    recognized_text: str = ""
    confidence: float = 0.0
    audio_metrics: AudioMetrics | None = None
    target_sentence: str = ""
    language_code: str | None = None
    softening: bool = False
    mode: EvaluationMode | None = None


class AudioMetricsResponse(BaseModel):
    metrics: AudioMetrics | None


async def _metrics_from_payload(
    payload: AudioPayload, max_audio_bytes: int
) -> AudioMetrics | None:
    """Decode inline audio; anything undecodable yields None."""
    if not payload.audio_base64:
        return None
    # base64 expands by 4/3
    if len(payload.audio_base64) * 3 // 4 > max_audio_bytes:
        raise HTTPException(status_code=413, detail="Audio payload too large")
    data = decode_base64_audio(payload.audio_base64)
    if data is None:
        logger.warning("audio_decode_failed", reason="invalid_base64")
        return None
    if payload.audio_format == "pcm16":
        if payload.sample_rate is None:
            raise HTTPException(status_code=422, detail="sample_rate is required for pcm16")
        return await asyncio.to_thread(extract_pcm16_metrics, data, payload.sample_rate)
    return await extract_audio_metrics_async(data)


@router.post("/evaluate")
async def evaluate_endpoint(
    request: EvaluateRequest, settings: SettingsDep, thresholds: ThresholdsDep
) -> EvaluationResult:
    """Grade one spoken attempt."""
    audio_metrics = request.audio_metrics
    if audio_metrics is None:
        audio_metrics = await _metrics_from_payload(request, settings.max_audio_bytes)

    attempt = EvaluationInput(
        recognized_text=request.recognized_text,
        confidence=request.confidence,
        audio_metrics=audio_metrics,
        target_sentence=request.target_sentence,
        language_code=request.language_code or settings.default_language,
        softening=request.softening,
    )
    mode = request.mode or settings.default_mode
    result = evaluate_attempt(attempt, mode=mode, thresholds=thresholds)
    logger.info(
        "attempt_graded",
        language_code=attempt.language_code,
        mode=mode,
        passed=result.passed,
        score=result.score,
        has_audio_metrics=audio_metrics is not None,
    )
    return result


@router.post("/audio-metrics")
async def audio_metrics_endpoint(
    payload: AudioPayload, settings: SettingsDep
) -> AudioMetricsResponse:
    """Measure a recorded clip without grading it."""
    metrics = await _metrics_from_payload(payload, settings.max_audio_bytes)
    return AudioMetricsResponse(metrics=metrics)


@router.get("/languages")
async def list_languages(thresholds: ThresholdsDep) -> dict[str, dict]:
    """Active threshold table keyed by language code."""
    return {code: cfg.model_dump() for code, cfg in thresholds.items()}


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
