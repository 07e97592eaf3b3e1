"""Signal statistics (duration, RMS, zero crossings) for recorded attempts."""

import asyncio
import io

import numpy as np
import soundfile as sf
import structlog

from speech_attempt_evaluator.audio.encoder import pcm16_to_float
from speech_attempt_evaluator.models.evaluation import AudioMetrics

logger = structlog.get_logger()


def compute_audio_metrics(samples: np.ndarray, sample_rate: int) -> AudioMetrics:
    """Compute metrics for one channel of float PCM.

    Zero crossings count adjacent samples whose ``x >= 0`` test differs,
    so a step onto exactly zero from below counts as a crossing.

    Args:
        samples: 1-D float array (channel 0).
        sample_rate: Samples per second.

    Returns:
        AudioMetrics for the signal.
    """
    samples = np.asarray(samples, dtype=np.float64).ravel()
    if samples.size == 0:
        return AudioMetrics(duration_sec=0.0, rms=0.0, zero_crossings=0)

    duration = samples.size / sample_rate
    rms = float(np.sqrt(np.mean(np.square(samples))))
    non_negative = samples >= 0
    zero_crossings = int(np.count_nonzero(non_negative[1:] != non_negative[:-1]))
    return AudioMetrics(duration_sec=duration, rms=rms, zero_crossings=zero_crossings)


def extract_audio_metrics(data: bytes) -> AudioMetrics | None:
    """Decode an encoded recording and compute its metrics.

    Any container libsndfile understands (WAV, FLAC, OGG/Vorbis, ...) is
    decoded at its native sample rate; only channel 0 is measured.

    Args:
        data: Encoded audio file contents.

    Returns:
        AudioMetrics, or None when the buffer is empty or cannot be decoded.
    """
    if not data:
        logger.warning("audio_decode_failed", reason="empty_buffer")
        return None
    try:
        audio, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    except Exception as exc:
        logger.warning("audio_decode_failed", reason="unreadable", error=str(exc))
        return None
    if audio.shape[0] == 0 or sample_rate <= 0:
        logger.warning("audio_decode_failed", reason="no_frames")
        return None
    return compute_audio_metrics(audio[:, 0], sample_rate)


def extract_pcm16_metrics(data: bytes, sample_rate: int) -> AudioMetrics | None:
    """Compute metrics for raw mono PCM16 as streamed by live speech APIs.

    Args:
        data: Little-endian PCM16 samples.
        sample_rate: Samples per second.

    Returns:
        AudioMetrics, or None when there is no complete sample.
    """
    if len(data) < 2 or sample_rate <= 0:
        logger.warning("audio_decode_failed", reason="empty_pcm16", sample_rate=sample_rate)
        return None
    return compute_audio_metrics(pcm16_to_float(data), sample_rate)


async def extract_audio_metrics_async(data: bytes) -> AudioMetrics | None:
    """Run :func:`extract_audio_metrics` in a worker thread."""
    return await asyncio.to_thread(extract_audio_metrics, data)
