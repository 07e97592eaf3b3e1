"""Audio payload decoding helpers for recorded attempts."""

import base64
import binascii

import numpy as np


def decode_base64_audio(data: str) -> bytes | None:
    """Decode a base64 audio payload.

    Args:
        data: Base64 string (standard alphabet, padding required).

    Returns:
        Raw bytes, or None if the payload is not valid base64.
    """
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        return None


def pcm16_to_float(pcm_bytes: bytes) -> np.ndarray:
    """Convert little-endian mono PCM16 bytes to float32 audio.

    Args:
        pcm_bytes: Raw PCM16 samples; a trailing odd byte is ignored.

    Returns:
        Float32 audio array in range [-1.0, 1.0].
    """
    usable = len(pcm_bytes) - len(pcm_bytes) % 2
    pcm16 = np.frombuffer(pcm_bytes[:usable], dtype="<i2")
    return pcm16.astype(np.float32) / 32767.0

