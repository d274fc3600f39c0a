"""Upload validation and decoding of audio files into mono PCM samples."""

import io
import logging
from pathlib import PurePath

import librosa
import numpy as np

from speaking_assessor.config import settings
from speaking_assessor.errors import InvalidAudioError

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES = frozenset({
    "audio/mpeg", "audio/mp3", "audio/wav", "audio/wave", "audio/x-wav",
    "audio/m4a", "audio/x-m4a", "audio/aac", "audio/x-aac",
    "audio/ogg", "audio/webm",
})
ACCEPTED_EXTENSIONS = frozenset({".mp3", ".wav", ".m4a", ".aac", ".ogg", ".webm"})

DECODE_ERROR = "Failed to decode audio. Please ensure the file is a valid audio format."


def validate_audio_file(filename: str | None, content_type: str | None, size: int) -> str | None:
    """Check an upload before decoding. Returns an error message, or None if valid.

    Either the MIME type or the file extension must be recognized.
    """
    if not filename:
        return "No file selected"

    mime = (content_type or "").split(";")[0].strip().lower()
    extension = PurePath(filename).suffix.lower()
    if mime not in ACCEPTED_MIME_TYPES and extension not in ACCEPTED_EXTENSIONS:
        return "Invalid file type. Please upload MP3, WAV, M4A, AAC, OGG, or WEBM files"

    if size > settings.max_upload_size_mb * 1024 * 1024:
        return f"File too large. Maximum size is {settings.max_upload_size_mb}MB"

    if size < settings.min_upload_size_bytes:
        return "File too small. Please upload a proper audio recording"

    return None


def decode_audio(data: bytes) -> tuple[np.ndarray, int]:
    """Decode an audio file at its native sample rate.

    Multi-channel audio is reduced to its first channel.
    Returns (float32 samples, sample_rate).
    """
    try:
        y, sr = librosa.load(io.BytesIO(data), sr=None, mono=False)
    except Exception as e:
        logger.warning("Audio decoding failed: %s", e)
        raise InvalidAudioError(DECODE_ERROR) from e

    if y.ndim > 1:
        y = y[0]
    if y.size == 0:
        raise InvalidAudioError(DECODE_ERROR)

    logger.debug("Decoded audio: %d samples at %d Hz", y.size, sr)
    return np.ascontiguousarray(y, dtype=np.float32), int(sr)
