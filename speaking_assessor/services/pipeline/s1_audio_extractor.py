"""Stage 1: Audio Feature Extractor - energy-based speech features.

Consumes a decoded mono PCM buffer (floats in [-1, 1]) and its sample rate,
and derives duration, volume, pause, speech-rate, pitch-variation and
clarity features in a fixed number of vectorized passes over the buffer.

"Pitch" is an amplitude-envelope proxy (variability of 50ms window means),
not a fundamental-frequency estimate. Downstream bands are tuned against it.
"""

import logging
import math
from typing import Any, Sequence

import numpy as np

from speaking_assessor.errors import InvalidAudioError
from speaking_assessor.models.schemas.feature_set import FeatureSet
from speaking_assessor.services.numeric import clamp, clamp_score, round_half_up
from speaking_assessor.services.pipeline.base import BaseStage

logger = logging.getLogger(__name__)

SILENCE_THRESHOLD = 0.01  # absolute amplitude
MIN_PAUSE_SECONDS = 0.3
WORDS_PER_SECOND = 2.5  # fixed average speaking assumption
PITCH_WINDOW_SECONDS = 0.05
QUIET_WINDOW_THRESHOLD = 0.001  # window means at or below this are ignored


# ---------------------------------------------------------------------------
# Banding
# ---------------------------------------------------------------------------

def score_duration(duration_seconds: float) -> tuple[int, str]:
    """Band the recording length. Returns (score, feedback)."""
    minutes = duration_seconds / 60
    if minutes < 0.5:
        return 40, "Too short. Try to speak for at least 1-2 minutes"
    elif minutes < 1:
        return 60, "A bit short. Aim for 1.5-2.5 minutes for optimal assessment"
    elif minutes <= 3:
        return 95, "Perfect duration! Well-balanced speaking time"
    elif minutes <= 4:
        return 85, "Good length, but slightly long. Try to be more concise"
    return 70, "Too long. Practice being more concise and focused"


def score_pause_count(pause_count: int) -> int:
    """Optimal range is 3-15 pauses."""
    if pause_count < 3:
        return 60
    elif pause_count <= 15:
        return 95
    elif pause_count <= 25:
        return 80
    return 65


def score_speech_rate(wpm: float) -> tuple[int, str]:
    if wpm < 100:
        return 70, "Speaking too slowly. Try to speak more naturally"
    elif wpm <= 160:
        return 95, "Excellent speaking pace! Natural and clear"
    elif wpm <= 180:
        return 85, "Speaking a bit fast. Try to slow down slightly"
    return 65, "Speaking too fast. Slow down for better clarity"


def score_pitch_variation(variation: float) -> int:
    if variation < 0.2:
        return 65  # monotone
    elif variation <= 0.6:
        return 95
    return 75  # erratic


# ---------------------------------------------------------------------------
# Stage
# ---------------------------------------------------------------------------

class AudioFeatureExtractor(BaseStage):
    stage_name = "s1_audio_extractor"

    def run(self, **kwargs: Any) -> FeatureSet:
        return self.extract(kwargs["samples"], kwargs["sample_rate"])

    def extract(self, samples: Sequence[float] | np.ndarray, sample_rate: int) -> FeatureSet:
        """Compute the FeatureSet for one mono buffer.

        Raises:
            InvalidAudioError: empty or non-mono buffer, non-numeric or
                non-finite samples, or a non-positive sample rate.
        """
        audio = _as_mono_buffer(samples, sample_rate)
        magnitude = np.abs(audio)

        duration = audio.size / sample_rate
        duration_score, duration_feedback = score_duration(duration)

        average, consistency, energy = _analyze_volume(magnitude)
        pause_count, pause_total = _detect_pauses(magnitude, sample_rate)
        pause_score = score_pause_count(pause_count)

        raw_wpm = _estimate_speech_rate(duration, pause_total)
        rate_score, rate_feedback = score_speech_rate(raw_wpm)
        wpm = round_half_up(raw_wpm)

        variation, pitch_score = _analyze_pitch(magnitude, sample_rate)
        clarity = clamp_score(consistency * 50 + pitch_score / 2)

        logger.debug(
            "Audio features: duration=%.2fs pauses=%d (%.2fs) wpm=%d variation=%.3f clarity=%d",
            duration, pause_count, pause_total, wpm, variation, clarity,
        )

        return FeatureSet(
            duration_seconds=duration,
            duration_score=duration_score,
            duration_feedback=duration_feedback,
            average_volume=average,
            volume_consistency=consistency,
            energy_level=energy,
            pause_count=pause_count,
            pause_duration_seconds=pause_total,
            pause_score=pause_score,
            speech_rate_wpm=float(wpm),
            speech_rate_score=rate_score,
            speech_rate_feedback=rate_feedback,
            pitch_variation=variation,
            pitch_score=pitch_score,
            clarity=clarity,
        )


# ---------------------------------------------------------------------------
# Feature helpers
# ---------------------------------------------------------------------------

def _as_mono_buffer(samples: Sequence[float] | np.ndarray, sample_rate: int) -> np.ndarray:
    if sample_rate is None or sample_rate <= 0:
        raise InvalidAudioError(f"Sample rate must be positive, got {sample_rate}")

    try:
        audio = np.asarray(samples, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidAudioError(f"Audio samples must be numeric: {e}") from e

    if audio.ndim != 1:
        raise InvalidAudioError(
            f"Expected a mono (1-D) sample buffer, got shape {audio.shape}"
        )
    if audio.size == 0:
        raise InvalidAudioError("Audio buffer is empty")
    if not np.all(np.isfinite(audio)):
        raise InvalidAudioError("Audio buffer contains NaN or infinite samples")
    return audio


def _analyze_volume(magnitude: np.ndarray) -> tuple[float, float, float]:
    """Mean |x|, consistency (1 - std/mean of |x|) and RMS energy."""
    average = float(magnitude.mean())
    mean_square = float(np.mean(magnitude * magnitude))
    variance = mean_square - average * average
    std_dev = math.sqrt(max(0.0, variance))

    consistency = clamp(1 - std_dev / average, 0.0, 1.0) if average > 0 else 0.0
    energy = math.sqrt(mean_square)

    return round(average, 6), round(consistency, 6), round(energy, 6)


def _detect_pauses(magnitude: np.ndarray, sample_rate: int) -> tuple[int, float]:
    """Count silent runs lasting at least MIN_PAUSE_SECONDS.

    A run still open at the end of the buffer counts too.
    Returns (pause_count, total_pause_seconds).
    """
    min_pause_samples = max(1, int(math.floor(MIN_PAUSE_SECONDS * sample_rate)))
    silent = (magnitude < SILENCE_THRESHOLD).astype(np.int8)

    # +1 where a silent run starts, -1 one past where it ends
    edges = np.diff(np.concatenate(([0], silent, [0])))
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    run_lengths = ends - starts

    pauses = run_lengths[run_lengths >= min_pause_samples]
    total_seconds = float(pauses.sum()) / sample_rate
    # Rounding must not push the total past the buffer length
    total_seconds = min(round(total_seconds, 2), magnitude.size / sample_rate)
    return int(pauses.size), total_seconds


def _estimate_speech_rate(duration: float, pause_total: float) -> float:
    """Words per minute from active (non-pause) time at a fixed words/second.

    Unrounded; bands are applied to this value.
    """
    active_time = max(1.0, duration - pause_total)
    estimated_words = active_time * WORDS_PER_SECOND
    return estimated_words / duration * 60


def _analyze_pitch(magnitude: np.ndarray, sample_rate: int) -> tuple[float, int]:
    """Coefficient of variation of 50ms window mean amplitudes.

    The trailing partial window is dropped. Returns (variation, score);
    (0.0, 50) when no window is above the quiet threshold.
    """
    window = int(math.floor(sample_rate * PITCH_WINDOW_SECONDS))
    n_windows = magnitude.size // window if window > 0 else 0
    if n_windows == 0:
        return 0.0, 50

    window_means = magnitude[: n_windows * window].reshape(n_windows, window).mean(axis=1)
    voiced = window_means[window_means > QUIET_WINDOW_THRESHOLD]
    if voiced.size == 0:
        return 0.0, 50

    variation = float(voiced.std() / voiced.mean())
    return round(variation, 3), score_pitch_variation(variation)
