"""
VocalStress v1 Frame Extraction — Voice Activity & Pitch

Responsibilities:
    - Voice activity detection (RMS gate + zero-crossing band)
    - Fundamental frequency tracking via normalized autocorrelation

Pitch tracking is two-stage: the best integer lag is chosen from the
normalized autocorrelation, then refined with parabolic interpolation.
Integer lags alone are several Hz off at voice sample rates, which is
enough to corrupt jitter.

Invariants:
    - No detection is reported as None, never raised
    - Silent or all-zero frames are never speech and never voiced
"""

import math
from dataclasses import dataclass

import numpy as np

from vocalstress import dsp
from vocalstress.config import EngineConfig


# =============================================================================
# Constants (calibrated)
# =============================================================================

MIN_WINDOWED_ENERGY = 0.001
MIN_CORRELATION_DENOMINATOR = 0.001
VOICING_THRESHOLD = 0.4


# =============================================================================
# Voice Activity Detection
# =============================================================================


@dataclass(frozen=True)
class VoiceActivity:
    """VAD decision with the measurements that produced it."""
    is_speech: bool
    rms: float
    zcr: float


def detect_voice_activity(samples: np.ndarray, config: EngineConfig) -> VoiceActivity:
    """
    Decide whether a frame contains speech.

    Args:
        samples: Time-domain frame
        config: Engine configuration (vad_threshold, zcr_min, zcr_max)

    Returns:
        VoiceActivity. Speech requires RMS >= vad_threshold and
        zcr_min < ZCR < zcr_max; ZCR is only computed above the RMS gate.
    """
    rms = dsp.compute_rms(samples)
    if rms < config.vad_threshold:
        return VoiceActivity(is_speech=False, rms=rms, zcr=0.0)

    zcr = dsp.zero_crossing_rate(samples)
    is_speech = config.zcr_min < zcr < config.zcr_max
    return VoiceActivity(is_speech=is_speech, rms=rms, zcr=zcr)


# =============================================================================
# Pitch Tracking
# =============================================================================


def lag_range(sample_rate: int, f0_min: float, f0_max: float) -> tuple[int, int]:
    """Integer lag search range [floor(sr / f0_max), ceil(sr / f0_min)]."""
    return int(math.floor(sample_rate / f0_max)), int(math.ceil(sample_rate / f0_min))


def track_f0(
    samples: np.ndarray,
    sample_rate: int,
    f0_min: float,
    f0_max: float,
) -> float | None:
    """
    Estimate the fundamental frequency of one frame.

    Args:
        samples: Time-domain frame (e.g. 2048 samples)
        sample_rate: Sample rate in Hz
        f0_min: Lowest admissible F0 (Hz)
        f0_max: Highest admissible F0 (Hz)

    Returns:
        F0 in Hz, or None if the frame is silent, unvoiced, or out of range.
    """
    windowed = dsp.hann_window(samples)
    if float(np.dot(windowed, windowed)) < MIN_WINDOWED_ENERGY:
        return None

    min_lag, max_lag = lag_range(sample_rate, f0_min, f0_max)
    lags, normalized, denominator = dsp.normalized_autocorrelation(windowed, min_lag, max_lag)
    if len(lags) == 0:
        return None

    valid = denominator >= MIN_CORRELATION_DENOMINATOR
    candidates = np.where(valid & (normalized > VOICING_THRESHOLD), normalized, -np.inf)
    best = int(np.argmax(candidates))
    if not np.isfinite(candidates[best]):
        return None

    best_lag = float(lags[best])

    # Refine only when both neighbours lie inside the search range
    if min_lag < lags[best] < max_lag - 1 and 0 < best < len(lags) - 1:
        offset = dsp.parabolic_offset(
            float(normalized[best - 1]),
            float(normalized[best]),
            float(normalized[best + 1]),
        )
        best_lag += offset

    if best_lag <= 0:
        return None

    f0 = sample_rate / best_lag
    if f0_min <= f0 <= f0_max:
        return f0
    return None
