"""
VocalStress v1 Voice Quality — Jitter & Shimmer

Responsibilities:
    - Relative jitter from consecutive pitch periods
    - Relative shimmer and shimmer (dB) from consecutive amplitudes

Invariants:
    - Fewer than two values → zeros
    - Non-positive means → zeros
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class JitterResult:
    absolute: float = 0.0  # samples
    relative: float = 0.0  # percent


@dataclass(frozen=True)
class ShimmerResult:
    relative: float = 0.0  # percent
    db: float = 0.0


def compute_jitter(periods: Sequence[float]) -> JitterResult:
    """
    Mean absolute period difference relative to the mean period.

    Args:
        periods: Consecutive pitch periods (samples)

    Returns:
        JitterResult with absolute jitter and jitter percent
    """
    p = np.asarray(periods, dtype=np.float64)
    if len(p) < 2:
        return JitterResult()

    absolute = float(np.mean(np.abs(np.diff(p))))
    mean_period = float(np.mean(p))
    relative = absolute / mean_period * 100.0 if mean_period > 0 else 0.0
    return JitterResult(absolute=absolute, relative=relative)


def compute_shimmer(amplitudes: Sequence[float]) -> ShimmerResult:
    """
    Amplitude perturbation between consecutive frames.

    The dB variant sums |20*log10(a[i] / a[i-1])| over pairs where both
    amplitudes are positive and divides by the number of pairs.

    Args:
        amplitudes: Consecutive frame amplitudes (RMS)

    Returns:
        ShimmerResult with shimmer percent and shimmer dB
    """
    a = np.asarray(amplitudes, dtype=np.float64)
    if len(a) < 2:
        return ShimmerResult()

    pairs = len(a) - 1
    mean_amp = float(np.mean(a))
    relative = float(np.mean(np.abs(np.diff(a)))) / mean_amp * 100.0 if mean_amp > 0 else 0.0

    prev, curr = a[:-1], a[1:]
    both_positive = (prev > 0) & (curr > 0)
    log_ratios = 20.0 * np.log10(curr[both_positive] / prev[both_positive])
    db = float(np.sum(np.abs(log_ratios))) / pairs

    return ShimmerResult(relative=relative, db=db)
