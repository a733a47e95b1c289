"""
VocalStress v1 Frame Extraction — Spectral Shape

Responsibilities:
    - Spectral centroid from a dB magnitude spectrum
    - Low / mid / high band energy ratios
    - Hammarberg index

Bands (Hz, upper edges inclusive):
    - low:  0 - 500
    - mid:  500 - 2000
    - high: 2000 - 8000
    - Hammarberg: E(<= 2000) / E(2000 - 5000]

Invariants:
    - Zero denominators resolve to 0.0
    - Bins at -inf dB contribute nothing
"""

import numpy as np

from vocalstress.contracts import SpectralSnapshot


LOW_BAND_HZ = 500.0
MID_BAND_HZ = 2000.0
HIGH_BAND_HZ = 8000.0
HAMMARBERG_SPLIT_HZ = 2000.0
HAMMARBERG_UPPER_HZ = 5000.0


def db_to_magnitude(spectrum_db: np.ndarray) -> np.ndarray:
    """Convert dB magnitudes to linear (NaN treated as silence)."""
    db = np.nan_to_num(np.asarray(spectrum_db, dtype=np.float64), nan=-np.inf, posinf=0.0)
    return np.power(10.0, db / 20.0)


def _ratio(numerator: float, denominator: float) -> float:
    return float(numerator / denominator) if denominator > 0 else 0.0


def analyze_spectrum(
    spectrum_db: np.ndarray,
    sample_rate: int,
    fft_size: int,
) -> SpectralSnapshot:
    """
    Compute spectral shape features for one frame.

    Args:
        spectrum_db: Magnitude spectrum in dB (bin i at i * sample_rate / fft_size)
        sample_rate: Sample rate of the analysed signal
        fft_size: Size of the transform that produced the spectrum

    Returns:
        SpectralSnapshot
    """
    magnitude = db_to_magnitude(spectrum_db)
    freqs = np.arange(len(magnitude)) * (sample_rate / fft_size)
    power = magnitude * magnitude

    total_magnitude = float(np.sum(magnitude))
    centroid = _ratio(float(np.sum(freqs * magnitude)), total_magnitude)

    low = float(np.sum(power[freqs <= LOW_BAND_HZ]))
    mid = float(np.sum(power[(freqs > LOW_BAND_HZ) & (freqs <= MID_BAND_HZ)]))
    high = float(np.sum(power[(freqs > MID_BAND_HZ) & (freqs <= HIGH_BAND_HZ)]))
    band_total = low + mid + high

    below = float(np.sum(power[freqs <= HAMMARBERG_SPLIT_HZ]))
    above = float(np.sum(power[(freqs > HAMMARBERG_SPLIT_HZ) & (freqs <= HAMMARBERG_UPPER_HZ)]))
    hammarberg = 10.0 * np.log10(below / above) if above > 0 and below > 0 else 0.0

    return SpectralSnapshot(
        centroid=centroid,
        low_ratio=_ratio(low, band_total),
        mid_ratio=_ratio(mid, band_total),
        high_ratio=_ratio(high, band_total),
        hammarberg=float(hammarberg),
    )
