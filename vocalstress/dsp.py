"""
VocalStress v1 DSP Primitives

CPU-only signal processing primitives shared by the frame extractor and the
tremor analyzer.

Library Stack:
    - numpy: Array operations and vectorized butterflies

PRIMITIVES:
    - RMS, zero-crossing rate
    - Hann window
    - Normalized autocorrelation over a lag range
    - Parabolic (vertex) interpolation
    - Radix-2 Cooley-Tukey FFT magnitude
    - Rectified moving-average envelope

INVARIANTS:
    - No primitive mutates its input
    - Degenerate inputs (empty, silent) return zeros, not exceptions
    - fft_magnitude rejects non-power-of-two lengths (caller bug)
"""

import numpy as np


# =============================================================================
# Frame Metrics
# =============================================================================


def compute_rms(samples: np.ndarray) -> float:
    """Compute RMS of a frame (0.0 for an empty frame)."""
    if len(samples) == 0:
        return 0.0
    x = np.asarray(samples, dtype=np.float64)
    return float(np.sqrt(np.mean(x * x)))


def zero_crossing_rate(samples: np.ndarray) -> float:
    """
    Compute zero-crossing rate.

    A crossing is counted whenever (x[i] >= 0) differs from (x[i-1] >= 0).

    Returns:
        Crossings divided by frame length
    """
    if len(samples) < 2:
        return 0.0
    positive = np.asarray(samples) >= 0
    crossings = np.count_nonzero(positive[1:] != positive[:-1])
    return float(crossings / len(samples))


def hann_window(samples: np.ndarray) -> np.ndarray:
    """Apply a symmetric Hann window, returning a new float64 array."""
    x = np.asarray(samples, dtype=np.float64)
    n = len(x)
    if n < 2:
        return x.copy()
    i = np.arange(n)
    return x * 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (n - 1)))


# =============================================================================
# Autocorrelation
# =============================================================================


def autocorrelation_terms(
    samples: np.ndarray,
    min_lag: int,
    max_lag: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compute raw autocorrelation and segment energies for a lag range.

    Args:
        samples: Windowed frame (1D)
        min_lag: First lag (inclusive)
        max_lag: Last lag (inclusive), clamped to len(samples) - 1

    Returns:
        Tuple of (lags, correlation, denominator) where denominator is
        sqrt(energy(x[:n-lag]) * energy(x[lag:])) for each lag.
    """
    x = np.asarray(samples, dtype=np.float64)
    n = len(x)
    max_lag = min(max_lag, n - 1)
    if n == 0 or max_lag < min_lag:
        empty = np.zeros(0)
        return empty.astype(int), empty, empty

    lags = np.arange(min_lag, max_lag + 1)
    full = np.correlate(x, x, mode="full")
    correlation = full[n - 1 + lags]

    # prefix[k] = energy of x[:k]
    prefix = np.concatenate(([0.0], np.cumsum(x * x)))
    energy_head = prefix[n - lags]
    energy_tail = prefix[n] - prefix[lags]
    denominator = np.sqrt(np.maximum(energy_head * energy_tail, 0.0))
    return lags, correlation, denominator


def normalized_autocorrelation(
    samples: np.ndarray,
    min_lag: int,
    max_lag: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Normalized autocorrelation r(lag) / sqrt(e1 * e2).

    Lags with a zero denominator get 0.

    Returns:
        Tuple of (lags, normalized values, denominators)
    """
    lags, correlation, denominator = autocorrelation_terms(samples, min_lag, max_lag)
    normalized = np.divide(
        correlation,
        denominator,
        out=np.zeros_like(correlation),
        where=denominator > 0,
    )
    return lags, normalized, denominator


def parabolic_offset(y1: float, y2: float, y3: float) -> float:
    """
    Sub-sample offset of the vertex of the parabola through three points.

    Args:
        y1, y2, y3: Values at x-1, x, x+1

    Returns:
        Offset in [-1, 1] for a proper peak; 0.0 when the points are collinear
    """
    curvature = y1 - 2.0 * y2 + y3
    if curvature == 0:
        return 0.0
    return (y1 - y3) / (2.0 * curvature)


# =============================================================================
# FFT
# =============================================================================


def next_power_of_2(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    p = 1
    while p < n:
        p <<= 1
    return p


def _bit_reversed_indices(n: int) -> np.ndarray:
    """Bit-reversal permutation for a power-of-two length."""
    bits = n.bit_length() - 1
    indices = np.arange(n)
    reversed_indices = np.zeros(n, dtype=np.int64)
    for _ in range(bits):
        reversed_indices = (reversed_indices << 1) | (indices & 1)
        indices = indices >> 1
    return reversed_indices


def fft(samples: np.ndarray) -> np.ndarray:
    """
    Iterative radix-2 Cooley-Tukey FFT.

    Args:
        samples: Real or complex input, length must be a power of two

    Returns:
        Complex spectrum of the same length

    Raises:
        ValueError: If the length is not a power of two
    """
    x = np.asarray(samples, dtype=np.complex128)
    n = len(x)
    if n == 0 or n & (n - 1):
        raise ValueError(f"FFT length must be a power of two, got {n}")

    # Bit-reversal permutation
    data = x[_bit_reversed_indices(n)]

    # Butterflies, one vectorized pass per stage
    size = 2
    while size <= n:
        half = size // 2
        twiddle = np.exp(-2j * np.pi * np.arange(half) / size)
        blocks = data.reshape(-1, size)
        even = blocks[:, :half].copy()
        odd = blocks[:, half:] * twiddle
        blocks[:, :half] = even + odd
        blocks[:, half:] = even - odd
        data = blocks.reshape(n)
        size *= 2

    return data


def fft_magnitude(samples: np.ndarray) -> np.ndarray:
    """
    Magnitude spectrum of a real signal.

    Returns:
        First N/2 bin magnitudes (DC up to, excluding, Nyquist)
    """
    spectrum = fft(samples)
    return np.abs(spectrum[: len(spectrum) // 2])


# =============================================================================
# Envelope
# =============================================================================


def moving_average_envelope(samples: np.ndarray, half_width: int) -> np.ndarray:
    """
    Rectify and smooth with a centered moving average.

    Each output i is the mean of |x[j]| for j in [i - half_width, i + half_width],
    with the window clamped at the edges (count shrinks accordingly).

    Args:
        samples: Input samples (1D)
        half_width: Samples on each side of the center

    Returns:
        Envelope (float64), same length as input
    """
    rectified = np.abs(np.asarray(samples, dtype=np.float64))
    n = len(rectified)
    if n == 0:
        return rectified

    half_width = max(0, int(half_width))
    prefix = np.concatenate(([0.0], np.cumsum(rectified)))
    i = np.arange(n)
    start = np.maximum(0, i - half_width)
    end = np.minimum(n, i + half_width + 1)
    return (prefix[end] - prefix[start]) / (end - start)
