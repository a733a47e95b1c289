"""
VocalStress v1 Micro-Tremor Analyzer

Responsibilities:
    - Measure 8-12 Hz (Lippold) modulation of the amplitude envelope
    - Runs every frame, independent of voice activity

Pipeline (per frame):
    1. Read up to 2 s from the ring buffer (at least 1 s required)
    2. Rectify + ~5 ms centered moving average → envelope
    3. Remove DC (subtract envelope mean)
    4. Decimate to ~200 Hz
    5. Zero-pad to a power of two, radix-2 FFT magnitude
    6. Band energy (8-12 Hz) vs reference energy (0-20 Hz, DC excluded)

Invariants:
    - Insufficient buffered audio → None
    - energy_ratio in [0, 1]
    - peak_freq lies inside the tremor band bins
"""

import math

import numpy as np

from vocalstress import dsp
from vocalstress.buffers import RingBuffer
from vocalstress.config import EngineConfig
from vocalstress.contracts import TremorSnapshot


SMOOTHING_RATE_HZ = 200  # half-width = sample_rate / 200 → ~5 ms


class TremorAnalyzer:
    """Envelope-spectrum tremor measurement over the ring buffer."""

    def __init__(self, config: EngineConfig):
        self.sample_rate = config.sample_rate
        self.band_low = config.tremor_band_low
        self.band_high = config.tremor_band_high
        self.reference_hz = config.tremor_reference_hz
        self.min_samples = config.sample_rate
        self.max_samples = min(config.ring_buffer_capacity, 2 * config.sample_rate)
        self.smooth_half_width = config.sample_rate // SMOOTHING_RATE_HZ
        self.decimation = max(1, int(config.sample_rate // config.envelope_rate))
        self.envelope_rate = config.sample_rate / self.decimation

    def envelope(self, samples: np.ndarray) -> np.ndarray:
        """Rectified, smoothed, DC-free, decimated amplitude envelope."""
        env = dsp.moving_average_envelope(samples, self.smooth_half_width)
        env = env - np.mean(env)
        count = len(env) // self.decimation
        return env[: count * self.decimation : self.decimation]

    def band_analysis(self, envelope: np.ndarray) -> tuple[float, float, float, float]:
        """
        Measure tremor band energy of a downsampled envelope.

        Args:
            envelope: Envelope sampled at self.envelope_rate

        Returns:
            Tuple of (energy_ratio, peak_freq, band_energy, total_energy)
        """
        fft_len = dsp.next_power_of_2(len(envelope))
        if fft_len < 2:
            return 0.0, 0.0, 0.0, 0.0
        padded = np.zeros(fft_len)
        padded[: len(envelope)] = envelope

        spectrum = dsp.fft_magnitude(padded)
        bin_res = self.envelope_rate / fft_len

        low_bin = int(math.floor(self.band_low / bin_res))
        high_bin = int(math.ceil(self.band_high / bin_res))
        reference_bins = min(int(math.floor(self.reference_hz / bin_res)), len(spectrum))

        power = spectrum[1:reference_bins] ** 2
        bins = np.arange(1, reference_bins)
        in_band = (bins >= low_bin) & (bins <= high_bin)

        total_energy = float(np.sum(power))
        band_energy = float(np.sum(power[in_band]))

        peak_bin = low_bin
        if np.any(in_band):
            band_mags = spectrum[bins[in_band]]
            if float(np.max(band_mags)) > 0:
                peak_bin = int(bins[in_band][int(np.argmax(band_mags))])

        energy_ratio = band_energy / total_energy if total_energy > 0 else 0.0
        return energy_ratio, peak_bin * bin_res, band_energy, total_energy

    def analyze(self, ring: RingBuffer, frame_index: int) -> TremorSnapshot | None:
        """
        Analyze the most recent ring-buffer window.

        Args:
            ring: Session ring buffer
            frame_index: Current frame count, stored on the snapshot

        Returns:
            TremorSnapshot, or None if less than 1 s of audio is buffered.
        """
        if ring.available < self.min_samples:
            return None

        samples = ring.read_last(self.max_samples)
        envelope = self.envelope(samples)
        energy_ratio, peak_freq, band_energy, total_energy = self.band_analysis(envelope)

        return TremorSnapshot(
            frame_index=frame_index,
            energy_ratio=energy_ratio,
            peak_freq=peak_freq,
            band_energy=band_energy,
            total_energy=total_energy,
        )
