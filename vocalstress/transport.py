"""
VocalStress v1 Transport — Offline replay of recorded audio.

Responsibilities:
- WAV input (mono downmix, float32)
- Analyser emulation: per-tick time-domain window + smoothed dB spectrum
- Driving an engine through a whole recording
- Preloading the tremor ring buffer from raw sample blocks

Library Stack:
    - soundfile: WAV I/O (libsndfile-backed)
    - numpy: Framing and spectra
    - scipy.signal.get_window: Blackman analysis window

Invariants:
- Ticks are evenly spaced at frame_rate; every sample is delivered once
- Windows before the first fft_size samples are zero-padded on the left
- Deterministic: same input → identical ticks
"""

import logging
from pathlib import Path
from typing import Iterator

import numpy as np
import soundfile as sf
from scipy.signal import get_window

from vocalstress.contracts import AnalysisFrame, FrameSource, SampleSource

logger = logging.getLogger(__name__)


MIN_DECIBELS = -200.0  # floor for empty bins


# =============================================================================
# WAV I/O
# =============================================================================


def read_audio(path: Path) -> tuple[np.ndarray, int]:
    """
    Read an audio file as mono float32.

    Args:
        path: Path to audio file (any format libsndfile reads)

    Returns:
        Tuple of (samples in [-1, 1], sample_rate)

    Note:
        Stereo → mono by arithmetic mean.
    """
    samples, sr = sf.read(path, dtype="float32", always_2d=False)
    if samples.ndim > 1:
        samples = np.mean(samples, axis=1).astype(np.float32)
    return samples, int(sr)


def write_audio(path: Path, samples: np.ndarray, sample_rate: int) -> None:
    """Write samples as PCM 16-bit WAV, hard clipped to [-1, 1]."""
    sf.write(path, np.clip(samples, -1.0, 1.0), sample_rate, subtype="PCM_16")


# =============================================================================
# Analyser Emulation
# =============================================================================


class AnalyserFrameSource:
    """
    SampleSource and FrameSource over an in-memory signal.

    Each tick yields the samples received since the previous tick and an
    AnalysisFrame of the most recent fft_size samples. The spectrum is a
    Blackman-windowed magnitude in dB, smoothed over time with
    smoothing * previous + (1 - smoothing) * current.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        fft_size: int = 2048,
        frame_rate: int = 30,
        smoothing: float = 0.3,
    ):
        self.samples = np.asarray(samples, dtype=np.float32).ravel()
        self.sample_rate = sample_rate
        self.fft_size = fft_size
        self.frame_rate = frame_rate
        self.smoothing = smoothing
        self.window = get_window("blackman", fft_size)

    def __len__(self) -> int:
        return len(self.samples) * self.frame_rate // self.sample_rate

    def _boundary(self, tick: int) -> int:
        return tick * self.sample_rate // self.frame_rate

    def _window_ending_at(self, end: int) -> np.ndarray:
        start = end - self.fft_size
        if start >= 0:
            return self.samples[start:end].copy()
        frame = np.zeros(self.fft_size, dtype=np.float32)
        if end > 0:
            frame[-end:] = self.samples[:end]
        return frame

    def blocks(self) -> Iterator[np.ndarray]:
        """Yield the sample block of every complete tick."""
        for tick in range(1, len(self) + 1):
            yield self.samples[self._boundary(tick - 1):self._boundary(tick)]

    def ticks(self) -> Iterator[tuple[np.ndarray, AnalysisFrame]]:
        """Yield (block, frame) for every complete tick of the signal."""
        smoothed = np.zeros(self.fft_size // 2)
        for tick in range(1, len(self) + 1):
            start, end = self._boundary(tick - 1), self._boundary(tick)
            block = self.samples[start:end]
            frame = self._window_ending_at(end)

            magnitude = np.abs(np.fft.rfft(frame * self.window))[: self.fft_size // 2]
            magnitude /= self.fft_size
            smoothed = self.smoothing * smoothed + (1.0 - self.smoothing) * magnitude
            with np.errstate(divide="ignore"):
                spectrum_db = np.maximum(20.0 * np.log10(smoothed), MIN_DECIBELS)

            yield block, AnalysisFrame(time_domain=frame, spectrum_db=spectrum_db)


# =============================================================================
# Session Driver
# =============================================================================


def run_session(engine, source: FrameSource, stop: bool = True):
    """
    Feed every tick of a source through an engine.

    Args:
        engine: VoiceStressEngine (started here if not ACTIVE)
        source: Any FrameSource
        stop: Stop the session after the last tick

    Returns:
        The engine's FullReport
    """
    engine.start()
    frames = 0
    for block, frame in source.ticks():
        engine.push_samples(block)
        engine.process_frame(frame)
        frames += 1

    logger.info("Replayed %d frames", frames)
    if stop:
        engine.stop()
    return engine.full_analysis()


def preload_samples(engine, source: SampleSource) -> int:
    """
    Push every block of a source into the engine's ring buffer.

    No frames are analyzed, so histories and baselines are untouched; the
    next analysis tick sees up to ring_buffer_seconds of prior audio for
    tremor analysis.

    Args:
        engine: VoiceStressEngine (started here if not ACTIVE)
        source: Any SampleSource at the engine's sample rate

    Returns:
        Number of samples pushed

    Raises:
        ValueError: If the source sample rate differs from the engine's
    """
    if source.sample_rate != engine.config.sample_rate:
        raise ValueError(
            f"Source sample rate {source.sample_rate} Hz does not match "
            f"engine sample rate {engine.config.sample_rate} Hz"
        )

    engine.start()
    pushed = 0
    for block in source.blocks():
        engine.push_samples(block)
        pushed += len(block)

    logger.debug("Preloaded %d samples", pushed)
    return pushed
