"""
VocalStress v1 Data Contracts

Data model shared by every engine component, the two transport capability
interfaces, and the engine's error types.

This module provides:
- AnalysisFrame: One time-domain window plus its dB magnitude spectrum
- F0Sample, SpectralSnapshot, TremorSnapshot: Per-frame measurements
- Baseline, SpectralBaseline: Frozen speaker baselines
- TimelineEntry: Periodic stress snapshot for the report
- SampleSource, FrameSource: Capability interfaces consumed by the engine
- EngineInitError, ConfigError: The only hard failures

INVARIANTS:
- Baselines are frozen once computed
- Measurement records are plain values, never shared across sessions
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Iterator, Protocol

import numpy as np


# =============================================================================
# Errors
# =============================================================================


class EngineInitError(Exception):
    """
    Raised when the engine cannot be constructed.

    This is the only caller-visible failure. Everything that can go wrong
    while processing audio degrades to neutral values instead.
    """


class ConfigError(EngineInitError):
    """
    Raised when an EngineConfig is invalid.

    Attributes:
        field: Name of the offending configuration field
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid config '{field}': {message}")


# =============================================================================
# Session Phase
# =============================================================================


class SessionPhase(Enum):
    """Session lifecycle. Baseline establishment is an orthogonal flag."""
    IDLE = "idle"
    ACTIVE = "active"
    STOPPED = "stopped"


# =============================================================================
# Frames and Measurements
# =============================================================================


@dataclass(frozen=True)
class AnalysisFrame:
    """
    One analysis tick supplied by the transport.

    Attributes:
        time_domain: Fixed-size window of mono samples in [-1, 1]
        spectrum_db: Magnitude spectrum of the window in dB, fft_size / 2 bins
    """
    time_domain: np.ndarray
    spectrum_db: np.ndarray


@dataclass(frozen=True)
class F0Sample:
    """Voiced pitch measurement."""
    frame_index: int
    f0: float
    amplitude: float


@dataclass(frozen=True)
class SpectralSnapshot:
    """
    Spectral shape of one frame.

    Attributes:
        centroid: Magnitude-weighted mean frequency (Hz)
        low_ratio: Energy share 0-500 Hz
        mid_ratio: Energy share 500-2000 Hz
        high_ratio: Energy share 2000-8000 Hz
        hammarberg: 10*log10(E below 2 kHz / E 2-5 kHz) in dB
    """
    centroid: float
    low_ratio: float
    mid_ratio: float
    high_ratio: float
    hammarberg: float


@dataclass(frozen=True)
class TremorSnapshot:
    """Envelope tremor measurement over the most recent ring-buffer window."""
    frame_index: int
    energy_ratio: float
    peak_freq: float
    band_energy: float
    total_energy: float


@dataclass(frozen=True)
class Baseline:
    """Speaker F0 baseline (population SD)."""
    mean_f0: float
    sd_f0: float


@dataclass(frozen=True)
class SpectralBaseline:
    """Speaker spectral baseline."""
    centroid: float
    hammarberg: float


@dataclass(frozen=True)
class TimelineEntry:
    """One periodic entry of the session timeline."""
    time_seconds: int
    stress_score: int
    f0: int
    is_speaking: bool

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)


# =============================================================================
# Transport Capability Interfaces
# =============================================================================


class SampleSource(Protocol):
    """Source of sequential mono sample blocks."""

    sample_rate: int

    def blocks(self) -> Iterator[np.ndarray]:
        ...


class FrameSource(Protocol):
    """
    Source of synchronized ticks.

    Each tick is the sample block received since the previous tick and the
    AnalysisFrame describing the most recent window.
    """

    sample_rate: int

    def ticks(self) -> Iterator[tuple[np.ndarray, AnalysisFrame]]:
        ...
