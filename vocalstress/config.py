"""
VocalStress v1 Engine Configuration.

Responsibilities:
- Hold every tunable of the engine with calibrated defaults
- Validate values before any buffer is allocated
- Serialization for config files and logging

Invariants:
- Immutable once constructed
- Defaults reproduce the calibrated heuristics (48 kHz, 2048-point frames)
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from vocalstress.contracts import ConfigError


# =============================================================================
# Defaults (calibrated heuristics, kept in sync with scoring thresholds)
# =============================================================================

DEFAULT_SAMPLE_RATE = 48000
DEFAULT_FFT_SIZE = 2048
F0_MIN = 75.0
F0_MAX = 400.0
VAD_THRESHOLD = 0.015
TREMOR_BAND_LOW = 8.0
TREMOR_BAND_HIGH = 12.0
BASELINE_SPEECH_FRAMES = 150  # ~5 s of voiced speech at 30 fps


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for one VoiceStressEngine."""

    sample_rate: int = DEFAULT_SAMPLE_RATE
    fft_size: int = DEFAULT_FFT_SIZE
    f0_min: float = F0_MIN
    f0_max: float = F0_MAX
    vad_threshold: float = VAD_THRESHOLD
    zcr_min: float = 0.02
    zcr_max: float = 0.5
    tremor_band_low: float = TREMOR_BAND_LOW
    tremor_band_high: float = TREMOR_BAND_HIGH
    tremor_reference_hz: float = 20.0
    envelope_rate: float = 200.0
    baseline_speech_frames: int = BASELINE_SPEECH_FRAMES
    ring_buffer_seconds: float = 2.0
    frame_rate: int = 30
    timeline_window_frames: int = 30
    voice_quality_history: int = 300
    spectral_history: int = 900
    tremor_history: int = 300

    @property
    def ring_buffer_capacity(self) -> int:
        """Ring buffer size in samples."""
        return int(self.sample_rate * self.ring_buffer_seconds)

    def validate(self) -> "EngineConfig":
        """
        Check value types and ranges.

        Returns:
            self, so construction and validation can be chained.

        Raises:
            ConfigError: On the first invalid field.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            allowed = (int,) if f.type is int else (int, float)
            if isinstance(value, bool) or not isinstance(value, allowed):
                kind = "an integer" if f.type is int else "a number"
                raise ConfigError(f.name, f"must be {kind}, got {value!r}")
            if not math.isfinite(value):
                raise ConfigError(f.name, "must be finite")

        positive = (
            "sample_rate", "fft_size", "f0_min", "f0_max", "vad_threshold",
            "envelope_rate", "baseline_speech_frames", "ring_buffer_seconds",
            "frame_rate", "timeline_window_frames", "voice_quality_history",
            "spectral_history", "tremor_history",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigError(name, "must be positive")

        if self.f0_min >= self.f0_max:
            raise ConfigError("f0_min", f"must be below f0_max ({self.f0_max})")
        if self.zcr_min >= self.zcr_max:
            raise ConfigError("zcr_min", f"must be below zcr_max ({self.zcr_max})")
        if not 0 < self.tremor_band_low < self.tremor_band_high <= self.tremor_reference_hz:
            raise ConfigError(
                "tremor_band_low",
                "tremor band must satisfy 0 < low < high <= tremor_reference_hz",
            )
        if self.tremor_reference_hz * 2 > self.envelope_rate:
            raise ConfigError("envelope_rate", "must be at least twice tremor_reference_hz")
        if self.envelope_rate > self.sample_rate:
            raise ConfigError("envelope_rate", "must not exceed sample_rate")
        if self.sample_rate / self.f0_min >= self.fft_size:
            raise ConfigError("fft_size", "frame too short for the lowest F0 lag")
        if self.ring_buffer_capacity < self.sample_rate:
            raise ConfigError("ring_buffer_seconds", "must hold at least 1 s of audio")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """
        Build a config from a mapping, e.g. a parsed JSON file.

        Missing keys keep their defaults.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if not isinstance(data, Mapping):
            raise ConfigError("config", f"must be an object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(unknown[0], "unknown configuration key")
        return cls(**dict(data)).validate()
