"""
VocalStress v1 — Real-time Voice Stress Analysis Engine

Pure, synchronous, in-process computation unit. The caller owns the audio
transport and hands the engine sample blocks and analysis frames.

Components (leaf-first):
    - Ring Buffer          → vocalstress.buffers
    - Frame Extraction     → vocalstress.pitch, vocalstress.spectral
    - Baseline Estimator   → vocalstress.baseline
    - Voice Quality        → vocalstress.voice_quality
    - Micro-Tremor         → vocalstress.tremor
    - Composite Scorer     → vocalstress.scoring
    - Session / Engine     → vocalstress.session

Invariants:
    - Single-threaded, not re-entrant
    - Bounded work per call
    - Degenerate numeric cases resolve to neutral values, never exceptions
    - Only construction can fail (EngineInitError)
"""

from vocalstress.config import EngineConfig
from vocalstress.contracts import (
    AnalysisFrame,
    ConfigError,
    EngineInitError,
    SessionPhase,
)
from vocalstress.session import VoiceStressEngine

__version__ = "1.0.0"

__all__ = [
    "AnalysisFrame",
    "ConfigError",
    "EngineConfig",
    "EngineInitError",
    "SessionPhase",
    "VoiceStressEngine",
]
