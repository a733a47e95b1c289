"""
VocalStress v1 Session State.

Responsibilities:
- Own every buffer, history, baseline and counter of one session
- Reset to the initial state on clear

Invariants:
- One SessionState per engine; never shared across sessions
- Mutated only by the engine's per-frame processing
- All histories except f0_history are capped FIFO queues
"""

from collections import deque

from vocalstress.baseline import BaselineEstimator
from vocalstress.buffers import RingBuffer, capped_history
from vocalstress.config import EngineConfig
from vocalstress.contracts import (
    F0Sample,
    SpectralSnapshot,
    TimelineEntry,
    TremorSnapshot,
)


class SessionState:
    """Aggregate owner of all per-session data."""

    def __init__(self, config: EngineConfig):
        self.config = config
        self.ring = RingBuffer(config.ring_buffer_capacity)
        self.baselines = BaselineEstimator(config.baseline_speech_frames)

        self.f0_history: list[F0Sample] = []
        self.pitch_periods: deque[float] = capped_history(config.voice_quality_history)
        self.amplitudes: deque[float] = capped_history(config.voice_quality_history)
        self.spectral_history: deque[SpectralSnapshot] = capped_history(config.spectral_history)
        self.tremor_history: deque[TremorSnapshot] = capped_history(config.tremor_history)
        self.timeline: list[TimelineEntry] = []

        self._reset_counters()

    def _reset_counters(self) -> None:
        self.total_frames = 0
        self.speech_frames = 0
        self.silence_frames = 0
        self.spectral_count = 0
        self.is_speaking = False

        self.pause_count = 0
        self.in_pause = False
        self.pause_start = 0
        self.pause_durations: list[int] = []

    def clear(self) -> None:
        """Restore the initial, empty state."""
        self.ring.clear()
        self.baselines.reset()
        self.f0_history = []
        self.pitch_periods.clear()
        self.amplitudes.clear()
        self.spectral_history.clear()
        self.tremor_history.clear()
        self.timeline = []
        self._reset_counters()

    # -------------------------------------------------------------------------
    # Pause tracking
    # -------------------------------------------------------------------------

    def mark_speech(self) -> None:
        """Count a speech frame, closing an open pause."""
        self.speech_frames += 1
        if self.in_pause:
            self.in_pause = False
            self.pause_durations.append(self.total_frames - self.pause_start)

    def mark_silence(self) -> None:
        """Count a silence frame, opening a pause after speech has been heard."""
        self.silence_frames += 1
        if not self.in_pause and self.speech_frames > 0:
            self.in_pause = True
            self.pause_start = self.total_frames
            self.pause_count += 1

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    @property
    def post_baseline_f0(self) -> list[F0Sample]:
        """F0 samples recorded after the baseline window."""
        if not self.baselines.established:
            return []
        return self.f0_history[self.config.baseline_speech_frames:]

    @property
    def post_baseline_spectral(self) -> list[SpectralSnapshot]:
        """Retained spectral snapshots recorded after the baseline window."""
        after = self.spectral_count - self.config.baseline_speech_frames
        if self.baselines.spectral_baseline is None or after <= 0:
            return []
        after = min(after, len(self.spectral_history))
        return list(self.spectral_history)[-after:]
