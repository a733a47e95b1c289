"""
VocalStress v1 Engine — Session control and per-frame processing.

PER-FRAME ORDER (FIXED):

    1. Voice activity detection       → vocalstress.pitch
    2. Pause tracking                 → SessionState
    3. F0 + jitter/shimmer queues     → vocalstress.pitch (speech frames only)
    4. F0 baseline                    → vocalstress.baseline
    5. Spectral snapshot + baseline   → vocalstress.spectral (every frame)
    6. Micro-tremor                   → vocalstress.tremor (every frame)
    7. Timeline entry                 → vocalstress.scoring (every N frames)

STATE MACHINE:
    IDLE --start--> ACTIVE --stop--> STOPPED --start--> ACTIVE
    any  --reset/clear--> IDLE (empty histories, no baselines)

INVARIANTS:
    - Explicitly constructed; no global engine instance
    - Not re-entrant: callers must serialize push_samples / process_frame
    - Frames and blocks delivered outside ACTIVE are ignored
"""

import logging

import numpy as np

from vocalstress import pitch, scoring, spectral
from vocalstress.config import EngineConfig
from vocalstress.contracts import (
    AnalysisFrame,
    EngineInitError,
    F0Sample,
    SessionPhase,
    TimelineEntry,
)
from vocalstress.state import SessionState
from vocalstress.tremor import TremorAnalyzer
from vocalstress.utils import round_int

logger = logging.getLogger(__name__)


class VoiceStressEngine:
    """
    Real-time voice stress engine for one speaker session.

    Raises:
        EngineInitError: If the configuration is invalid or buffers
            cannot be allocated.
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = (config or EngineConfig()).validate()
        try:
            self.state = SessionState(self.config)
        except MemoryError as e:
            raise EngineInitError("Cannot allocate session buffers") from e
        self.tremor = TremorAnalyzer(self.config)
        self.phase = SessionPhase.IDLE
        logger.debug("Engine created: %s", self.config.to_dict())

    # -------------------------------------------------------------------------
    # Session control
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Begin (or resume) accepting audio."""
        if self.phase is not SessionPhase.ACTIVE:
            logger.info("Session started (sample_rate=%d)", self.config.sample_rate)
        self.phase = SessionPhase.ACTIVE

    def stop(self) -> None:
        """Stop accepting audio; histories are kept for reporting."""
        if self.phase is SessionPhase.ACTIVE:
            logger.info(
                "Session stopped after %d frames (%d speech)",
                self.state.total_frames,
                self.state.speech_frames,
            )
            self.phase = SessionPhase.STOPPED

    def reset(self) -> None:
        """Clear all histories and baselines and return to IDLE."""
        self.state.clear()
        self.phase = SessionPhase.IDLE
        logger.info("Session reset")

    clear = reset

    @property
    def baseline_established(self) -> bool:
        return self.state.baselines.established

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def push_samples(self, block: np.ndarray) -> None:
        """Copy a block of samples into the tremor ring buffer."""
        if self.phase is not SessionPhase.ACTIVE:
            return
        self.state.ring.push(block)

    def process_frame(self, frame: AnalysisFrame) -> scoring.QuickAssessment | None:
        """
        Run one analysis tick.

        Args:
            frame: Time-domain window and its dB spectrum

        Returns:
            The quick assessment after this frame, or None when not ACTIVE.
        """
        if self.phase is not SessionPhase.ACTIVE:
            return None

        state = self.state
        config = self.config
        state.total_frames += 1

        activity = pitch.detect_voice_activity(frame.time_domain, config)
        state.is_speaking = activity.is_speech

        if activity.is_speech:
            state.mark_speech()
            self._track_pitch(frame, activity.rms)
        else:
            state.mark_silence()

        snapshot = spectral.analyze_spectrum(frame.spectrum_db, config.sample_rate, config.fft_size)
        state.spectral_history.append(snapshot)
        state.spectral_count += 1
        state.baselines.add_spectral(snapshot)

        tremor = self.tremor.analyze(state.ring, state.total_frames)
        if tremor is not None:
            state.tremor_history.append(tremor)

        assessment = scoring.quick_assess(state)
        if state.total_frames % config.timeline_window_frames == 0:
            state.timeline.append(
                TimelineEntry(
                    time_seconds=round_int(state.total_frames / config.frame_rate),
                    stress_score=assessment.stress_score,
                    f0=assessment.current_f0,
                    is_speaking=assessment.is_speaking,
                )
            )
        return assessment

    def _track_pitch(self, frame: AnalysisFrame, rms: float) -> None:
        config = self.config
        state = self.state

        f0 = pitch.track_f0(frame.time_domain, config.sample_rate, config.f0_min, config.f0_max)
        if f0 is None:
            return

        state.f0_history.append(F0Sample(frame_index=state.total_frames, f0=f0, amplitude=rms))
        state.baselines.add_f0(f0)
        state.pitch_periods.append(config.sample_rate / f0)
        state.amplitudes.append(rms)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def quick_assess(self) -> scoring.QuickAssessment:
        """Real-time assessment over the most recent frames."""
        return scoring.quick_assess(self.state)

    def full_analysis(self) -> scoring.FullReport:
        """End-of-session report over the whole session."""
        return scoring.full_analysis(self.state)
