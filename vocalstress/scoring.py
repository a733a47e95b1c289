"""
VocalStress v1 Composite Scorer

Responsibilities:
    - Sub-scores: F0 deviation, tremor, jitter, spectral shift, shimmer
    - Quick (recent-window) assessment for real-time display
    - Full (whole-session) report with assessments, indicators, timeline

Composite weights (calibrated):
    F0 0.30 | tremor 0.25 | jitter 0.20 | spectral 0.15 | shimmer 0.10

Invariants:
    - Every score is clamped to [0, 100]
    - Missing baselines or short histories give neutral (0) sub-scores,
      never exceptions
    - The full report carries insufficient_data=True when too little
      speech was heard
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

import numpy as np

from vocalstress.buffers import last_n
from vocalstress.contracts import TimelineEntry
from vocalstress.state import SessionState
from vocalstress.utils import clamp_score, round_half_up, round_int
from vocalstress.voice_quality import compute_jitter, compute_shimmer


# =============================================================================
# Constants (calibrated heuristics)
# =============================================================================

WEIGHTS = {
    "f0": 0.30,
    "tremor": 0.25,
    "jitter": 0.20,
    "spectral": 0.15,
    "shimmer": 0.10,
}

F0_DEVIATION_GAIN = 5.0
TREMOR_ENERGY_GAIN = 200.0
TREMOR_PEAK_REFERENCE_HZ = 9.5
TREMOR_PEAK_GAIN = 30.0
JITTER_REFERENCE = 1.0
JITTER_GAIN = 80.0
SPECTRAL_SHIFT_DIVISOR = 10.0
SHIMMER_REFERENCE = 3.0
SHIMMER_GAIN = 15.0

QUICK_MIN_FRAMES = 5
QUICK_F0_WINDOW = 30
QUICK_TREMOR_WINDOW = 10
QUICK_SPECTRAL_WINDOW = 30
MIN_QUALITY_SAMPLES = 10  # strictly more than this many periods / amplitudes
MIN_SPECTRAL_SAMPLES = 10

FULL_MIN_SPEECH_FRAMES = 10
CONFIDENCE_SPEECH_FRAMES = 300
SIGNIFICANT_CENTROID_SHIFT_HZ = 100

INSUFFICIENT_SPEECH_TEXT = (
    "Insufficient speech detected for voice stress analysis. "
    "Ensure the subject speaks clearly into the microphone."
)


# =============================================================================
# Sub-scores
# =============================================================================


def f0_deviation_score(deviation_percent: float) -> float:
    """0 % → 0, 10 % → 50, 20 % and above → 100."""
    return clamp_score(abs(deviation_percent) * F0_DEVIATION_GAIN)


def tremor_score(avg_energy_ratio: float, avg_peak_freq: float) -> int:
    """Band-energy share plus peak-frequency excess above 9.5 Hz."""
    excess = max(0.0, avg_peak_freq - TREMOR_PEAK_REFERENCE_HZ)
    raw = avg_energy_ratio * TREMOR_ENERGY_GAIN + excess * TREMOR_PEAK_GAIN
    return round_int(clamp_score(raw))


def jitter_score(jitter_percent: float) -> float:
    """Deviation from 1.0 % in either direction (tension lowers jitter)."""
    return clamp_score(abs(jitter_percent - JITTER_REFERENCE) * JITTER_GAIN)


def spectral_shift_score(centroid_shift_hz: float) -> float:
    return clamp_score(abs(centroid_shift_hz) / SPECTRAL_SHIFT_DIVISOR)


def shimmer_score(shimmer_percent: float) -> float:
    return clamp_score(abs(shimmer_percent - SHIMMER_REFERENCE) * SHIMMER_GAIN)


def composite_score(
    f0: float,
    tremor: float,
    jitter: float,
    spectral: float,
    shimmer: float,
) -> int:
    """Weighted composite of the five sub-scores, rounded and clamped."""
    raw = (
        f0 * WEIGHTS["f0"]
        + tremor * WEIGHTS["tremor"]
        + jitter * WEIGHTS["jitter"]
        + spectral * WEIGHTS["spectral"]
        + shimmer * WEIGHTS["shimmer"]
    )
    return round_int(clamp_score(raw))


def deviation_percent(mean: float, baseline_mean: float) -> float:
    """Absolute percent deviation of mean from baseline_mean (0 if baseline is 0)."""
    if baseline_mean == 0:
        return 0.0
    return abs((mean - baseline_mean) / baseline_mean * 100.0)


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) > 0 else 0.0


# =============================================================================
# Quick Assessment
# =============================================================================


@dataclass(frozen=True)
class QuickAssessment:
    """Real-time snapshot over the most recent frames."""
    stress_score: int = 0
    f0_deviation: float = 0.0
    tremor_score: int = 0
    jitter: float = 0.0
    spectral_shift: float = 0.0
    is_speaking: bool = False
    has_baseline: bool = False
    current_f0: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)


def quick_assess(state: SessionState) -> QuickAssessment:
    """
    Score the recent window of a session.

    Args:
        state: Session to assess (not modified)

    Returns:
        QuickAssessment; all-zero default before the fifth frame.
    """
    if state.total_frames < QUICK_MIN_FRAMES:
        return QuickAssessment()

    baseline = state.baselines.baseline
    spectral_baseline = state.baselines.spectral_baseline

    f0_score = 0.0
    f0_dev = 0.0
    current_f0 = 0.0
    if state.f0_history:
        recent_f0 = [s.f0 for s in state.f0_history[-QUICK_F0_WINDOW:]]
        current_f0 = recent_f0[-1]
        if baseline is not None:
            f0_dev = deviation_percent(_mean(recent_f0), baseline.mean_f0)
            f0_score = f0_deviation_score(f0_dev)

    tremor = 0
    if state.tremor_history:
        recent = last_n(state.tremor_history, QUICK_TREMOR_WINDOW)
        tremor = tremor_score(
            _mean([t.energy_ratio for t in recent]),
            _mean([t.peak_freq for t in recent]),
        )

    jitter_percent = 0.0
    jitter = 0.0
    if len(state.pitch_periods) > MIN_QUALITY_SAMPLES:
        jitter_percent = compute_jitter(state.pitch_periods).relative
        jitter = jitter_score(jitter_percent)

    spectral = 0.0
    if spectral_baseline is not None and len(state.spectral_history) > MIN_SPECTRAL_SAMPLES:
        recent_spectral = last_n(state.spectral_history, QUICK_SPECTRAL_WINDOW)
        shift = _mean([s.centroid for s in recent_spectral]) - spectral_baseline.centroid
        spectral = spectral_shift_score(shift)

    shimmer = 0.0
    if len(state.amplitudes) > MIN_QUALITY_SAMPLES:
        shimmer = shimmer_score(compute_shimmer(state.amplitudes).relative)

    return QuickAssessment(
        stress_score=composite_score(f0_score, tremor, jitter, spectral, shimmer),
        f0_deviation=round_half_up(f0_dev, 1),
        tremor_score=tremor,
        jitter=round_half_up(jitter_percent, 2),
        spectral_shift=spectral,
        is_speaking=state.is_speaking,
        has_baseline=state.baselines.established,
        current_f0=round_int(current_f0),
    )


# =============================================================================
# Full Report
# =============================================================================


@dataclass(frozen=True)
class Indicator:
    label: str
    color: str


@dataclass
class PitchReport:
    baseline_mean: int | None = None
    baseline_sd: float | None = None
    analysis_mean: int = 0
    analysis_sd: float = 0.0
    deviation_percent: float = 0.0
    range_hz: int = 0
    assessment: str = "Insufficient speech data"


@dataclass
class TremorReport:
    avg_energy: float = 0.0
    peak_energy: float = 0.0
    avg_peak_freq: float = 0.0
    tremor_score: int = 0
    assessment: str = "Insufficient data"


@dataclass
class VoiceQualityReport:
    jitter: float = 0.0
    shimmer: float = 0.0
    shimmer_db: float = 0.0
    jitter_assessment: str = "No data"
    shimmer_assessment: str = "No data"


@dataclass
class SpectralReport:
    baseline_centroid: int | None = None
    centroid_shift: int = 0
    hammarberg_shift: float = 0.0
    assessment: str = "Insufficient data"


@dataclass
class SpeechMetrics:
    speech_ratio: int = 0
    total_speech_duration: float = 0.0
    total_duration: float = 0.0
    silence_pauses: int = 0
    avg_pause_duration: float = 0.0


@dataclass
class FullReport:
    """End-of-session report."""
    stress_score: int = 0
    confidence_level: int = 0
    baseline_established: bool = False
    insufficient_data: bool = True
    fundamental_frequency: PitchReport = field(default_factory=PitchReport)
    micro_tremor: TremorReport = field(default_factory=TremorReport)
    voice_quality: VoiceQualityReport = field(default_factory=VoiceQualityReport)
    spectral_analysis: SpectralReport = field(default_factory=SpectralReport)
    speech_metrics: SpeechMetrics = field(default_factory=SpeechMetrics)
    timeline: list[TimelineEntry] = field(default_factory=list)
    indicators: list[Indicator] = field(default_factory=list)
    overall_assessment: str = INSUFFICIENT_SPEECH_TEXT

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary (nested dataclasses become dicts)."""
        return asdict(self)


def f0_assessment(deviation: float) -> str:
    if deviation > 15:
        return "High Stress"
    if deviation > 5:
        return "Elevated"
    return "Normal"


def tremor_assessment(score: int) -> str:
    if score > 60:
        return "High — vocal tremor pattern consistent with elevated stress"
    if score > 30:
        return "Moderate — some tremor variation detected"
    return "Normal — tremor patterns within expected range"


def jitter_assessment(jitter_percent: float) -> str:
    if jitter_percent > 1.5:
        return "Elevated pitch perturbation"
    if jitter_percent < 0.5:
        return "Low jitter — possible muscle tension"
    return "Normal range"


def shimmer_assessment(shimmer_percent: float) -> str:
    return "Elevated amplitude variation" if shimmer_percent > 5 else "Normal range"


def generate_indicators(
    stress: int,
    f0_dev: float,
    tremor: int,
    jitter_percent: float,
    baseline_established: bool,
) -> list[Indicator]:
    """Threshold-band tags for the report header."""
    indicators = []

    if stress >= 70:
        indicators.append(Indicator("HIGH VOICE STRESS", "red"))
    elif stress >= 40:
        indicators.append(Indicator("ELEVATED VOICE STRESS", "orange"))

    if f0_dev > 15:
        indicators.append(Indicator("SIGNIFICANT PITCH SHIFT", "red"))
    elif f0_dev > 8:
        indicators.append(Indicator("PITCH DEVIATION", "orange"))

    if tremor >= 60:
        indicators.append(Indicator("VOCAL TREMOR DETECTED", "red"))
    elif tremor >= 30:
        indicators.append(Indicator("MILD TREMOR", "yellow"))

    if jitter_percent < 0.5:
        indicators.append(Indicator("VOCAL TENSION", "orange"))
    elif jitter_percent > 2.0:
        indicators.append(Indicator("VOICE INSTABILITY", "orange"))

    if not baseline_established:
        indicators.append(Indicator("NO BASELINE", "yellow"))

    if not indicators:
        indicators.append(Indicator("VOICE NORMAL", "green"))

    return indicators


def generate_assessment(
    stress: int,
    f0_text: str,
    tremor_text: str,
    speech_ratio: int,
    baseline_established: bool,
) -> str:
    """Narrative summary for the report."""
    if speech_ratio < 10:
        return (
            "Minimal speech detected during the session. Voice stress analysis is "
            "unreliable. Recommend repeating with verbal responses from the subject."
        )

    if not baseline_established:
        return (
            "Voice baseline could not be established due to insufficient sustained "
            "speech. The voice stress score is based on absolute metrics only and "
            "has reduced reliability."
        )

    if stress >= 70:
        parts = [f"Voice analysis indicates high stress levels ({stress}%)."]
        if f0_text == "High Stress":
            parts.append("Fundamental frequency deviated significantly from baseline.")
        if tremor_text.startswith("High"):
            parts.append(
                "Vocal micro-tremor patterns are consistent with a "
                "psychophysiological stress response."
            )
        return " ".join(parts)

    if stress >= 40:
        return (
            f"Voice analysis indicates moderate stress levels ({stress}%). Some "
            "deviation from baseline vocal patterns was detected. This may reflect "
            "cognitive load or ordinary situational anxiety."
        )

    return (
        f"Voice analysis indicates low stress levels ({stress}%). Vocal patterns "
        "remain close to baseline with normal tremor and pitch variation."
    )


def _speech_ratio(state: SessionState) -> int:
    if state.total_frames == 0:
        return 0
    return round_int(state.speech_frames / state.total_frames * 100)


def default_report(state: SessionState) -> FullReport:
    """Report returned when fewer than 10 speech frames were heard."""
    fps = state.config.frame_rate
    return FullReport(
        speech_metrics=SpeechMetrics(
            speech_ratio=_speech_ratio(state),
            total_duration=round_half_up(state.total_frames / fps, 1),
        ),
        indicators=[Indicator("INSUFFICIENT SPEECH", "yellow")],
    )


def full_analysis(state: SessionState) -> FullReport:
    """
    Build the end-of-session report.

    Args:
        state: Session to report on (not modified)

    Returns:
        FullReport; default_report() when speech is insufficient.
    """
    if state.speech_frames < FULL_MIN_SPEECH_FRAMES:
        return default_report(state)

    config = state.config
    fps = config.frame_rate
    baseline = state.baselines.baseline
    spectral_baseline = state.baselines.spectral_baseline
    established = baseline is not None
    speech_ratio = _speech_ratio(state)

    # F0
    all_f0 = np.asarray([s.f0 for s in state.f0_history], dtype=np.float64)
    f0_mean = float(np.mean(all_f0)) if len(all_f0) else 0.0
    f0_sd = float(np.std(all_f0)) if len(all_f0) > 1 else 0.0
    f0_range = float(np.ptp(all_f0)) if len(all_f0) else 0.0

    f0_dev = 0.0
    post_f0 = state.post_baseline_f0
    if baseline is not None and post_f0:
        f0_dev = deviation_percent(_mean([s.f0 for s in post_f0]), baseline.mean_f0)
    f0_text = f0_assessment(f0_dev)

    # Tremor
    tremor_avg = tremor_peak = tremor_freq = 0.0
    tremor = 0
    if state.tremor_history:
        ratios = [t.energy_ratio for t in state.tremor_history]
        tremor_avg = _mean(ratios)
        tremor_peak = float(max(ratios))
        tremor_freq = _mean([t.peak_freq for t in state.tremor_history])
        tremor = tremor_score(tremor_avg, tremor_freq)
    tremor_text = tremor_assessment(tremor)

    # Voice quality
    jitter = compute_jitter(state.pitch_periods)
    shimmer = compute_shimmer(state.amplitudes)

    # Spectral
    centroid_shift = 0
    hammarberg_shift = 0.0
    spectral_text = "Insufficient data"
    post_spectral = state.post_baseline_spectral
    if spectral_baseline is not None and post_spectral:
        centroid_shift = round_int(
            _mean([s.centroid for s in post_spectral]) - spectral_baseline.centroid
        )
        hammarberg_shift = round_half_up(
            _mean([s.hammarberg for s in post_spectral]) - spectral_baseline.hammarberg, 1
        )
        spectral_text = (
            "Significant spectral shift detected"
            if abs(centroid_shift) > SIGNIFICANT_CENTROID_SHIFT_HZ
            else "Spectral distribution within normal variation"
        )

    # Composite
    spectral = spectral_shift_score(centroid_shift) if spectral_baseline is not None else 0.0
    stress = composite_score(
        f0_deviation_score(f0_dev),
        tremor,
        jitter_score(jitter.relative),
        spectral,
        shimmer_score(shimmer.relative),
    )

    confidence = round_int(clamp_score(
        state.speech_frames / CONFIDENCE_SPEECH_FRAMES * 50
        + (40 if established else 0)
        + (10 if len(state.tremor_history) > 10 else 0)
    ))

    avg_pause = 0.0
    if state.pause_durations:
        avg_pause = round_half_up(_mean(state.pause_durations) / fps, 2)

    return FullReport(
        stress_score=stress,
        confidence_level=confidence,
        baseline_established=established,
        insufficient_data=False,
        fundamental_frequency=PitchReport(
            baseline_mean=round_int(baseline.mean_f0) if baseline else None,
            baseline_sd=round_half_up(baseline.sd_f0, 1) if baseline else None,
            analysis_mean=round_int(f0_mean),
            analysis_sd=round_half_up(f0_sd, 1),
            deviation_percent=round_half_up(f0_dev, 1),
            range_hz=round_int(f0_range),
            assessment=f0_text,
        ),
        micro_tremor=TremorReport(
            avg_energy=round_half_up(tremor_avg, 3),
            peak_energy=round_half_up(tremor_peak, 3),
            avg_peak_freq=round_half_up(tremor_freq, 1),
            tremor_score=tremor,
            assessment=tremor_text,
        ),
        voice_quality=VoiceQualityReport(
            jitter=round_half_up(jitter.relative, 2),
            shimmer=round_half_up(shimmer.relative, 2),
            shimmer_db=round_half_up(shimmer.db, 2),
            jitter_assessment=jitter_assessment(jitter.relative),
            shimmer_assessment=shimmer_assessment(shimmer.relative),
        ),
        spectral_analysis=SpectralReport(
            baseline_centroid=round_int(spectral_baseline.centroid) if spectral_baseline else None,
            centroid_shift=centroid_shift,
            hammarberg_shift=hammarberg_shift,
            assessment=spectral_text,
        ),
        speech_metrics=SpeechMetrics(
            speech_ratio=speech_ratio,
            total_speech_duration=round_half_up(state.speech_frames / fps, 1),
            total_duration=round_half_up(state.total_frames / fps, 1),
            silence_pauses=state.pause_count,
            avg_pause_duration=avg_pause,
        ),
        timeline=list(state.timeline),
        indicators=generate_indicators(stress, f0_dev, tremor, jitter.relative, established),
        overall_assessment=generate_assessment(
            stress, f0_text, tremor_text, speech_ratio, established
        ),
    )
