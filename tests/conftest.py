"""
VocalStress v1 Test Configuration

Provides deterministic synthetic signals, frame builders and engine fixtures.
"""

import subprocess
import sys
from itertools import islice
from pathlib import Path

import numpy as np
import pytest

from vocalstress.config import EngineConfig
from vocalstress.contracts import AnalysisFrame
from vocalstress.session import VoiceStressEngine
from vocalstress.transport import AnalyserFrameSource, write_audio


SR = 16000
FFT_SIZE = 2048
FRAME_RATE = 30
LEAD_IN_TICKS = 4  # covers every left zero-padded window at 16 kHz


def run_cli(*args: str) -> subprocess.CompletedProcess:
    """Run vocalstress CLI as subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "vocalstress", *args],
        capture_output=True,
        text=True,
    )


def tone(freq: float, num_samples: int, sr: int = SR, amplitude: float = 0.3) -> np.ndarray:
    """Deterministic sine wave (float32)."""
    t = np.arange(num_samples) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def make_frame(samples: np.ndarray) -> AnalysisFrame:
    """Build an AnalysisFrame with a Hann-windowed dB spectrum."""
    samples = np.asarray(samples, dtype=np.float32)
    n = len(samples)
    magnitude = np.abs(np.fft.rfft(samples * np.hanning(n)))[: n // 2] / n
    with np.errstate(divide="ignore"):
        spectrum_db = 20 * np.log10(magnitude)
    return AnalysisFrame(time_domain=samples, spectrum_db=spectrum_db)


def tone_frame(freq: float, sr: int = SR, amplitude: float = 0.3) -> AnalysisFrame:
    """Single fully-voiced analysis frame."""
    return make_frame(tone(freq, FFT_SIZE, sr, amplitude))


def silent_frame() -> AnalysisFrame:
    return make_frame(np.zeros(FFT_SIZE, dtype=np.float32))


def voiced_ticks(freq: float, n_ticks: int, sr: int = SR, amplitude: float = 0.3) -> list:
    """
    (block, frame) ticks of a continuous tone, every window fully voiced.

    The first LEAD_IN_TICKS ticks (zero-padded windows) are dropped.
    """
    total_ticks = n_ticks + LEAD_IN_TICKS + 1
    signal = tone(freq, total_ticks * sr // FRAME_RATE + sr // FRAME_RATE, sr, amplitude)
    source = AnalyserFrameSource(signal, sr, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
    ticks = list(islice(source.ticks(), total_ticks))
    return ticks[LEAD_IN_TICKS:LEAD_IN_TICKS + n_ticks]


def feed(engine: VoiceStressEngine, ticks) -> None:
    for block, frame in ticks:
        engine.push_samples(block)
        engine.process_frame(frame)


def create_test_wav(path: Path, freq: float = 200.0, duration_sec: float = 6.0) -> None:
    """Write a voiced tone WAV for CLI tests."""
    write_audio(path, tone(freq, int(SR * duration_sec)), SR)


@pytest.fixture
def config() -> EngineConfig:
    """16 kHz engine configuration."""
    return EngineConfig(sample_rate=SR)


@pytest.fixture
def engine(config) -> VoiceStressEngine:
    """Started engine at 16 kHz."""
    e = VoiceStressEngine(config)
    e.start()
    return e


@pytest.fixture
def test_wav_path(tmp_path) -> Path:
    """Create a voiced test WAV file and return its path."""
    wav_path = tmp_path / "voice.wav"
    create_test_wav(wav_path)
    return wav_path
