"""
VocalStress v1 Voice Activity & Pitch Tracking Tests
"""

import numpy as np
import pytest

from vocalstress.config import EngineConfig
from vocalstress.pitch import detect_voice_activity, lag_range, track_f0
from tests.conftest import FFT_SIZE, SR, tone


class TestVoiceActivity:

    def test_all_zero_is_not_speech(self, config):
        activity = detect_voice_activity(np.zeros(FFT_SIZE), config)
        assert not activity.is_speech
        assert activity.rms == 0.0

    def test_quiet_signal_below_threshold(self, config):
        activity = detect_voice_activity(tone(200, FFT_SIZE, amplitude=0.01), config)
        assert not activity.is_speech

    def test_voiced_tone_is_speech(self, config):
        activity = detect_voice_activity(tone(200, FFT_SIZE), config)
        assert activity.is_speech
        assert 0.02 < activity.zcr < 0.5

    def test_high_zcr_rejected(self, config):
        """Energy that flips sign every sample is not speech."""
        x = np.array([0.5, -0.5] * (FFT_SIZE // 2), dtype=np.float32)
        activity = detect_voice_activity(x, config)
        assert not activity.is_speech
        assert activity.zcr > 0.5

    def test_dc_offset_rejected(self, config):
        """Loud energy with no zero crossings is not speech."""
        activity = detect_voice_activity(np.full(FFT_SIZE, 0.3), config)
        assert not activity.is_speech


class TestTrackF0:

    @pytest.mark.parametrize("sr", [16000, 44100, 48000])
    def test_recovers_150_hz(self, sr):
        f0 = track_f0(tone(150, FFT_SIZE, sr), sr, 75, 400)
        assert f0 is not None
        assert f0 == pytest.approx(150, abs=2)

    @pytest.mark.parametrize("freq", [110, 200, 240, 330])
    def test_recovers_voice_range(self, freq):
        f0 = track_f0(tone(freq, FFT_SIZE), SR, 75, 400)
        assert f0 == pytest.approx(freq, abs=2)

    def test_all_zero_is_no_detection(self):
        assert track_f0(np.zeros(FFT_SIZE), SR, 75, 400) is None

    def test_low_energy_is_no_detection(self):
        assert track_f0(tone(200, FFT_SIZE, amplitude=1e-4), SR, 75, 400) is None

    def test_aperiodic_signal_is_no_detection(self):
        """A single impulse has no periodic self-similarity."""
        x = np.zeros(FFT_SIZE)
        x[FFT_SIZE // 2] = 1.0
        assert track_f0(x, SR, 75, 400) is None

    def test_harmonic_signal_tracks_fundamental(self):
        x = tone(180, FFT_SIZE) + tone(360, FFT_SIZE, amplitude=0.2) + tone(540, FFT_SIZE, amplitude=0.1)
        assert track_f0(x, SR, 75, 400) == pytest.approx(180, abs=2)

    def test_lag_range(self):
        assert lag_range(48000, 75, 400) == (120, 640)
        assert lag_range(16000, 75, 400) == (40, 214)

    def test_default_config_range(self):
        config = EngineConfig()
        f0 = track_f0(tone(150, FFT_SIZE, config.sample_rate), config.sample_rate, config.f0_min, config.f0_max)
        assert f0 == pytest.approx(150, abs=2)
