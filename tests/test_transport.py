"""
VocalStress v1 Transport Tests

Analyser emulation and WAV replay.
"""

import numpy as np
import pytest
import soundfile as sf

from vocalstress.contracts import SessionPhase
from vocalstress.session import VoiceStressEngine
from vocalstress.transport import (
    AnalyserFrameSource,
    preload_samples,
    read_audio,
    run_session,
    write_audio,
)
from tests.conftest import FFT_SIZE, FRAME_RATE, SR, tone, tone_frame


class TestAnalyserFrameSource:

    def test_tick_count(self):
        source = AnalyserFrameSource(tone(200, SR), SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        assert len(source) == 30
        assert len(list(source.ticks())) == 30

    def test_blocks_cover_signal_once(self):
        signal = tone(200, SR)
        source = AnalyserFrameSource(signal, SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        blocks = [block for block, _ in source.ticks()]
        np.testing.assert_array_equal(np.concatenate(blocks), signal)

    def test_sample_blocks_match_ticks(self):
        source = AnalyserFrameSource(tone(200, SR), SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        tick_blocks = [block for block, _ in source.ticks()]
        sample_blocks = list(source.blocks())
        assert len(sample_blocks) == len(tick_blocks)
        for a, b in zip(sample_blocks, tick_blocks):
            np.testing.assert_array_equal(a, b)

    def test_frame_shapes(self):
        source = AnalyserFrameSource(tone(200, SR), SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        for _, frame in source.ticks():
            assert len(frame.time_domain) == FFT_SIZE
            assert len(frame.spectrum_db) == FFT_SIZE // 2

    def test_first_window_left_padded(self):
        signal = tone(200, SR)
        source = AnalyserFrameSource(signal, SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        block, frame = next(iter(source.ticks()))
        n = len(block)
        np.testing.assert_array_equal(frame.time_domain[: FFT_SIZE - n], 0.0)
        np.testing.assert_array_equal(frame.time_domain[FFT_SIZE - n:], signal[:n])

    def test_window_holds_latest_samples(self):
        signal = tone(200, SR)
        source = AnalyserFrameSource(signal, SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        *_, (_, last) = source.ticks()
        np.testing.assert_array_equal(last.time_domain, signal[-FFT_SIZE:])

    def test_spectrum_peak_at_tone(self):
        source = AnalyserFrameSource(tone(1000, SR), SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        *_, (_, last) = source.ticks()
        expected_bin = 1000 * FFT_SIZE / SR
        assert abs(int(np.argmax(last.spectrum_db)) - expected_bin) <= 1

    def test_silence_floored(self):
        source = AnalyserFrameSource(np.zeros(SR, dtype=np.float32), SR, fft_size=FFT_SIZE)
        _, frame = next(iter(source.ticks()))
        assert np.all(frame.spectrum_db == -200.0)

    def test_deterministic(self):
        signal = tone(300, SR) + tone(1700, SR, amplitude=0.05)
        first = [f.spectrum_db for _, f in AnalyserFrameSource(signal, SR).ticks()]
        second = [f.spectrum_db for _, f in AnalyserFrameSource(signal, SR).ticks()]
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a, b)


class TestAudioIO:

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "tone.wav"
        signal = tone(200, SR)
        write_audio(path, signal, SR)

        samples, sr = read_audio(path)
        assert sr == SR
        assert samples.dtype == np.float32
        np.testing.assert_allclose(samples, signal, atol=1.0 / 16384)

    def test_stereo_downmixed(self, tmp_path):
        path = tmp_path / "stereo.wav"
        left = np.full(1000, 0.5)
        right = np.full(1000, -0.25)
        sf.write(path, np.column_stack([left, right]), SR, subtype="PCM_16")

        samples, _ = read_audio(path)
        assert samples.ndim == 1
        np.testing.assert_allclose(samples, 0.125, atol=1e-3)

    def test_write_clips(self, tmp_path):
        path = tmp_path / "loud.wav"
        write_audio(path, np.array([2.0, -3.0, 0.0]), SR)
        samples, _ = read_audio(path)
        assert samples.max() <= 1.0
        assert samples.min() >= -1.0


class TestRunSession:

    def test_replay_produces_report(self, config):
        engine = VoiceStressEngine(config)
        source = AnalyserFrameSource(tone(200, 2 * SR), SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)
        report = run_session(engine, source)

        assert engine.phase is SessionPhase.STOPPED
        assert engine.state.total_frames == 60
        assert not report.insufficient_data
        assert report.speech_metrics.total_duration == pytest.approx(2.0)

    def test_keep_running(self, config):
        engine = VoiceStressEngine(config)
        source = AnalyserFrameSource(tone(200, SR), SR)
        run_session(engine, source, stop=False)
        assert engine.phase is SessionPhase.ACTIVE


class TestPreloadSamples:

    def test_fills_ring_without_analysis(self, config):
        engine = VoiceStressEngine(config)
        source = AnalyserFrameSource(tone(200, SR), SR, fft_size=FFT_SIZE, frame_rate=FRAME_RATE)

        assert preload_samples(engine, source) == SR
        assert engine.phase is SessionPhase.ACTIVE
        assert engine.state.ring.available == SR
        assert engine.state.total_frames == 0
        assert engine.state.f0_history == []

    def test_tremor_available_on_first_frame(self, config):
        engine = VoiceStressEngine(config)
        preload_samples(engine, AnalyserFrameSource(tone(200, SR), SR))

        engine.process_frame(tone_frame(200))
        assert len(engine.state.tremor_history) == 1

    def test_sample_rate_mismatch(self, config):
        engine = VoiceStressEngine(config)
        with pytest.raises(ValueError, match="does not match"):
            preload_samples(engine, AnalyserFrameSource(tone(200, 8000, 8000), 8000))
        assert engine.state.ring.available == 0
