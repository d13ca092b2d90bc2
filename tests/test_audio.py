import numpy as np
import pytest

from audiohash.audio import (
    cut_audio, flip_signs, inject_noise, load_audio, load_sampling, noise_sampling,
    sine_sampling, to_sampling,
)
from audiohash.config import TARGET_SR


def test_sine_sampling():
    samples = sine_sampling(440, 1.0)
    assert samples.dtype == np.float32
    assert len(samples) == TARGET_SR
    assert np.max(np.abs(samples)) <= 0.5 + 1e-6


def test_noise_sampling_is_seeded():
    np.testing.assert_array_equal(noise_sampling(0.5, seed=3), noise_sampling(0.5, seed=3))
    assert not np.array_equal(noise_sampling(0.5, seed=3), noise_sampling(0.5, seed=4))


def test_flip_signs_flips_the_requested_fraction():
    samples = np.abs(noise_sampling(1, seed=0)) + 0.1
    corrupted = flip_signs(samples, 0.05, seed=1)
    assert np.count_nonzero(corrupted < 0) == round(0.05 * len(samples))
    np.testing.assert_array_equal(np.abs(corrupted), samples)
    assert np.all(samples > 0)  # input untouched


def test_flip_signs_rejects_bad_fraction():
    with pytest.raises(ValueError):
        flip_signs(np.zeros(10), 1.5)


def test_inject_noise_reaches_target_snr():
    samples = sine_sampling(300, 5.0)
    noisy = inject_noise(samples, snr_db=10, seed=0)
    noise = noisy - samples
    snr = 10 * np.log10(np.mean(samples.astype(np.float64) ** 2) / np.mean(noise.astype(np.float64) ** 2))
    assert snr == pytest.approx(10, abs=0.3)


def test_inject_noise_leaves_silence_alone():
    silent = np.zeros(100, dtype=np.float32)
    np.testing.assert_array_equal(inject_noise(silent, 5), silent)


def test_cut_audio():
    samples = np.arange(10 * TARGET_SR, dtype=np.float32)
    clip = cut_audio(samples, TARGET_SR, 2.0)
    assert len(clip) == 2 * TARGET_SR
    assert np.all(np.diff(clip) == 1)
    assert cut_audio(samples, TARGET_SR, 20.0) is samples


def test_to_sampling_downmixes_and_resamples():
    stereo = np.stack([sine_sampling(440, 1.0, 11072), sine_sampling(440, 1.0, 11072)], axis=1)
    mono = to_sampling(stereo, 11072)
    assert mono.ndim == 1
    assert mono.dtype == np.float32
    assert abs(len(mono) - TARGET_SR) <= 1


def test_to_sampling_torchaudio_backend():
    samples = sine_sampling(440, 1.0, 11072)
    mono = to_sampling(samples, 11072, backend="torchaudio")
    assert abs(len(mono) - TARGET_SR) <= 1


def test_to_sampling_keeps_matching_rate():
    samples = sine_sampling(440, 1.0)
    np.testing.assert_array_equal(to_sampling(samples, TARGET_SR), samples)


def test_to_sampling_unknown_backend():
    with pytest.raises(ValueError):
        to_sampling(np.zeros(10), TARGET_SR, backend="sox")


def test_load_audio_roundtrip(wav_factory):
    samples = sine_sampling(440, 0.5)
    path = wav_factory("tone.wav", samples)
    signal, sr = load_audio(path)
    assert sr == TARGET_SR
    np.testing.assert_allclose(signal, samples, atol=1e-4)
    np.testing.assert_allclose(load_sampling(path), samples, atol=1e-4)
