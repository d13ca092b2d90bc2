import numpy as np
import pytest

from audiohash.base import SpectralTransform
from audiohash.config import FRAME_LENGTH, TARGET_SR
from audiohash.filterbank import build_filterbank
from audiohash.spectral import (
    NumpyTransform, ScipyTransform, TorchTransform, band_energies, get_transform, hann_window,
)


def test_hann_window_is_periodic():
    w = hann_window(8)
    np.testing.assert_allclose(w, [0.0, 0.1464466, 0.5, 0.8535534, 1.0, 0.8535534, 0.5, 0.1464466],
                               atol=1e-6)
    assert hann_window(8) is w


@pytest.mark.parametrize("name, cls", [
    ("numpy", NumpyTransform), ("scipy", ScipyTransform), ("torch", TorchTransform),
])
def test_get_transform_by_name(name, cls):
    transform = get_transform(name)
    assert isinstance(transform, cls)
    assert transform.name == name


def test_get_transform_defaults_and_passthrough():
    assert get_transform().name == "scipy"
    transform = NumpyTransform()
    assert get_transform(transform) is transform


def test_get_transform_unknown():
    with pytest.raises(ValueError, match="Unknown strategy"):
        get_transform("fftw")


def test_spectral_transform_is_abstract():
    with pytest.raises(TypeError):
        SpectralTransform()


def test_magnitude_of_a_bin_centred_sine():
    n = 256
    frame = np.cos(2 * np.pi * 10 * np.arange(n) / n).astype(np.float32)
    for name in ("numpy", "scipy", "torch"):
        spectrum = get_transform(name).magnitude(frame)
        assert spectrum.shape == (n // 2 + 1,)
        assert spectrum[10] == pytest.approx(n / 2, rel=1e-4)
        assert np.argmax(spectrum) == 10


def test_strategies_agree():
    rng = np.random.default_rng(0)
    frame = (rng.standard_normal(FRAME_LENGTH) * hann_window(FRAME_LENGTH)).astype(np.float32)
    reference = NumpyTransform().magnitude(frame)
    for transform in (ScipyTransform(), TorchTransform()):
        np.testing.assert_allclose(transform.magnitude(frame), reference, rtol=1e-3, atol=1e-3)


def test_band_energies_shape_and_sign():
    rng = np.random.default_rng(1)
    frame = rng.standard_normal(FRAME_LENGTH).astype(np.float32)
    wts = build_filterbank(FRAME_LENGTH, TARGET_SR)
    energies = band_energies(frame, hann_window(FRAME_LENGTH), wts)
    assert energies.shape == (33,)
    assert np.all(energies > 0)


def test_band_energies_peak_near_the_tone():
    t = np.arange(FRAME_LENGTH) / TARGET_SR
    low = np.sin(2 * np.pi * 400 * t).astype(np.float32)
    high = np.sin(2 * np.pi * 1800 * t).astype(np.float32)
    wts = build_filterbank(FRAME_LENGTH, TARGET_SR)
    window = hann_window(FRAME_LENGTH)
    assert np.argmax(band_energies(low, window, wts)) < np.argmax(band_energies(high, window, wts))


def test_band_energies_ignores_the_nyquist_bin():
    n = 64
    frame = np.cos(np.pi * np.arange(n)).astype(np.float32)  # all energy at Nyquist
    wts = np.ones((2, n // 2 + 1), dtype=np.float32)
    energies = band_energies(frame, np.ones(n, dtype=np.float32), wts, "numpy")
    np.testing.assert_allclose(energies, 0.0, atol=1e-3)


def test_band_energies_rejects_mismatched_window():
    wts = build_filterbank(FRAME_LENGTH, TARGET_SR)
    with pytest.raises(ValueError):
        band_energies(np.zeros(100), hann_window(FRAME_LENGTH), wts)
