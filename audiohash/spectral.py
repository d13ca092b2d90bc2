"""
Frame analysis: windowing, magnitude spectrum and Bark band energies.

The FFT itself sits behind the `SpectralTransform` interface, with three
interchangeable strategies (numpy, scipy, torch).
"""

from functools import lru_cache

import numpy as np
import scipy.fft
import torch

from .base import SpectralTransform
from .config import SPECTRAL_TRANSFORM


@lru_cache(maxsize=8)
def hann_window(length: int) -> np.ndarray:
    """Periodic Hann window: w[n] = 0.5 * (1 - cos(2*pi*n / length))."""
    n = np.arange(length, dtype=np.float64)
    window = (0.5 * (1.0 - np.cos(2.0 * np.pi * n / length))).astype(np.float32)
    window.setflags(write=False)
    return window


# ============================================================================
# STRATEGY 1: numpy.fft
# ============================================================================

class NumpyTransform(SpectralTransform):

    @property
    def name(self) -> str:
        return "numpy"

    def magnitude(self, windowed_frame):
        return np.abs(np.fft.rfft(windowed_frame)).astype(np.float32)


# ============================================================================
# STRATEGY 2: scipy.fft (default, pocketfft with float32 support)
# ============================================================================

class ScipyTransform(SpectralTransform):

    @property
    def name(self) -> str:
        return "scipy"

    def magnitude(self, windowed_frame):
        return np.abs(scipy.fft.rfft(windowed_frame)).astype(np.float32)


# ============================================================================
# STRATEGY 3: torch.fft (CPU)
# ============================================================================

class TorchTransform(SpectralTransform):

    @property
    def name(self) -> str:
        return "torch"

    def magnitude(self, windowed_frame):
        x = torch.from_numpy(np.ascontiguousarray(windowed_frame, dtype=np.float32))
        spec = torch.fft.rfft(x)
        return spec.abs().numpy().astype(np.float32, copy=False)


_STRATEGIES = {
    "numpy": NumpyTransform,
    "scipy": ScipyTransform,
    "torch": TorchTransform,
}


def get_transform(strategy=None) -> SpectralTransform:
    """
    Select a spectral transform by name.

    Args:
        strategy: One of 'numpy', 'scipy', 'torch', None for the configured default,
            or an existing SpectralTransform (returned as is)
    """
    if strategy is None:
        strategy = SPECTRAL_TRANSFORM
    if isinstance(strategy, SpectralTransform):
        return strategy
    if strategy not in _STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy}. Choose from {list(_STRATEGIES.keys())}")
    return _STRATEGIES[strategy]()


def band_energies(frame, window, filterbank, transform=None) -> np.ndarray:
    """
    Per-band energies of one frame.

    Args:
        frame: frame_length samples
        window: Hann coefficients of length frame_length
        filterbank: (number_of_filters, frame_length // 2 + 1) weight matrix
        transform: SpectralTransform (or strategy name) computing the magnitude spectrum

    Returns:
        float32 array with one energy per filter row
    """
    transform = get_transform(transform)

    frame = np.asarray(frame, dtype=np.float32)
    if frame.shape != window.shape:
        raise ValueError(f"frame has {frame.shape[0]} samples, window has {window.shape[0]}")

    spectrum = transform.magnitude(frame * window)

    # the Nyquist bin is left out of the accumulation
    half = frame.shape[0] // 2
    return (filterbank[:, :half] @ spectrum[:half]).astype(np.float32)
