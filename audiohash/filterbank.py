from functools import lru_cache

import numpy as np

from .config import (
    BARK_WIDTH, MAX_FREQUENCY, MIN_FREQUENCY, NUMBER_OF_FILTERS,
    validate_filterbank_parameters,
)


def hz2bark(frequency):
    """
    Convert a frequency (Hz) into Bark.

    Works on scalars and numpy arrays alike.
    """
    frequency = np.asarray(frequency, dtype=np.float64)
    bark = 13 * np.arctan(0.00076 * frequency) + 3.5 * np.arctan((frequency / 7500) ** 2)
    return bark if bark.ndim else float(bark)


@lru_cache(maxsize=16)
def _build_filterbank(frame_length, sampling_rate, number_of_filters,
                      bark_width, min_frequency, max_frequency):
    min_bark = hz2bark(min_frequency)
    bark_difference = hz2bark(max_frequency) - min_bark

    # Bark per filter, a single band is centred on min_bark
    bark_spacing = bark_difference / (number_of_filters - 1) if number_of_filters > 1 else 0.0

    # bin frequencies are truncated to whole Hz: F(j) = j * sr // n_fft
    bins = np.arange(frame_length // 2 + 1)
    bin_barks = hz2bark(bins * sampling_rate // frame_length)

    mid_barks = min_bark + np.arange(number_of_filters) * bark_spacing
    distance = bin_barks[np.newaxis, :] - mid_barks[:, np.newaxis]  # (filters, bins)

    lower = distance - 0.5
    upper = distance + 0.5
    exponent = np.minimum(0, np.minimum(upper, -2.5 * lower) / bark_width)

    weights = np.power(10.0, exponent).astype(np.float32)
    weights.setflags(write=False)
    return weights


def build_filterbank(frame_length: int, sampling_rate: int,
                     number_of_filters: int = NUMBER_OF_FILTERS,
                     bark_width: float = BARK_WIDTH,
                     min_frequency: float = MIN_FREQUENCY,
                     max_frequency: float = MAX_FREQUENCY) -> np.ndarray:
    """
    Generate a matrix of weights to combine FFT bins into Bark bands.

    Args:
        frame_length: Number of samples in the source FFT (power of two)
        sampling_rate: Sampling rate the samples were taken at
        number_of_filters: Number of output bands (0 falls back to 1)
        bark_width: Constant width of each band in Bark
        min_frequency: Centre frequency (Hz) of the lowest band
        max_frequency: Centre frequency (Hz) of the highest band

    Returns:
        Read-only float32 array of shape (number_of_filters, frame_length // 2 + 1).
        Row i is the weighting curve of band i over the FFT bins.

    Raises:
        InvalidParametersError: if any parameter is out of range
    """
    validate_filterbank_parameters(frame_length, sampling_rate, number_of_filters,
                                   bark_width, min_frequency, max_frequency)
    if number_of_filters == 0:
        number_of_filters = 1

    return _build_filterbank(int(frame_length), int(sampling_rate), int(number_of_filters),
                             float(bark_width), float(min_frequency), float(max_frequency))
