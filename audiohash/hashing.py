import logging
from typing import Iterator, Optional, Union

import numpy as np

from .config import TARGET_SR, FingerprintParams
from .filterbank import build_filterbank
from .spectral import band_energies, get_transform, hann_window

log = logging.getLogger(__name__)

Sampling = np.ndarray


class Fingerprint:
    """
    Ordered sequence of 32-bit subfingerprints, one per analysis frame.

    Order is temporal and significant. Two fingerprints are compared with
    `audiohash.matching.matches`, never with ==.
    """

    def __init__(self, subfingerprints=()):
        values = np.array(subfingerprints, dtype=np.uint32).reshape(-1)
        values.setflags(write=False)
        self._subfingerprints = values

    @property
    def subfingerprints(self) -> np.ndarray:
        """Read-only uint32 view of the hashes."""
        return self._subfingerprints

    @property
    def size(self) -> int:
        return len(self._subfingerprints)

    def __len__(self) -> int:
        return len(self._subfingerprints)

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return Fingerprint(self._subfingerprints[index])
        return int(self._subfingerprints[index])

    def __iter__(self) -> Iterator[int]:
        return (int(h) for h in self._subfingerprints)

    def __str__(self) -> str:
        return f"Fingerprint with {len(self)} subfingerprints"

    def __repr__(self) -> str:
        return f"Fingerprint(size={len(self)})"

    def debug_string(self) -> str:
        """One row of 32 bits per subfingerprint, most significant bit first."""
        return "".join(f"{h:032b}\n" for h in self)


def hash_frame(current_barks, previous_barks) -> int:
    """
    Fold the band energy deltas of two consecutive frames into one hash.

    Bit m is set when the energy difference between bands m and m+1 grew
    since the previous frame. Band pair 0 ends up in the most significant bit.
    """
    current_barks = np.asarray(current_barks, dtype=np.float32)
    previous_barks = np.asarray(previous_barks, dtype=np.float32)
    deltas = (current_barks[:-1] - current_barks[1:]) - (previous_barks[:-1] - previous_barks[1:])

    h = 0
    for delta in deltas:
        h = (h << 1) | (1 if delta > 0 else 0)
    return h & 0xFFFFFFFF


def fingerprint(samples: Sampling, sampling_rate: int = TARGET_SR,
                params: Optional[FingerprintParams] = None,
                transform=None) -> Fingerprint:
    """
    Generate the fingerprint of a sampling.

    Args:
        samples: 1D mono samples
        sampling_rate: Rate the samples were taken at (5536 Hz is recommended)
        params: Framing and filterbank parameters (defaults: 33 bands, 2048-sample frames)
        transform: SpectralTransform or strategy name used for the FFT

    Returns:
        Fingerprint with N // advance - frame_length // advance + 1 subfingerprints,
        empty when there are fewer samples than one frame.
    """
    params = params or FingerprintParams()
    samples = np.asarray(samples, dtype=np.float32)
    if samples.ndim != 1:
        raise ValueError(f"expected a 1D mono sampling, got shape {samples.shape}")

    n_samples = samples.shape[0]
    frame_length = params.frame_length
    advance = params.advance
    number_of_subfingerprints = params.number_of_subfingerprints(n_samples)

    if number_of_subfingerprints == 0:
        log.debug("Sampling of %d samples is shorter than one frame (%d)", n_samples, frame_length)
        return Fingerprint()

    window = hann_window(frame_length)
    wts = build_filterbank(frame_length, sampling_rate,
                           number_of_filters=params.number_of_filters,
                           bark_width=params.bark_width,
                           min_frequency=params.min_frequency,
                           max_frequency=params.max_frequency)
    transform = get_transform(transform)

    # the last slot is only reached when the loop below gets that far, otherwise it stays 0
    subfingerprints = np.zeros(number_of_subfingerprints, dtype=np.uint32)
    previous_barks = np.zeros(params.number_of_filters, dtype=np.float32)

    index = 0
    start = 0
    end = start + frame_length
    while end < n_samples:
        current_barks = band_energies(samples[start:end], window, wts, transform)
        subfingerprints[index] = hash_frame(current_barks, previous_barks)
        previous_barks = current_barks

        index += 1
        start += advance
        end += advance

    log.debug("Hashed %d/%d frames of %d samples (advance=%d) with %s",
              index, number_of_subfingerprints, n_samples, advance, transform.name)
    return Fingerprint(subfingerprints)
