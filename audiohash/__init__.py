"""
AudioHash - perceptual audio fingerprinting and pairwise matching.

Pipeline:
1. Split a 5536 Hz mono sampling into 2048-sample frames advancing by 64 samples
2. Weight each frame's magnitude spectrum into 33 Bark bands
3. Hash the sign of inter-band energy deltas between consecutive frames into 32 bits
4. Match two fingerprints by searching for a block pair with a low bit error rate
"""

from audiohash.base import SpectralTransform
from audiohash.config import FingerprintParams, InvalidParametersError
from audiohash.filterbank import build_filterbank, hz2bark
from audiohash.hashing import Fingerprint, fingerprint, hash_frame
from audiohash.matching import MatchResult, bit_error_rate, find_match, matches, number_of_set_bits
from audiohash.spectral import band_energies, get_transform, hann_window

__all__ = [
    'SpectralTransform', 'FingerprintParams', 'InvalidParametersError',
    'build_filterbank', 'hz2bark', 'Fingerprint', 'fingerprint', 'hash_frame',
    'MatchResult', 'bit_error_rate', 'find_match', 'matches', 'number_of_set_bits',
    'band_energies', 'get_transform', 'hann_window',
]
