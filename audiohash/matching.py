import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .config import BER_THRESHOLD, BITS_PER_SUBFINGERPRINT, BLOCK_SIZE

log = logging.getLogger(__name__)

# SWAR popcount: each step adds neighbouring bit fields of width `shift`
_MASKS = (
    (0x55555555, 1),
    (0x33333333, 2),
    (0x0F0F0F0F, 4),
    (0x00FF00FF, 8),
    (0x0000FFFF, 16),
)


@dataclass(frozen=True)
class MatchResult:
    matched: bool
    offset1: Optional[int] = None
    offset2: Optional[int] = None
    bit_error_rate: Optional[float] = None

    def __bool__(self) -> bool:
        return self.matched


def number_of_set_bits(subfingerprint):
    """
    Parallel bit count of a 32-bit value.

    Accepts a Python int in [0, 2**32) or an array of uint32 (counted elementwise).
    """
    if isinstance(subfingerprint, np.ndarray):
        v = subfingerprint.astype(np.uint32)
        for mask, shift in _MASKS:
            mask = np.uint32(mask)
            v = (v & mask) + ((v >> np.uint32(shift)) & mask)
        return v

    v = int(subfingerprint)
    if not 0 <= v <= 0xFFFFFFFF:
        raise ValueError(f"subfingerprint must fit in 32 bits, got {subfingerprint!r}")
    for mask, shift in _MASKS:
        v = (v & mask) + ((v >> shift) & mask)
    return v


def _as_hashes(fp) -> np.ndarray:
    # Fingerprint or any sequence of uint32
    values = getattr(fp, "subfingerprints", fp)
    return np.asarray(values, dtype=np.uint32).reshape(-1)


def bit_error_rate(block1, block2) -> float:
    """Fraction of differing bits between two equally long blocks of subfingerprints."""
    a = _as_hashes(block1)
    b = _as_hashes(block2)
    if len(a) != len(b) or len(a) == 0:
        raise ValueError(f"blocks must have the same non-zero length, got {len(a)} and {len(b)}")

    errors = int(number_of_set_bits(a ^ b).sum())
    return errors / (BITS_PER_SUBFINGERPRINT * len(a))


def find_match(fp1, fp2, threshold: float = BER_THRESHOLD,
               block_size: int = BLOCK_SIZE) -> MatchResult:
    """
    Search every aligned pair of blocks for one with a low enough bit error rate.

    Args:
        fp1, fp2: Fingerprints (or uint32 sequences) to compare
        threshold: Maximum bit error rate of a matching block pair, in [0, 1]
        block_size: Number of consecutive subfingerprints per block

    Returns:
        MatchResult of the first pair (i, j) found with BER <= threshold, scanning
        i then j in ascending order. Fingerprints shorter than block_size never match.
    """
    if block_size < 1:
        raise ValueError(f"block_size must be at least 1, got {block_size!r}")
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold!r}")

    a = _as_hashes(fp1)
    b = _as_hashes(fp2)
    if len(a) < block_size or len(b) < block_size:
        log.debug("No block of %d subfingerprints to compare (%d vs %d)", block_size, len(a), len(b))
        return MatchResult(False)

    # (len(b) - block_size + 1, block_size) view over every block of fp2
    blocks2 = sliding_window_view(b, block_size)
    denominator = BITS_PER_SUBFINGERPRINT * block_size

    for i in range(len(a) - block_size + 1):
        block1 = a[i:i + block_size]
        errors = number_of_set_bits(blocks2 ^ block1).sum(axis=1, dtype=np.int64)
        rates = errors / denominator
        hits = np.flatnonzero(rates <= threshold)
        if hits.size:
            j = int(hits[0])
            log.debug("Blocks %d and %d match with BER %.4f", i, j, rates[j])
            return MatchResult(True, i, j, float(rates[j]))

    return MatchResult(False)


def matches(fp1, fp2, threshold: float = BER_THRESHOLD, block_size: int = BLOCK_SIZE) -> bool:
    """True when the two fingerprints share a block pair with BER <= threshold."""
    return find_match(fp1, fp2, threshold=threshold, block_size=block_size).matched
