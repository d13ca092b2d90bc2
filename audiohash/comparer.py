import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .audio import load_sampling
from .config import BER_THRESHOLD, BLOCK_SIZE, SPECTRAL_TRANSFORM, TARGET_SR, FingerprintParams
from .hashing import Fingerprint, fingerprint
from .matching import MatchResult, find_match
from .spectral import get_transform

log = logging.getLogger(__name__)


class Timer:
    """Context manager for timing code blocks with optional debug logging."""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.timings: Dict[str, float] = {}

    @contextmanager
    def measure(self, label: str):
        """Time a block of code and optionally log the result."""
        start = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start
        self.timings[label] = elapsed
        if self.debug:
            log.debug(f"{label}: {elapsed:.4f}s")

    def log(self, message: str):
        """Log a message only if debug mode is enabled."""
        if self.debug:
            log.debug(message)

    @property
    def total(self) -> float:
        return sum(self.timings.values())


class AudioHashComparer:
    """
    Pairwise comparison of two recordings.

    Chains the whole pipeline: decode to a 5536 Hz mono sampling, fingerprint,
    then search for a pair of blocks below the bit error rate threshold.
    """

    def __init__(self, params: Optional[FingerprintParams] = None,
                 threshold: float = BER_THRESHOLD, block_size: int = BLOCK_SIZE,
                 transform=SPECTRAL_TRANSFORM, sampling_rate: int = TARGET_SR):
        """
        Args:
            params: Fingerprinting parameters, shared by both recordings
            threshold: Maximum bit error rate for a match
            block_size: Subfingerprints per compared block
            transform: Spectral transform strategy ('numpy', 'scipy' or 'torch')
            sampling_rate: Rate recordings are resampled to before fingerprinting
        """
        self.params = params or FingerprintParams()
        self.threshold = threshold
        self.block_size = block_size
        self.transform = get_transform(transform)
        self.sampling_rate = sampling_rate

    def fingerprint_sampling(self, samples) -> Fingerprint:
        return fingerprint(samples, self.sampling_rate, params=self.params, transform=self.transform)

    def fingerprint_file(self, audio_path: Path) -> Fingerprint:
        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise FileNotFoundError(f"Audio file not found: {audio_path}")
        return self.fingerprint_sampling(load_sampling(audio_path, target_sr=self.sampling_rate))

    def _compare(self, timer: Timer, fp1: Fingerprint, fp2: Fingerprint) -> Tuple[MatchResult, Dict[str, Any]]:
        timer.log(f"  Subfingerprints: {len(fp1)} vs {len(fp2)}")

        with timer.measure("Match blocks"):
            result = find_match(fp1, fp2, threshold=self.threshold, block_size=self.block_size)

        if result.matched:
            timer.log(f"  Blocks {result.offset1} / {result.offset2}, BER {result.bit_error_rate:.4f}")
        else:
            timer.log("  No block pair below threshold")
        timer.log(f"Total comparison time: {timer.total:.4f}s")

        metadata = {
            "num_subfingerprints_1": len(fp1),
            "num_subfingerprints_2": len(fp2),
            "offset1": result.offset1,
            "offset2": result.offset2,
            "bit_error_rate": result.bit_error_rate,
            "threshold": self.threshold,
            "block_size": self.block_size,
            "transform": self.transform.name,
            "timings": timer.timings,
            "total_time": timer.total,
        }
        return result, metadata

    def compare_samplings(self, samples1, samples2, debug: bool = False) -> Tuple[MatchResult, Dict[str, Any]]:
        """Compare two samplings already at `sampling_rate`."""
        timer = Timer(debug=debug)
        with timer.measure("Fingerprint 1"):
            fp1 = self.fingerprint_sampling(samples1)
        with timer.measure("Fingerprint 2"):
            fp2 = self.fingerprint_sampling(samples2)
        return self._compare(timer, fp1, fp2)

    def compare_files(self, path1: Path, path2: Path, debug: bool = False) -> Tuple[MatchResult, Dict[str, Any]]:
        """
        Compare two audio files.

        Returns:
            Tuple of (match_result, metadata)
            - match_result: MatchResult, truthy when the recordings match
            - metadata: subfingerprint counts, matching offsets, BER and timings
        """
        timer = Timer(debug=debug)
        for path in (path1, path2):
            if not Path(path).exists():
                raise FileNotFoundError(f"Audio file not found: {path}")

        with timer.measure("Load audio"):
            samples1 = load_sampling(Path(path1), target_sr=self.sampling_rate)
            samples2 = load_sampling(Path(path2), target_sr=self.sampling_rate)
        with timer.measure("Fingerprint 1"):
            fp1 = self.fingerprint_sampling(samples1)
        with timer.measure("Fingerprint 2"):
            fp2 = self.fingerprint_sampling(samples2)
        return self._compare(timer, fp1, fp2)
