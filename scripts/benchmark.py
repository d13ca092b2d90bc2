#!/usr/bin/env python3
"""
Benchmark script: robustness of the matcher against common degradations.

Each trial fingerprints a reference signal and a degraded copy of it and
checks whether they still match. The "unrelated" condition compares the
reference against independent noise and should not match.

Usage:
    python scripts/benchmark.py --n_trials 20 --duration 6
    python scripts/benchmark.py --audio_dir ~/datasets/sirens --n_trials 10
"""

import sys
import json
import time
import argparse
from pathlib import Path
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
from tqdm import tqdm

from audiohash.audio import (
    flip_signs, inject_noise, load_sampling, noise_sampling, sine_sampling,
)
from audiohash.config import BER_THRESHOLD, BLOCK_SIZE, TARGET_SR
from audiohash.hashing import fingerprint
from audiohash.matching import find_match


@dataclass
class TestCondition:
    name: str
    flip_fraction: Optional[float] = None
    snr_db: Optional[float] = None
    unrelated: bool = False


@dataclass
class BenchmarkResults:
    n_trials: int
    threshold: float
    block_size: int
    conditions: Dict[str, dict] = field(default_factory=dict)


# Test conditions to evaluate
TEST_CONDITIONS = [
    TestCondition("clean"),
    TestCondition("flip_5pct", flip_fraction=0.05),
    TestCondition("flip_10pct", flip_fraction=0.10),
    TestCondition("snr_20db", snr_db=20.0),
    TestCondition("snr_10db", snr_db=10.0),
    TestCondition("snr_0db", snr_db=0.0),
    TestCondition("unrelated", unrelated=True),
]


def synthetic_reference(duration_sec: float, seed: int) -> np.ndarray:
    """A few sines with a slow sweep, so consecutive frames differ."""
    rng = np.random.default_rng(seed)
    t = np.arange(int(duration_sec * TARGET_SR)) / TARGET_SR
    signal = np.zeros_like(t)
    for _ in range(3):
        f0 = rng.uniform(300, 1800)
        sweep = rng.uniform(-100, 100)
        signal += np.sin(2 * np.pi * (f0 * t + 0.5 * sweep * t ** 2))
    signal += 0.1 * noise_sampling(duration_sec, TARGET_SR, seed=seed)
    return (0.3 * signal).astype(np.float32)


def degrade(reference: np.ndarray, condition: TestCondition, seed: int) -> np.ndarray:
    if condition.unrelated:
        return noise_sampling(len(reference) / TARGET_SR, TARGET_SR, seed=seed + 10_000)
    degraded = reference
    if condition.flip_fraction is not None:
        degraded = flip_signs(degraded, condition.flip_fraction, seed=seed)
    if condition.snr_db is not None:
        degraded = inject_noise(degraded, condition.snr_db, seed=seed)
    return degraded


def run_condition(references: List[np.ndarray], condition: TestCondition,
                  threshold: float, block_size: int) -> dict:
    matched = 0
    rates = []
    times = []
    for seed, reference in enumerate(tqdm(references, desc=condition.name, unit='trial', leave=False)):
        query = degrade(reference, condition, seed)

        start = time.time()
        result = find_match(fingerprint(reference), fingerprint(query),
                            threshold=threshold, block_size=block_size)
        times.append((time.time() - start) * 1000)

        if result.matched:
            matched += 1
            rates.append(result.bit_error_rate)

    return {
        "match_rate": matched / len(references) * 100 if references else 0,
        "matched": matched,
        "total": len(references),
        "avg_bit_error_rate": float(np.mean(rates)) if rates else None,
        "avg_time_ms": float(np.mean(times)) if times else 0,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description='Benchmark AudioHash robustness')
    parser.add_argument('--audio_dir', type=str, default=None,
                        help='Directory with reference audio files (synthetic signals if omitted)')
    parser.add_argument('--n_trials', type=int, default=20,
                        help='Number of reference signals')
    parser.add_argument('--duration', type=float, default=6.0,
                        help='Duration of synthetic references in seconds')
    parser.add_argument('--threshold', type=float, default=BER_THRESHOLD)
    parser.add_argument('--block_size', type=int, default=BLOCK_SIZE)
    parser.add_argument('--output', type=str, default='benchmark_results.json')
    args = parser.parse_args(argv)

    if args.audio_dir:
        audio_dir = Path(args.audio_dir).expanduser()
        audio_files = sorted(audio_dir.rglob("*.wav"))[:args.n_trials]
        if not audio_files:
            audio_files = sorted(audio_dir.rglob("*.flac"))[:args.n_trials]
        print(f"Reference files: {len(audio_files)}")
        references = [load_sampling(p) for p in tqdm(audio_files, desc="Loading", unit='file')]
    else:
        print(f"Synthetic references: {args.n_trials} x {args.duration:.1f}s @ {TARGET_SR} Hz")
        references = [synthetic_reference(args.duration, seed) for seed in range(args.n_trials)]

    results = BenchmarkResults(n_trials=len(references), threshold=args.threshold,
                               block_size=args.block_size)

    for condition in TEST_CONDITIONS:
        stats = run_condition(references, condition, args.threshold, args.block_size)
        results.conditions[condition.name] = stats
        print(f"  {condition.name}: {stats['match_rate']:.1f}% matched "
              f"({stats['matched']}/{stats['total']}), {stats['avg_time_ms']:.1f}ms/pair")

    with open(args.output, 'w') as f:
        json.dump(asdict(results), f, indent=2)
    print(f"\nSaved to {args.output}")
    return results


if __name__ == '__main__':
    main()
