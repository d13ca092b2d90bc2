#!/usr/bin/env python3
"""
Compare two recordings.

Usage:
    python scripts/compare.py --original siren-original.wav --recording siren-recording.wav
    python scripts/compare.py -o a.wav -r b.wav --threshold 0.3 --block-size 128 --debug
    python scripts/compare.py -o a.wav -r b.wav --print-bits --plot fingerprint.png
"""

import argparse
import logging
from pathlib import Path
import sys

import matplotlib
matplotlib.use("Agg")

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from audiohash.comparer import AudioHashComparer
from audiohash.config import BER_THRESHOLD, BLOCK_SIZE, SPECTRAL_TRANSFORM
from audiohash.log import setup_logging
from audiohash.render import plot_fingerprint_and_save


def build_parser():
    parser = argparse.ArgumentParser(description='AudioHash - compare two recordings')
    parser.add_argument('--original', '-o', type=str, required=True,
                        help='Path to the original audio file')
    parser.add_argument('--recording', '-r', type=str, required=True,
                        help='Path to the recorded audio file')
    parser.add_argument('--threshold', type=float, default=BER_THRESHOLD,
                        help='Maximum bit error rate of a matching block')
    parser.add_argument('--block-size', type=int, default=BLOCK_SIZE,
                        help='Subfingerprints per compared block')
    parser.add_argument('--transform', choices=['numpy', 'scipy', 'torch'], default=SPECTRAL_TRANSFORM,
                        help='FFT backend')
    parser.add_argument('--debug', action='store_true',
                        help='Log timings for each step')
    parser.add_argument('--print-bits', action='store_true',
                        help='Print the bit matrix of the original fingerprint')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save an image of the original fingerprint to this path')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    log = setup_logging(logging.DEBUG if args.debug else logging.INFO)

    original_path = Path(args.original)
    recording_path = Path(args.recording)
    for path in (original_path, recording_path):
        if not path.exists():
            log.error(f"Audio file not found: {path}")
            return 2

    comparer = AudioHashComparer(threshold=args.threshold, block_size=args.block_size,
                                 transform=args.transform)

    print(f"Comparing: {original_path.name} <-> {recording_path.name}")
    result, metadata = comparer.compare_files(original_path, recording_path, debug=args.debug)

    if args.print_bits or args.plot:
        original_fp = comparer.fingerprint_file(original_path)
        if args.print_bits:
            print(original_fp)
            print(original_fp.debug_string(), end="")
        if args.plot:
            plot_fingerprint_and_save(original_fp, Path(args.plot), title=original_path.stem)
            log.info(f"Saved fingerprint plot to {args.plot}")

    print(f"  Subfingerprints: {metadata['num_subfingerprints_1']} / {metadata['num_subfingerprints_2']}")
    if result.matched:
        print("\n✓ Recordings are equal")
        print(f"  Blocks: {result.offset1} / {result.offset2}")
        print(f"  Bit error rate: {result.bit_error_rate:.4f}")
        return 0

    print("\n✗ Recordings are not equal")
    return 1


if __name__ == '__main__':
    sys.exit(main())
