from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from .config import BITS_PER_SUBFINGERPRINT


def bit_matrix(fp) -> np.ndarray:
    """(32, n_subfingerprints) array of 0/1, row 0 holds the most significant bit."""
    values = np.asarray(getattr(fp, "subfingerprints", fp), dtype=np.uint32)
    shifts = np.arange(BITS_PER_SUBFINGERPRINT - 1, -1, -1, dtype=np.uint32)
    return ((values[np.newaxis, :] >> shifts[:, np.newaxis]) & np.uint32(1)).astype(np.uint8)


def plot_fingerprint_and_save(fp, output_path: Path, title=None):
    bits = bit_matrix(fp)
    plt.figure(figsize=(10, 4))
    plt.imshow(bits, aspect="auto", cmap="gray_r", interpolation="nearest")
    plt.xlabel("Subfingerprint (frame)")
    plt.ylabel("Bit (band pair)")
    plt.title(title or f"Fingerprint with {bits.shape[1]} subfingerprints")
    plt.savefig(output_path)
    plt.close()
