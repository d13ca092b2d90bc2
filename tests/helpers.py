import importlib.util
from pathlib import Path

import numpy as np

from audiohash.config import TARGET_SR

ROOT = Path(__file__).resolve().parent.parent


def load_script(name):
    """Import a module from scripts/ by file path."""
    path = ROOT / "scripts" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(f"audiohash_scripts_{name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def modulated_noise(duration_sec, seed, sample_rate=TARGET_SR):
    """Broadband test signal with a slow amplitude envelope."""
    rng = np.random.default_rng(seed)
    n = int(duration_sec * sample_rate)
    t = np.arange(n) / sample_rate
    envelope = 0.6 + 0.4 * np.sin(2 * np.pi * 0.7 * t)
    return (0.15 * envelope * rng.standard_normal(n)).astype(np.float32)
