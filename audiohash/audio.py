from pathlib import Path

import librosa
import numpy as np
import soundfile as sf
import torch
import torchaudio

from .config import TARGET_SR


def load_audio(path):
    signal, sr = sf.read(path, dtype="float32")
    return np.asarray(signal), sr


def to_sampling(signal, sample_rate, target_sr=TARGET_SR, backend="librosa"):
    """
    Turn decoded audio into a mono float32 sampling at `target_sr`.

    Args:
        signal: (num_samples,) or (num_samples, num_channels) array, as returned by soundfile
        sample_rate: Rate of `signal`
        target_sr: Rate expected by the fingerprinter (5536 Hz)
        backend: 'librosa' or 'torchaudio' resampler
    """
    if backend not in {"librosa", "torchaudio"}:
        raise ValueError(f"Unknown backend: {backend}. Choose from ['librosa', 'torchaudio']")

    signal = np.asarray(signal, dtype=np.float32)
    if signal.ndim > 1:
        # signal is (num_samples, num_channels); transpose to (channels, samples)
        signal = librosa.to_mono(signal.T)

    # only resample if needed
    if sample_rate != target_sr:
        if backend == "librosa":
            signal = librosa.resample(signal, orig_sr=sample_rate, target_sr=target_sr)
        else:
            x = torch.from_numpy(np.ascontiguousarray(signal))
            signal = torchaudio.functional.resample(x, orig_freq=sample_rate, new_freq=target_sr).numpy()

    return np.ascontiguousarray(signal, dtype=np.float32)


def load_sampling(path: Path, target_sr=TARGET_SR, backend="librosa"):
    signal, sr = load_audio(path)
    return to_sampling(signal, sr, target_sr=target_sr, backend=backend)


# ---------- synthetic signals ---------- #

def sine_sampling(frequency, duration_sec, sample_rate=TARGET_SR, amplitude=0.5):
    t = np.arange(int(duration_sec * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def noise_sampling(duration_sec, sample_rate=TARGET_SR, seed=None, amplitude=0.5):
    rng = np.random.default_rng(seed)
    n = int(duration_sec * sample_rate)
    return (amplitude * rng.standard_normal(n)).astype(np.float32)


# ---------- degradations ---------- #

def flip_signs(signal, fraction=0.05, seed=None):
    """Negate a random `fraction` of the samples."""
    if not 0.0 <= fraction <= 1.0:
        raise ValueError(f"fraction must be within [0, 1], got {fraction!r}")
    rng = np.random.default_rng(seed)
    corrupted = np.array(signal, dtype=np.float32, copy=True)
    n_flips = int(round(fraction * len(corrupted)))
    positions = rng.choice(len(corrupted), size=n_flips, replace=False)
    corrupted[positions] = -corrupted[positions]
    return corrupted


def inject_noise(signal, snr_db, seed=None):
    """
    Add white Gaussian noise to `signal` to get the desired SNR in dB.
    Assumes `signal` is a 1D float numpy array.
    """
    signal = np.asarray(signal, dtype=np.float32)

    # signal power (mean square)
    signal_power = float(np.mean(signal.astype(np.float64) ** 2)) if len(signal) else 0.0
    if signal_power == 0:
        # silent signal, nothing to scale the noise against
        return signal.copy()

    noise_power = signal_power / (10 ** (snr_db / 10))
    rng = np.random.default_rng(seed)
    noise = rng.normal(0.0, np.sqrt(noise_power), size=signal.shape)
    return (signal + noise).astype(np.float32)


def cut_audio(signal, sample_rate, clip_length_sec, seed=42):
    total_samples = len(signal)
    clip_samples = int(clip_length_sec * sample_rate)
    if clip_samples >= total_samples:
        return signal
    rng = np.random.default_rng(seed)
    start = int(rng.integers(0, total_samples - clip_samples + 1))
    return signal[start:start + clip_samples]
