"""Feature extraction for images, audio and tokens."""

from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image, ImageEnhance, ImageFilter, ImageOps
from scipy.io import wavfile

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tif", ".tiff", ".webp"}
AUDIO_SUFFIXES = {".wav"}


def load_image(path: Path, size: int) -> Image.Image:
    """Open an image as RGB, resized to ``size`` x ``size``."""
    with Image.open(path) as image:
        return image.convert("RGB").resize((size, size))


def image_vector(image: Image.Image) -> np.ndarray:
    """Flatten an RGB image to a vector scaled to [0, 1]."""
    return np.asarray(image, dtype=np.float32).ravel() / 255.0


def augment_image(image: Image.Image, options: list[str], rng: np.random.Generator) -> list[Image.Image]:
    """Return one augmented copy of ``image`` per requested option."""
    width, height = image.size
    variants = []

    for option in options:
        if option == "crop":
            margin_x, margin_y = width // 10, height // 10
            cropped = image.crop((margin_x, margin_y, width - margin_x, height - margin_y))
            variants.append(cropped.resize((width, height)))
        elif option == "rotation":
            variants.append(image.rotate(float(rng.uniform(-15, 15))))
        elif option == "blur":
            variants.append(image.filter(ImageFilter.GaussianBlur(radius=1)))
        elif option == "exposure":
            variants.append(ImageEnhance.Brightness(image).enhance(float(rng.uniform(0.7, 1.3))))
        elif option == "noise":
            pixels = np.asarray(image, dtype=np.float32) + rng.normal(0.0, 8.0, (height, width, 3))
            variants.append(Image.fromarray(np.clip(pixels, 0, 255).astype(np.uint8)))
        elif option == "flip":
            variants.append(ImageOps.mirror(image))

    return variants


def _to_mono_float(samples: np.ndarray) -> np.ndarray:
    if np.issubdtype(samples.dtype, np.integer):
        scale = float(np.iinfo(samples.dtype).max)
        samples = samples.astype(np.float64) / scale
    else:
        samples = samples.astype(np.float64)

    if samples.ndim > 1:
        samples = samples.mean(axis=1)
    return samples


def audio_vector(path: Path, overlap_factor: float, window_seconds: float, bands: int) -> np.ndarray:
    """Summarize an audio file as band-energy statistics over overlapping windows.

    The signal is cut into windows of ``window_seconds``; consecutive windows
    overlap by ``overlap_factor`` (0 = no overlap). Each window's magnitude
    spectrum is pooled into ``bands`` log-energy bands, and the file is
    described by the mean and standard deviation of every band.
    """
    rate, samples = wavfile.read(path)
    signal = _to_mono_float(samples)

    window = max(1, int(round(rate * window_seconds)))
    hop = max(1, int(round(window * (1.0 - overlap_factor))))
    if len(signal) < window:
        signal = np.pad(signal, (0, window - len(signal)))

    frames = np.stack([signal[start : start + window] for start in range(0, len(signal) - window + 1, hop)])
    spectrum = np.abs(np.fft.rfft(frames * np.hanning(window), axis=1))

    n_bins = spectrum.shape[1]
    edges = np.linspace(0, n_bins, bands + 1).astype(int)
    energies = np.stack(
        [
            spectrum[:, min(lo, n_bins - 1) : max(hi, min(lo, n_bins - 1) + 1)].mean(axis=1)
            for lo, hi in zip(edges[:-1], edges[1:])
        ],
        axis=1,
    )
    log_energies = np.log1p(energies)
    return np.concatenate([log_energies.mean(axis=0), log_energies.std(axis=0)])


def token_features(tokens: list[str], index: int) -> dict[str, Any]:
    """Context features for the token at ``index`` in a sentence."""
    token = tokens[index]
    features: dict[str, Any] = {
        "bias": 1.0,
        "word.lower": token.lower(),
        "word.prefix3": token[:3].lower(),
        "word.suffix3": token[-3:].lower(),
        "word.suffix2": token[-2:].lower(),
        "word.is_title": token.istitle(),
        "word.is_upper": token.isupper(),
        "word.is_digit": token.isdigit(),
    }

    if index > 0:
        features["prev.lower"] = tokens[index - 1].lower()
        features["prev.is_title"] = tokens[index - 1].istitle()
    else:
        features["BOS"] = True

    if index < len(tokens) - 1:
        features["next.lower"] = tokens[index + 1].lower()
        features["next.is_title"] = tokens[index + 1].istitle()
    else:
        features["EOS"] = True

    return features
