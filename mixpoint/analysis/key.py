"""
Musical Key Estimation Module
Krumhansl-Schmuckler correlation of a pitch-class histogram
"""

from typing import Optional, Union

import numpy as np
import structlog

from mixpoint.models import AudioBuffer, Key, MAJOR, MINOR, NOTE_NAMES, UNKNOWN_KEY_LABEL

logger = structlog.get_logger()

FRAME_SIZE = 4096
HOP_SIZE = 2048

MIN_FREQUENCY = 30.0
MAX_FREQUENCY = 5000.0

# Krumhansl-Schmuckler key profiles
MAJOR_PROFILE = np.array([6.35, 2.23, 3.48, 2.33, 4.38, 4.09, 2.52, 5.19, 2.39, 3.66, 2.29, 2.88])
MINOR_PROFILE = np.array([6.33, 2.68, 3.52, 5.38, 2.60, 3.53, 2.54, 4.75, 3.98, 2.69, 3.34, 3.17])

MAJOR_TEMPLATE = MAJOR_PROFILE / np.sum(MAJOR_PROFILE)
MINOR_TEMPLATE = MINOR_PROFILE / np.sum(MINOR_PROFILE)

# Root spellings accepted by parse_key, longest first so "C#/Db" wins over "C"
_ROOT_ALIASES = {}
for _pc, _name in enumerate(NOTE_NAMES):
    _ROOT_ALIASES[_name.lower()] = _pc
    for _spelling in _name.split("/"):
        _ROOT_ALIASES[_spelling.lower()] = _pc
_ROOT_ALIASES.update({"cb": 11, "b#": 0, "fb": 4, "e#": 5})
_ROOTS_BY_LENGTH = sorted(_ROOT_ALIASES, key=len, reverse=True)


def hann_window(n: int) -> np.ndarray:
    """Symmetric Hann window: 0.5 * (1 - cos(2*pi*k / (n - 1)))."""
    k = np.arange(n)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * k / (n - 1)))


def frequency_to_midi(freq):
    """Fractional MIDI note number, A4 = 69 at 440 Hz."""
    return 69.0 + 12.0 * np.log2(np.asarray(freq) / 440.0)


def pitch_class_histogram(audio: AudioBuffer) -> np.ndarray:
    """
    Accumulate spectral magnitude per pitch class over all frames.

    Bins outside (30 Hz, 5000 Hz] and the DC bin are ignored. Returns an
    unnormalized 12-bin histogram (all zeros when the audio is too short).
    """
    histogram = np.zeros(12)
    if audio.sample_rate <= 0 or len(audio) < FRAME_SIZE:
        return histogram

    window = hann_window(FRAME_SIZE)
    bin_hz = audio.sample_rate / FRAME_SIZE
    freqs = np.arange(FRAME_SIZE // 2 + 1) * bin_hz

    usable = (freqs > MIN_FREQUENCY) & (freqs <= MAX_FREQUENCY)
    usable[0] = False
    bins = np.nonzero(usable)[0]
    if len(bins) == 0:
        return histogram

    pitch_classes = np.mod(np.floor(frequency_to_midi(freqs[bins]) + 0.5).astype(int), 12)

    samples = audio.samples
    for start in range(0, len(samples) - FRAME_SIZE + 1, HOP_SIZE):
        frame = samples[start:start + FRAME_SIZE] * window
        magnitude = np.abs(np.fft.rfft(frame))
        np.add.at(histogram, pitch_classes, magnitude[bins])

    return histogram


def estimate_key(audio: AudioBuffer) -> Optional[Key]:
    """
    Estimate the musical key of an audio signal.

    Every rotation of the normalized histogram is correlated against
    the major and minor templates; the first maximum in shift order
    (major checked before minor) wins.

    Returns:
        Key, or None when the key could not be estimated
    """
    if audio.sample_rate <= 0 or len(audio) < FRAME_SIZE:
        logger.debug("Key skipped: not enough audio", samples=len(audio), sample_rate=audio.sample_rate)
        return None

    histogram = pitch_class_histogram(audio)
    total = float(np.sum(histogram))
    if total <= 0:
        logger.debug("Key skipped: empty pitch-class histogram")
        return None
    histogram = histogram / total

    best_score = -np.inf
    best_key = None
    for shift in range(12):
        rotated = np.roll(histogram, -shift)
        major_corr = float(np.dot(rotated, MAJOR_TEMPLATE))
        minor_corr = float(np.dot(rotated, MINOR_TEMPLATE))

        if major_corr > best_score:
            best_score = major_corr
            best_key = Key(shift, MAJOR)

        if minor_corr > best_score:
            best_score = minor_corr
            best_key = Key(shift, MINOR)

    logger.debug("Key estimated", key=best_key.label, correlation=round(best_score, 4))
    return best_key


def format_key(key: Optional[Key]) -> str:
    """Render a key as "<root> <mode>", or "unknown"."""
    if key is None:
        return UNKNOWN_KEY_LABEL
    return key.label


def parse_key(label: Union[str, Key, None]) -> Optional[Key]:
    """
    Parse a key label such as "A minor", "C#/Db major", "Bb" or "f# minor".

    The root is matched case-insensitively at the start of the label;
    a missing mode means major. Returns None for unknown or
    unparseable labels.
    """
    if label is None or isinstance(label, Key):
        return label

    text = label.strip().lower()
    if not text or text == UNKNOWN_KEY_LABEL:
        return None

    for spelling in _ROOTS_BY_LENGTH:
        if text.startswith(spelling):
            rest = text[len(spelling):].strip()
            if rest in ("", MAJOR, "maj"):
                return Key(_ROOT_ALIASES[spelling], MAJOR)
            if rest in (MINOR, "min", "m"):
                return Key(_ROOT_ALIASES[spelling], MINOR)
            return None

    return None
