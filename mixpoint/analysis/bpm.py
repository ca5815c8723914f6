"""
BPM Estimation Module
Periodicity of energy onsets: novelty curve + autocorrelation
"""

import math

import numpy as np
import structlog

from mixpoint.models import AudioBuffer

logger = structlog.get_logger()

FRAME_SIZE = 1024
HOP_SIZE = 512

DEFAULT_MIN_BPM = 80.0
DEFAULT_MAX_BPM = 180.0


def compute_novelty(
    samples: np.ndarray,
    frame_size: int = FRAME_SIZE,
    hop_size: int = HOP_SIZE
) -> np.ndarray:
    """
    Half-wave rectified first difference of per-frame energy.

    The energy before the first frame counts as zero. Returns an empty
    array when the signal is shorter than one frame.
    """
    if len(samples) < frame_size:
        return np.zeros(0)

    starts = range(0, len(samples) - frame_size + 1, hop_size)
    energies = np.array([np.sum(samples[s:s + frame_size] ** 2) for s in starts])

    diffs = np.diff(energies, prepend=0.0)
    return np.maximum(diffs, 0.0)


def _autocorrelation(x: np.ndarray, lag: int) -> float:
    return float(np.dot(x[:len(x) - lag], x[lag:]))


def estimate_bpm(
    audio: AudioBuffer,
    min_bpm: float = DEFAULT_MIN_BPM,
    max_bpm: float = DEFAULT_MAX_BPM
) -> float:
    """
    Estimate the tempo of an audio signal.

    Returns:
        BPM, or 0.0 when the tempo could not be estimated
    """
    if audio.sample_rate <= 0 or len(audio) == 0:
        logger.debug("BPM skipped: empty audio", sample_rate=audio.sample_rate)
        return 0.0
    if min_bpm <= 0 or max_bpm <= 0 or min_bpm >= max_bpm:
        logger.debug("BPM skipped: invalid range", min_bpm=min_bpm, max_bpm=max_bpm)
        return 0.0

    novelty = compute_novelty(audio.samples)
    if len(novelty) < 4:
        logger.debug("BPM skipped: not enough frames", frames=len(novelty))
        return 0.0
    if not np.any(novelty > 0):
        # No energy onsets at all (silence or constant level)
        logger.debug("BPM skipped: no onsets")
        return 0.0

    novelty = novelty - np.mean(novelty)

    hop_seconds = HOP_SIZE / audio.sample_rate
    min_period = 60.0 / max_bpm
    max_period = 60.0 / min_bpm

    min_lag = int(max(1.0, math.floor(min_period / hop_seconds)))
    max_lag = int(math.ceil(max_period / hop_seconds))
    max_lag = min(max_lag, len(novelty) - 1)
    if min_lag >= max_lag:
        logger.debug("BPM skipped: lag range empty", min_lag=min_lag, max_lag=max_lag)
        return 0.0

    best_score = -math.inf
    best_lag = min_lag
    for lag in range(min_lag, max_lag + 1):
        score = _autocorrelation(novelty, lag)
        if score > best_score:
            best_score = score
            best_lag = lag

    period_seconds = best_lag * hop_seconds
    if period_seconds <= 0:
        return 0.0

    bpm = 60.0 / period_seconds
    logger.debug("BPM estimated", bpm=bpm, lag=best_lag, min_lag=min_lag, max_lag=max_lag)
    return bpm
