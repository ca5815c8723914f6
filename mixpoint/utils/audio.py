"""
Audio file utilities for decoding tracks into analysis buffers
"""

from pathlib import Path
from typing import Optional

import numpy as np
import librosa
import soundfile as sf
import structlog

from mixpoint.models import AudioBuffer

logger = structlog.get_logger()

DEFAULT_TARGET_PEAK = 0.99
SILENCE_THRESHOLD = 1e-6


class AudioDecodeError(Exception):
    """Raised when an audio file cannot be decoded into a buffer."""


def to_mono_normalized(
    data: np.ndarray,
    target_peak: float = DEFAULT_TARGET_PEAK
) -> np.ndarray:
    """
    Average channels to mono and scale down peaks above target_peak.

    Args:
        data: Samples shaped (frames,) or (frames, channels)
        target_peak: Maximum allowed absolute amplitude

    Returns:
        Mono float64 samples
    """
    data = np.asarray(data, dtype=np.float64)
    mono = data.mean(axis=1) if data.ndim == 2 else data

    if len(mono) == 0:
        return mono

    peak = float(np.max(np.abs(mono)))
    # Quiet audio is left alone; only clipping-prone audio is scaled
    if peak > SILENCE_THRESHOLD and peak > target_peak:
        mono = mono * (target_peak / peak)
    return mono


def load_audio(
    file_path: str,
    target_peak: float = DEFAULT_TARGET_PEAK,
    target_sample_rate: Optional[int] = None
) -> AudioBuffer:
    """
    Load an audio file as a normalized mono buffer.

    Args:
        file_path: Path to the audio file
        target_peak: Peak ceiling applied after the mono mixdown
        target_sample_rate: Resample to this rate when given

    Returns:
        AudioBuffer with the original channel count recorded

    Raises:
        AudioDecodeError: missing file, unreadable format, invalid
            metadata or short read
    """
    path = Path(file_path)
    logger.info("Loading audio", file_path=str(path), target_sr=target_sample_rate)

    if not path.exists():
        raise AudioDecodeError(f"file does not exist: {path}")
    if not path.is_file():
        raise AudioDecodeError(f"path is not a regular file: {path}")

    try:
        with sf.SoundFile(str(path)) as f:
            channels = f.channels
            sample_rate = f.samplerate
            frames = f.frames

            if channels <= 0 or sample_rate <= 0:
                raise AudioDecodeError(f"Invalid audio metadata in file: {path}")

            data = f.read(frames, dtype="float32", always_2d=True)
    except RuntimeError as e:
        logger.error("Failed to load audio", file_path=str(path), error=str(e))
        raise AudioDecodeError(f"Failed to open audio file: {path}") from e

    if len(data) != frames:
        raise AudioDecodeError(f"Short read from file: {path}")

    samples = to_mono_normalized(data, target_peak=target_peak)

    if target_sample_rate and target_sample_rate != sample_rate:
        samples = resample_audio(samples, sample_rate, target_sample_rate)
        sample_rate = target_sample_rate

    logger.info(
        "Audio loaded successfully",
        duration=get_audio_duration(samples, sample_rate),
        sample_rate=sample_rate,
        channels=channels,
        samples=len(samples)
    )

    return AudioBuffer(samples=samples, sample_rate=sample_rate, channels=channels)


def get_audio_duration(audio: np.ndarray, sample_rate: int) -> float:
    """
    Get duration of audio in seconds.

    Args:
        audio: Audio data
        sample_rate: Sample rate

    Returns:
        Duration in seconds (0.0 for a non-positive sample rate)
    """
    if sample_rate <= 0:
        return 0.0
    return len(audio) / sample_rate


def resample_audio(audio: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """
    Resample audio to a different sample rate.

    Args:
        audio: Input audio
        orig_sr: Original sample rate
        target_sr: Target sample rate

    Returns:
        Resampled audio
    """
    if orig_sr == target_sr:
        return audio
    return librosa.resample(audio, orig_sr=orig_sr, target_sr=target_sr)
