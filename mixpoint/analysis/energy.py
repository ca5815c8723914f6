"""
Energy Curve Module
Windowed RMS loudness over mono audio
"""

import numpy as np
import structlog

from mixpoint.models import AudioBuffer, EnergyCurve

logger = structlog.get_logger()


def compute_energy_curve(audio: AudioBuffer, window_seconds: float) -> EnergyCurve:
    """
    Compute RMS energy over consecutive non-overlapping windows.

    The final window may be shorter than the others. Invalid input
    (no samples, bad sample rate, window rounding to zero samples)
    yields an empty curve.

    Args:
        audio: Mono audio buffer
        window_seconds: Window duration in seconds

    Returns:
        EnergyCurve with one RMS value per window
    """
    if audio.sample_rate <= 0 or len(audio) == 0 or window_seconds <= 0:
        logger.debug(
            "Energy curve skipped",
            samples=len(audio),
            sample_rate=audio.sample_rate,
            window_seconds=window_seconds,
        )
        return EnergyCurve(values=np.zeros(0), window_seconds=window_seconds)

    window_samples = int(round(window_seconds * audio.sample_rate))
    if window_samples <= 0:
        logger.debug("Energy window rounds to zero samples", window_seconds=window_seconds)
        return EnergyCurve(values=np.zeros(0), window_seconds=window_seconds)

    samples = audio.samples
    rms_values = [
        np.sqrt(np.mean(samples[start:start + window_samples] ** 2))
        for start in range(0, len(samples), window_samples)
    ]

    return EnergyCurve(values=np.array(rms_values), window_seconds=window_seconds)
