"""
Main audio analyzer orchestrating all analysis tasks
Runs the tempo, key and energy analyzers, then scores the transition
"""

from typing import Union

import structlog

from mixpoint.analysis.bpm import DEFAULT_MAX_BPM, DEFAULT_MIN_BPM, estimate_bpm
from mixpoint.analysis.camelot import key_to_camelot
from mixpoint.analysis.energy import compute_energy_curve
from mixpoint.analysis.key import estimate_key
from mixpoint.analysis.transition import find_best_transition
from mixpoint.models import AudioBuffer, TrackAnalysis, TransitionSuggestion

logger = structlog.get_logger()

DEFAULT_WINDOW_SECONDS = 0.5


def analyze_audio(
    audio: AudioBuffer,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    min_bpm: float = DEFAULT_MIN_BPM,
    max_bpm: float = DEFAULT_MAX_BPM
) -> TrackAnalysis:
    """
    Perform tempo, key and energy analysis on a decoded track.

    Analyzers that cannot produce a result leave their "unknown" value
    in the record; analysis always completes.

    Args:
        audio: Decoded mono audio
        window_seconds: Energy window duration
        min_bpm: Lower bound of the tempo search
        max_bpm: Upper bound of the tempo search

    Returns:
        TrackAnalysis for the track
    """
    logger.info("Starting track analysis", duration=audio.duration, sample_rate=audio.sample_rate)

    bpm = estimate_bpm(audio, min_bpm=min_bpm, max_bpm=max_bpm)
    logger.info("BPM detected", bpm=round(bpm, 2) if bpm > 0 else None)

    key = estimate_key(audio)
    logger.info("Key detected", key=key.label if key else None, camelot=key_to_camelot(key))

    energy_curve = compute_energy_curve(audio, window_seconds)
    logger.info("Energy calculated", windows=len(energy_curve), window_seconds=window_seconds)

    return TrackAnalysis(
        bpm=bpm,
        key=key,
        energy_curve=energy_curve,
        duration=audio.duration,
        frames=len(audio),
        sample_rate=audio.sample_rate,
        channels=audio.channels,
    )


def suggest_transition(
    track_a: Union[AudioBuffer, TrackAnalysis],
    track_b: Union[AudioBuffer, TrackAnalysis],
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    min_bpm: float = DEFAULT_MIN_BPM,
    max_bpm: float = DEFAULT_MAX_BPM
) -> TransitionSuggestion:
    """
    Suggest the best transition from track A into track B.

    Each track may be given as decoded audio (analyzed here) or as an
    existing TrackAnalysis.
    """
    analysis_a = _as_analysis(track_a, window_seconds, min_bpm, max_bpm)
    analysis_b = _as_analysis(track_b, window_seconds, min_bpm, max_bpm)

    suggestion = find_best_transition(analysis_a, analysis_b)
    logger.info("Transition suggested", **suggestion.to_dict())
    return suggestion


def _as_analysis(
    track: Union[AudioBuffer, TrackAnalysis],
    window_seconds: float,
    min_bpm: float,
    max_bpm: float
) -> TrackAnalysis:
    if isinstance(track, TrackAnalysis):
        return track
    return analyze_audio(track, window_seconds=window_seconds, min_bpm=min_bpm, max_bpm=max_bpm)
